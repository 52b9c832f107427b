# scripts/load_members.py
# Carga y validación del padrón de socios (CSV/Excel) con normalizaciones y reporte de errores.

from __future__ import annotations

import re
from typing import List, Optional, Tuple

import pandas as pd

# --- Constantes de Configuración ---
REQUIRED_COLUMNS: List[str] = ["member_number", "first_name", "last_name", "dni"]
EXPORT_COLUMNS = ["member_number", "first_name", "last_name", "dni", "email", "birth_date", "status"]
STATUS_ALIASES = {
    "": "active",
    "active": "active",
    "activo": "active",
    "inactive": "inactive",
    "inactivo": "inactive",
    "pending_validation": "pending_validation",
    "pendiente": "pending_validation",
    "pendiente validacion": "pending_validation",
    "pendiente validación": "pending_validation",
}
DNI_RE = re.compile(r"^\d{7,8}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# --- Helpers de normalización/validación ---
def normalize_dni(dni: str) -> str:
    """Quita puntos, espacios y guiones: '12.345.678' -> '12345678'."""
    if not isinstance(dni, str):
        return ""
    return re.sub(r"[\s.\-]", "", dni.strip())


def parse_birth_date(raw: str) -> Optional[str]:
    """Acepta 'dd/mm/aaaa' o ISO; devuelve 'aaaa-mm-dd' o None si no se puede interpretar."""
    raw = (raw or "").strip()
    if not raw:
        return None
    iso = re.match(r"^\d{4}-\d{2}-\d{2}$", raw) is not None
    parsed = pd.to_datetime(raw, dayfirst=not iso, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date().isoformat()


def _read_table(
    file_path: str, *, sheet_name: Optional[str] = None, csv_sep: str = ",", csv_encoding: str = "utf-8"
) -> pd.DataFrame:
    """Lee .xlsx/.xls o .csv con dtype=str y fillna('')."""
    if file_path.lower().endswith((".xlsx", ".xls")):
        return pd.read_excel(file_path, dtype=str, sheet_name=sheet_name or 0).fillna("")
    return pd.read_csv(file_path, dtype=str, sep=csv_sep, encoding=csv_encoding).fillna("")


# --- Función Principal de Validación ---
def validate_members_df(df: pd.DataFrame, strict: bool = True) -> Tuple[pd.DataFrame, List[str]]:
    """
    Devuelve (df_validado, errores). Las filas con errores no pasan al df validado.
    Si strict=True y hay errores, lanza ValueError.
    """
    df = df.copy()
    df.columns = df.columns.str.strip().str.lower()
    missing_cols = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing_cols:
        raise ValueError(f"Faltan columnas obligatorias: {', '.join(missing_cols)}")

    errors: List[str] = []
    validated_rows = []

    for idx, row in df.iterrows():
        row_num = idx + 2                                      # +1 por encabezado, +1 por base 1.
        row_errors: List[str] = []

        member_number = (row.get("member_number", "") or "").strip()
        first_name = (row.get("first_name", "") or "").strip()
        last_name = (row.get("last_name", "") or "").strip()
        dni = normalize_dni(row.get("dni", ""))
        email = (row.get("email", "") or "").strip().lower() or None
        status_raw = (row.get("status", "") or "").strip().lower()
        birth_raw = row.get("birth_date", "") or ""
        birth_date = parse_birth_date(birth_raw)

        if not member_number:
            row_errors.append(f"Fila {row_num}: 'member_number' está vacío.")
        if not first_name or not last_name:
            row_errors.append(f"Fila {row_num}: nombre y apellido son obligatorios.")
        if not DNI_RE.match(dni):
            row_errors.append(f"Fila {row_num}: DNI '{row.get('dni')}' inválido (7 u 8 dígitos).")
        if email and not EMAIL_RE.match(email):
            row_errors.append(f"Fila {row_num}: email '{email}' parece inválido.")
        if status_raw not in STATUS_ALIASES:
            row_errors.append(f"Fila {row_num}: estado '{row.get('status')}' no válido.")
        if birth_raw.strip() and birth_date is None:
            row_errors.append(f"Fila {row_num}: fecha de nacimiento '{birth_raw}' no válida.")

        if row_errors:
            errors.extend(row_errors)
            continue

        validated_rows.append({
            "member_number": member_number,
            "first_name": first_name,
            "last_name": last_name,
            "dni": dni,
            "email": email,
            "birth_date": birth_date,
            "status": STATUS_ALIASES[status_raw],
        })

    clean_df = pd.DataFrame(validated_rows, columns=EXPORT_COLUMNS)

    # --- Duplicados (warning) ---
    for col in ["member_number", "dni"]:
        dups = clean_df[clean_df[col].duplicated(keep=False)]
        if not dups.empty:
            errors.append(f"Posibles duplicados en '{col}': {', '.join(sorted(set(dups[col])))}")

    if strict and errors:
        raise ValueError("Errores de validación:\n- " + "\n- ".join(errors))

    return clean_df, errors


def load_and_validate_member_list(
    file_path: str,
    strict: bool = True,
    *,
    sheet_name: Optional[str] = None,
    csv_sep: str = ",",
    csv_encoding: str = "utf-8",
) -> Tuple[pd.DataFrame, List[str]]:
    try:
        df = _read_table(file_path, sheet_name=sheet_name, csv_sep=csv_sep, csv_encoding=csv_encoding)
    except FileNotFoundError:
        raise FileNotFoundError(f"No se encontró el archivo: {file_path}")
    except (ValueError, OSError) as e:
        raise ValueError(f"No se pudo leer el archivo '{file_path}': {e}")
    return validate_members_df(df, strict=strict)


# --- DataFrame -> records (list[dict]) listo para el importador admin ---
def df_to_records(df: pd.DataFrame) -> List[dict]:
    """Columnas esperadas por POST /api/admin/import-members, con None en vez de NaN."""
    out = df[EXPORT_COLUMNS].astype(object).where(df[EXPORT_COLUMNS].notna(), None)
    return out.to_dict(orient="records")


if __name__ == "__main__":
    print("load_members.py: módulo utilitario. Úsalo desde scripts/import_members.py")
