# scripts/import_members.py
# =============================================================================
# 🚚 Importador masivo del padrón de socios hacia el backend (endpoint admin).
# - Valida/normaliza el archivo (xlsx/csv) con load_and_validate_member_list().
# - Envía en lotes a:  POST /api/admin/import-members
# - Requiere ADMIN_API_KEY (cabecera: x-admin-key).
# =============================================================================

import os
import sys
import json
import argparse
from pathlib import Path

import requests
from dotenv import load_dotenv

# Permite ejecutar el script desde la raíz o desde /scripts.
SCRIPTS_DIR = Path(__file__).resolve().parent
if str(SCRIPTS_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPTS_DIR))

from load_members import load_and_validate_member_list, df_to_records  # noqa: E402

load_dotenv()

API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8000")
ADMIN_API_KEY = os.getenv("ADMIN_API_KEY", "")

ENDPOINT = f"{API_BASE_URL.rstrip('/')}/api/admin/import-members"


def _post_batch(records: list[dict], timeout: int = 60) -> dict:
    """Envía un lote al endpoint admin y devuelve el JSON de respuesta (o error claro)."""
    headers = {
        "Content-Type": "application/json",
        "x-admin-key": ADMIN_API_KEY,
    }
    resp = requests.post(ENDPOINT, headers=headers, data=json.dumps({"items": records}), timeout=timeout)
    if resp.status_code != 200:
        try:
            detail = resp.json()
        except ValueError:
            detail = resp.text
        raise RuntimeError(f"HTTP {resp.status_code} - {detail}")
    return resp.json()


def main():
    parser = argparse.ArgumentParser(description="Importador masivo del padrón de socios.")
    parser.add_argument("file", help="Ruta al archivo .xlsx/.xls o .csv")
    parser.add_argument("--sheet", default=None, help="Nombre de hoja en Excel (opcional)")
    parser.add_argument("--sep", default=",", help="Separador para CSV (por defecto ',')")
    parser.add_argument("--encoding", default="utf-8", help="Encoding para CSV (por defecto utf-8)")
    parser.add_argument("--batch", type=int, default=200, help="Tamaño de lote (por defecto 200)")
    parser.add_argument("--strict", action="store_true", help="Falla si hay cualquier error de validación")
    parser.add_argument("--dry-run", action="store_true", help="Solo valida y muestra vista previa; no importa")
    args = parser.parse_args()

    print(f"📥 Cargando archivo: {args.file}")
    try:
        df, errors = load_and_validate_member_list(
            args.file,
            strict=args.strict,
            sheet_name=args.sheet,
            csv_sep=args.sep,
            csv_encoding=args.encoding,
        )
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Error al validar: {e}")
        sys.exit(1)

    if errors:
        print("⚠️  Advertencias/errores detectados en validación:")
        print(" - " + "\n - ".join(errors))

    if df.empty:
        print("⛔ No hay registros para importar (DataFrame vacío).")
        sys.exit(1)

    records = df_to_records(df)
    print(f"📦 Socios preparados para importar: {len(records)}")

    if args.dry_run:
        print("🧪 DRY-RUN activo: no se enviará nada al backend.")
        print(json.dumps(records[:3], indent=2, ensure_ascii=False))
        sys.exit(0)

    batch_size = max(1, args.batch)
    total = len(records)
    created = updated = skipped = 0
    all_errors: list[str] = []

    print(f"➡️  Importando en lotes de {batch_size} hacia {ENDPOINT}")
    for i in range(0, total, batch_size):
        chunk = records[i:i + batch_size]
        try:
            result = _post_batch(chunk)
        except (requests.RequestException, RuntimeError) as e:
            msg = f"Lote {i//batch_size + 1} (filas {i+1}-{min(i+batch_size, total)}): {e}"
            print(f"   ✗ {msg}")
            all_errors.append(msg)
            skipped += len(chunk)
            continue
        created += int(result.get("created", 0))
        updated += int(result.get("updated", 0))
        skipped += int(result.get("skipped", 0))
        all_errors.extend(result.get("errors", []) or [])
        print(f"   ✓ Lote {i//batch_size + 1}: +{result.get('created', 0)} creados, "
              f"+{result.get('updated', 0)} actualizados, +{result.get('skipped', 0)} omitidos")

    print("\n✅ Resumen de importación:")
    print(json.dumps(
        {"created": created, "updated": updated, "skipped": skipped, "errors": all_errors},
        indent=2, ensure_ascii=False
    ))


if __name__ == "__main__":
    main()
