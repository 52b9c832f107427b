# app/core/config.py

# =================================================================================
# ⚙️ CONFIGURACIÓN CENTRAL (variables de entorno)
# ---------------------------------------------------------------------------------
# - Lee la configuración del club desde el entorno (.env cargado en app/main.py).
# - Aplica defaults seguros cuando una variable falta o viene mal formada.
# - Las reglas de negocio fijas (cupo de cumpleaños, ventana de 5 días) viven en
#   app/admission/*; aquí solo va lo que cambia entre despliegues.
# =================================================================================

import os                                      # Acceso a variables de entorno.
from typing import List                        # Tipado para listas.
from zoneinfo import ZoneInfo                  # Zona horaria nativa (PEP 615).

from loguru import logger                      # Logger para avisar de valores inválidos.


def _env_int(name: str, default: int) -> int:
    """Lee un entero del entorno; si no es válido devuelve el default."""
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        logger.warning("Valor no numérico en {}; se usa {}", name, default)
        return default


def _env_list(name: str, default: str) -> List[str]:
    """Lee una lista separada por comas (ignora vacíos y espacios)."""
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


# --- Zona horaria del club (define qué es "hoy" en portería) ---
CLUB_TZ_NAME = os.getenv("CLUB_TZ", "America/Argentina/Buenos_Aires")
try:
    CLUB_TZ = ZoneInfo(CLUB_TZ_NAME)
except Exception as e:                         # ZoneInfoNotFoundError o nombre mal formado.
    logger.warning("CLUB_TZ inválida ({}): {}. Se usa UTC.", CLUB_TZ_NAME, e)
    CLUB_TZ = ZoneInfo("UTC")

# --- Fechas sin cupo de cumpleaños: 'MM-DD' (todos los años) o 'YYYY-MM-DD' ---
RESTRICTED_BIRTHDAY_DATES = _env_list("RESTRICTED_BIRTHDAY_DATES", "12-25,01-01")

# --- Claves de API (admin y portería) ---
ADMIN_API_KEY = os.getenv("ADMIN_API_KEY", "")
STAFF_API_KEY = os.getenv("STAFF_API_KEY", "") or ADMIN_API_KEY   # Portería usa la de admin si no hay propia.

# --- CORS y logs ---
CORS_ORIGINS = _env_list("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
LOG_DIR = os.getenv("LOG_DIR", "").strip()
LOG_RETENTION_WEEKS = _env_int("LOG_RETENTION_WEEKS", 4)
