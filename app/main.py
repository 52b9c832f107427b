# app/main.py                                                                                   # Archivo principal de la API del club.

# =================================================================================
# 🧠 NÚCLEO DE LA APLICACIÓN API (FastAPI)
# ---------------------------------------------------------------------------------
# - Carga .env antes de importar la configuración
# - MAINTENANCE_MODE=1 → app mínima que responde 503 a todo
# - Configura CORS, log a archivo opcional (LOG_DIR) y el manejo de PersistenceFailure
# - Registra routers: meta, socio (listas), portería (access), admin
# =================================================================================

import os
from pathlib import Path

from dotenv import load_dotenv                                                                  # Carga variables desde .env.
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

load_dotenv(dotenv_path=Path('.') / '.env')                                                     # Antes de leer app.core.config.


# ================================================================
# 🧱 MODO MANTENIMIENTO (Control temporal desde variable de entorno)
# ================================================================
def create_maintenance_app() -> FastAPI:
    maintenance = FastAPI(title="API en mantenimiento")

    @maintenance.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"])
    async def maintenance_page(path: str):
        """Responde a cualquier ruta y método con mensaje neutro de mantenimiento."""
        return JSONResponse(
            status_code=503,
            content={
                "status": "offline",
                "message": "🌙 El sistema está en mantenimiento. Vuelve más tarde."
            }
        )

    logger.warning("🚧 API arrancada en MODO MANTENIMIENTO. Todos los endpoints reales están desactivados.")
    return maintenance


# ================================================================
# 🏛️ API real
# ================================================================
def create_app() -> FastAPI:
    from fastapi.middleware.cors import CORSMiddleware                                          # Middleware CORS.

    from app.admission.results import PersistenceFailure
    from app.core import config
    from app.db import log_db_path_on_startup                                                   # Loguea el motor de BD real.
    from app.routers import access, admin, guest_lists                                          # Routers de la aplicación.
    from app import meta                                                                        # Router de catálogos.

    if config.LOG_DIR:                                                                          # Log a archivo con rotación semanal.
        logger.add(
            os.path.join(config.LOG_DIR, "club_{time}.log"),
            rotation="1 week",
            retention=f"{config.LOG_RETENTION_WEEKS} weeks",
            level="INFO",
        )

    api = FastAPI(
        title="API de Acceso del Club",
        description="Admisión de socios, listas diarias de invitados y cupo de cumpleaños",
        version="1.0.0",
    )

    api.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,                                                      # Frontends conocidos (desde el entorno).
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # El esquema en producción lo gestiona Alembic (no hay create_all aquí).

    @api.exception_handler(PersistenceFailure)
    async def _persistence_failure(request: Request, exc: PersistenceFailure):                 # Almacén caído o conflicto de versión.
        logger.error("PersistenceFailure en {} {}: {}", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"detail": {"code": "persistence_failure", "message": str(exc)}},
        )

    @api.on_event("startup")
    def _startup_db_trace() -> None:
        log_db_path_on_startup()

    @api.get("/api/health", tags=["meta"])
    def health():
        return {"status": "ok"}

    api.include_router(meta.router)
    api.include_router(guest_lists.router)
    api.include_router(access.router)
    api.include_router(admin.router)

    logger.info("[BOOT] TZ={} | RESTRICTED={} | LOG_DIR={}", config.CLUB_TZ_NAME,
                ",".join(config.RESTRICTED_BIRTHDAY_DATES), config.LOG_DIR or "-")
    return api


app = create_maintenance_app() if os.getenv("MAINTENANCE_MODE") == "1" else create_app()
