# app/db.py
# =================================================================================
# 🗄️ CONFIGURACIÓN Y CONEXIÓN A LA BASE DE DATOS
# ---------------------------------------------------------------------------------
# Centraliza la conexión al almacén de socios y listas de invitados con SQLAlchemy.
# - SQLite en desarrollo/tests, PostgreSQL en producción.
# - build_engine() es reutilizable (tests crean su propio engine en memoria).
# - El resto del núcleo nunca ve la sesión: la usan los adaptadores de app/crud.
# =================================================================================

import os
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from loguru import logger


def _resolve_database_url() -> str:
    """Devuelve la URL efectiva aplicando la política FORCE_DB (sin fallback silencioso en prod)."""
    url = os.getenv("DATABASE_URL", "").strip()
    force_db = os.getenv("FORCE_DB", "postgres").strip().lower()

    # Placeholder de plataforma sin resolver (p. ej. '${{Postgres.DATABASE_URL}}').
    if url.startswith("${{") and url.endswith("}}"):
        logger.warning("DATABASE_URL parece un placeholder sin resolver: {}", url)
        url = ""

    if url:
        return url

    if force_db == "postgres":
        raise RuntimeError(
            "FATAL: DATABASE_URL no está disponible y FORCE_DB=postgres. "
            "Se aborta para evitar un fallback accidental a SQLite en producción."
        )

    logger.warning("DATABASE_URL está vacía. Usando fallback a SQLite local.")
    project_root = os.path.abspath(os.path.join(os.path.dirname(os.path.abspath(__file__)), ".."))
    return f"sqlite:///{os.path.join(project_root, 'club.db')}"


def build_engine(url: str) -> Engine:
    """Crea el engine con las opciones adecuadas para cada motor."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}, "pool_pre_ping": True}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # Una sola conexión compartida: si no, cada sesión vería una BD vacía.
            kwargs["poolclass"] = StaticPool
        logger.info("DB in use → SQLite")
        return create_engine(url, **kwargs)

    logger.info("DB in use → PostgreSQL (o no-SQLite)")
    return create_engine(url, pool_pre_ping=True)


DATABASE_URL = _resolve_database_url()
engine: Optional[Engine] = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Dependencia de FastAPI para inyectar una sesión de BD por petición."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def log_db_path_on_startup() -> None:
    """Escribe en los logs qué motor de base de datos se está utilizando al arrancar."""
    try:
        url = engine.url
        logger.info("DB driver in use → {}", url.drivername)
        if url.drivername == "sqlite":
            db_file = getattr(url, "database", None)
            abs_path = os.path.abspath(db_file) if db_file else "<memory>"
            logger.info("DB path → {} (abs={})", db_file, abs_path)
    except Exception as e:
        logger.warning("No se pudo resolver la información de la BD: {}", e)
