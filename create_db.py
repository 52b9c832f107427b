# create_db.py

# =================================================================================
# 🏗️ SCRIPT DE CREACIÓN DE LA BASE DE DATOS (desarrollo local)
# ---------------------------------------------------------------------------------
# Crea todas las tablas de app/models.py sobre la BD de DATABASE_URL.
# En producción el esquema lo gestiona Alembic (`alembic upgrade head`).
# Uso: FORCE_DB=sqlite python create_db.py [--demo]
# =================================================================================

import argparse
from datetime import date

from loguru import logger

from app.db import engine, Base, SessionLocal
from app import models  # Registra las tablas en Base.metadata.


def create_database_tables() -> None:
    logger.info("Creando tablas en la base de datos...")
    Base.metadata.create_all(bind=engine)
    logger.info("✔️ Base de datos y tablas creadas correctamente.")


def seed_demo() -> None:
    """Un titular activo con un familiar y un adherente, para probar portería a mano."""
    db = SessionLocal()
    try:
        if db.query(models.Titular).filter(models.Titular.member_number == "DEMO1").first():
            logger.info("Datos demo ya cargados.")
            return
        titular = models.Titular(
            member_number="DEMO1",
            first_name="Marta",
            last_name="Gómez",
            dni="20111222",
            birth_date=date(1980, 5, 17),
            status=models.MemberStatusEnum.active,
        )
        titular.family_members.append(
            models.FamilyMember(first_name="Lucas", last_name="Gómez", dni="45111222",
                                birth_date=date(2012, 9, 3), relationship="Hijo/a")
        )
        titular.adherents.append(
            models.Adherent(first_name="Rosa", last_name="Pérez", dni="14111222",
                            status=models.AdherentStatusEnum.active)
        )
        db.add(titular)
        db.commit()
        logger.info("Datos demo cargados (titular id={}).", titular.id)
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Crea las tablas del club (desarrollo).")
    parser.add_argument("--demo", action="store_true", help="Carga un grupo familiar de ejemplo")
    args = parser.parse_args()
    create_database_tables()
    if args.demo:
        seed_demo()
