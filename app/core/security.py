# app/core/security.py
from fastapi import Depends, HTTPException, status
from fastapi.security.api_key import APIKeyHeader

from app.core import config

_admin_key_header = APIKeyHeader(name="x-admin-key", auto_error=False)
_staff_key_header = APIKeyHeader(name="x-staff-key", auto_error=False)


def require_admin(api_key: str = Depends(_admin_key_header)) -> None:
    if not config.ADMIN_API_KEY or api_key != config.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing admin key",
        )


def require_staff(
    staff_key: str = Depends(_staff_key_header),
    admin_key: str = Depends(_admin_key_header),
) -> None:
    # La administración también puede operar la portería.
    if config.STAFF_API_KEY and staff_key == config.STAFF_API_KEY:
        return
    if config.ADMIN_API_KEY and admin_key == config.ADMIN_API_KEY:
        return
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing staff key",
    )
