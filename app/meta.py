# app/meta.py  # Router de metadatos para el frontend de portería y socios.

from fastapi import APIRouter  # Importa el enrutador de FastAPI para definir rutas simples.
from typing import Dict, List  # Tipado para claridad en la respuesta.

from app.core import config
from app.models import EntryTypeEnum, GuestListStateEnum, PaymentMethodEnum, PersonRoleEnum

router = APIRouter(prefix="/api/meta", tags=["meta"])  # Crea un router con prefijo /api/meta.

@router.get("/options")
def get_meta_options() -> Dict[str, List[str]]:
    """
    Devuelve listas de CÓDIGOS (neutros) para que el frontend los traduzca.
    """
    return {
        "payment_methods": [m.value for m in PaymentMethodEnum],
        "guest_list_states": [s.value for s in GuestListStateEnum],
        "person_roles": [r.value for r in PersonRoleEnum],
        "entry_types": [e.value for e in EntryTypeEnum],
        "restricted_birthday_dates": list(config.RESTRICTED_BIRTHDAY_DATES),  # 'MM-DD' o 'YYYY-MM-DD'.
    }
