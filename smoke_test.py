# smoke_test.py  # Verificación rápida (smoke test) end-to-end de la API del club contra un servidor levantado.

import os                               # Variables de entorno (URL, claves).
import sys                              # Código de salida.
import time                             # Datos únicos por corrida.
from datetime import date               # "Hoy" para la lista de invitados.
from typing import Any, Dict, Optional  # Tipado.

import requests                         # Cliente HTTP.

# -------------------------------
# ⚙️ Configuración (por entorno)
# -------------------------------
BASE_URL = os.getenv("SMOKE_BASE_URL", "http://127.0.0.1:8000").rstrip("/")
ADMIN_API_KEY = os.getenv("SMOKE_ADMIN_KEY", os.getenv("ADMIN_API_KEY", ""))
STAFF_API_KEY = os.getenv("SMOKE_STAFF_KEY", os.getenv("STAFF_API_KEY", "")) or ADMIN_API_KEY

NOW = int(time.time())
MEMBER_NUMBER = f"SMK{NOW}"
TITULAR_DNI = str(NOW)[-8:]                                        # 8 dígitos únicos por corrida.
GUEST_DNI = str(NOW + 1)[-8:]
TODAY = date.today().isoformat()                                   # Se asume que el servidor está en la misma TZ.

ADMIN_HEADERS = {"x-admin-key": ADMIN_API_KEY}
STAFF_HEADERS = {"x-staff-key": STAFF_API_KEY}

# -------------------------------
# 🧰 Utilidades
# -------------------------------
def call(method: str, path: str, payload: Optional[Dict[str, Any]] = None,
         headers: Optional[Dict[str, str]] = None) -> requests.Response:
    return requests.request(method, f"{BASE_URL}{path}", json=payload, headers=headers or {}, timeout=15)

def pretty(ok: bool) -> str:
    return "✅" if ok else "❌"

# -------------------------------
# Pasos
# -------------------------------
def check_health() -> bool:
    try:
        return call("GET", "/api/health").status_code == 200
    except requests.RequestException:
        return False

def import_titular() -> Optional[int]:
    body = {"items": [{
        "member_number": MEMBER_NUMBER,
        "first_name": "Smoke",
        "last_name": "Test",
        "dni": TITULAR_DNI,
        "status": "active",
    }]}
    r = call("POST", "/api/admin/import-members", body, ADMIN_HEADERS)
    if r.status_code != 200 or r.json().get("created", 0) + r.json().get("updated", 0) != 1:
        print(f"   • import: HTTP {r.status_code} {r.text}")
        return None
    found = call("GET", f"/api/access/search?q={MEMBER_NUMBER}", headers=STAFF_HEADERS).json()
    return found[0]["id"] if found else None

def guest_list_flow(titular_id: int) -> bool:
    base = f"/api/members/{titular_id}/guest-lists/{TODAY}"
    r = call("POST", f"{base}/guests", {"first_name": "Ana", "last_name": "Ruiz", "dni": GUEST_DNI})
    if r.status_code != 201:
        print(f"   • add guest: HTTP {r.status_code} {r.text}")
        return False
    r = call("POST", f"{base}/send")
    return r.status_code == 200 and r.json()["state"] == "sent"

def door_flow(titular_id: int) -> bool:
    guest_path = f"/api/access/members/{titular_id}/guests/{GUEST_DNI}/admit"
    r = call("POST", guest_path, {"payment_method": "cash"}, STAFF_HEADERS)
    if r.status_code != 409:                                       # Compuerta cerrada: todavía no entró nadie.
        print(f"   • gate: esperado 409, llegó {r.status_code}")
        return False
    r = call("POST", "/api/access/member-entries", {"titular_id": titular_id, "dni": TITULAR_DNI}, STAFF_HEADERS)
    if r.status_code != 200:
        print(f"   • member entry: HTTP {r.status_code} {r.text}")
        return False
    r = call("POST", guest_path, {"payment_method": "cash"}, STAFF_HEADERS)
    return r.status_code == 200

# -------------------------------
# 🏁 Orquestación
# -------------------------------
def run() -> int:
    print("=== Smoke Test for Club Access API ===")
    print(f"BASE_URL = {BASE_URL}")

    ok1 = check_health();                print(f"[1/4] Health: {pretty(ok1)}")
    if not ok1: return 1

    titular_id = import_titular();       print(f"[2/4] Admin import: {pretty(titular_id is not None)}")
    if titular_id is None: return 1

    ok3 = guest_list_flow(titular_id);   print(f"[3/4] Guest list (add + send): {pretty(ok3)}")
    if not ok3: return 1

    ok4 = door_flow(titular_id);         print(f"[4/4] Door (gate + admit): {pretty(ok4)}")
    if not ok4: return 1

    print("🎉 Smoke test PASSED – admission core flows look healthy.")
    return 0

if __name__ == "__main__":
    sys.exit(run())
