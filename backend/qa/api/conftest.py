"""
Fixtures para tests de integración API.
Usa TestClient de FastAPI contra la app real y la BD en memoria de qa/conftest.py.
"""
import pytest
from fastapi.testclient import TestClient

from almacen.main import app
from almacen.security.auth import create_access_token


def token_para(role: str, username: str = "usuario.prueba") -> str:
    return create_access_token({"sub": username, "role": role})


@pytest.fixture
def client():
    """Cliente HTTP para tests de API sin autenticación."""
    return TestClient(app)


@pytest.fixture
def client_auth(client):
    """Cliente con token de un GERENTE."""
    client.headers["Authorization"] = f"Bearer {token_para('GERENTE', 'gerente')}"
    return client


@pytest.fixture
def producto_api(client_auth):
    """Crea un producto por la API y devuelve el JSON"""

    def _crear(codigo="P-001", stock=10, costo="5.00", **extra):
        payload = {
            "codigo": codigo,
            "nombre": f"Producto {codigo}",
            "costo_unitario": costo,
            "stock_actual": stock,
            **extra,
        }
        r = client_auth.post("/inventario/productos", json=payload)
        assert r.status_code == 200, r.text
        return r.json()

    return _crear


@pytest.fixture
def auth_de():
    """Headers de autorización para un rol dado"""

    def _headers(role: str):
        return {"Authorization": f"Bearer {token_para(role)}"}

    return _headers
