"""
Tests de API - Órdenes de compra
"""
from decimal import Decimal


def _linea(codigo, cantidad, costo):
    return {
        "fecha": "02/09/2026",
        "codigo": codigo,
        "nombre": f"Producto {codigo}",
        "cantidad": cantidad,
        "costo_unitario": costo,
    }


def test_totales_de_la_orden(client_auth):
    orden = client_auth.post("/ordenes-compra", json={"fecha": "02/09/2026"}).json()
    assert orden["codigo"] == "OC-0001"
    assert orden["productos"] == []

    client_auth.post(f"/ordenes-compra/{orden['id']}/productos", json=_linea("COT-1", 3, "10"))
    segunda = client_auth.post(f"/ordenes-compra/{orden['id']}/productos", json=_linea("COT-2", 2, "5")).json()

    data = client_auth.get(f"/ordenes-compra/{orden['id']}").json()
    assert data["cantidad"] == 5
    assert Decimal(str(data["costo"])) == Decimal("40.00")
    assert len(data["productos"]) == 2

    r = client_auth.delete(f"/ordenes-compra/{orden['id']}/productos/{segunda['id']}")
    assert r.status_code == 204

    data = client_auth.get(f"/ordenes-compra/{orden['id']}").json()
    assert data["cantidad"] == 3
    assert Decimal(str(data["costo"])) == Decimal("30.00")
    assert [p["codigo"] for p in data["productos"]] == ["COT-1"]


def test_linea_del_catalogo_mueve_stock(client_auth, producto_api):
    producto_api("P-001", stock=10)
    orden = client_auth.post("/ordenes-compra", json={"fecha": "02/09/2026"}).json()

    linea = client_auth.post(f"/ordenes-compra/{orden['id']}/productos", json=_linea("P-001", 4, "2")).json()
    assert linea["descuenta_stock"] is True
    assert Decimal(str(linea["subtotal"])) == Decimal("8.00")

    r = client_auth.patch(f"/ordenes-compra/{orden['id']}/productos/{linea['id']}", json={"cantidad": 20})
    assert r.status_code == 400

    r = client_auth.patch(f"/ordenes-compra/{orden['id']}/productos/{linea['id']}", json={"cantidad": 6})
    assert r.status_code == 200
    assert client_auth.get("/inventario/productos/codigo/P-001").json()["stock_actual"] == 4


def test_eliminar_orden(client_auth):
    orden = client_auth.post("/ordenes-compra", json={"fecha": "02/09/2026"}).json()
    assert client_auth.delete(f"/ordenes-compra/{orden['id']}").status_code == 204
    assert client_auth.get(f"/ordenes-compra/{orden['id']}").status_code == 404
    assert client_auth.get("/ordenes-compra").json() == []


def test_actualizar_fecha(client_auth):
    orden = client_auth.post("/ordenes-compra", json={"fecha": "02/09/2026"}).json()
    r = client_auth.patch(f"/ordenes-compra/{orden['id']}", json={"fecha": "2026-09-03"})
    assert r.status_code == 200
    assert r.json()["fecha"] == "03/09/2026"
