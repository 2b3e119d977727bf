"""
Tests de API - Salida y retorno de equipos
"""


def _checkout(codigo, cantidad):
    return {
        "equipo": "Andamio",
        "serie_codigo": codigo,
        "cantidad": cantidad,
        "estado_equipo": "Bueno",
        "responsable": "Carla",
        "fecha_salida": "01/08/2026",
        "hora_salida": "09:15",
        "area_proyecto": "Obra Centro",
    }


def test_salida_y_retorno(client_auth, producto_api):
    producto_api("AND-01", stock=6)

    r = client_auth.post("/equipos", json=_checkout("AND-01", 4))
    assert r.status_code == 200, r.text
    reporte = r.json()
    assert reporte["fecha_salida"] == "01/08/2026"

    r = client_auth.patch(f"/equipos/{reporte['id']}/retorno", json={
        "fecha_retorno": "05/08/2026",
        "hora_retorno": "17:30",
        "estado_retorno": "Dañado",
    })
    assert r.status_code == 200
    assert r.json()["estado_retorno"] == "Dañado"

    stock = client_auth.get("/inventario/productos/codigo/AND-01").json()["stock_actual"]
    assert stock == 2

    r = client_auth.get("/equipos/codigo/AND-01")
    assert r.json()["id"] == reporte["id"]


def test_salida_sin_stock(client_auth, producto_api):
    producto_api("AND-01", stock=1)
    r = client_auth.post("/equipos", json=_checkout("AND-01", 2))
    assert r.status_code == 400
    assert r.json()["disponible"] == 1


def test_hora_invalida(client_auth, producto_api):
    producto_api("AND-01", stock=1)
    payload = _checkout("AND-01", 1)
    payload["hora_salida"] = "9am"
    assert client_auth.post("/equipos", json=payload).status_code == 422


def test_eliminar_y_codigo_sin_reportes(client_auth, producto_api):
    producto_api("AND-01", stock=3)
    reporte = client_auth.post("/equipos", json=_checkout("AND-01", 1)).json()

    assert client_auth.delete(f"/equipos/{reporte['id']}").status_code == 204
    assert client_auth.get(f"/equipos/{reporte['id']}").status_code == 404
    assert client_auth.get("/equipos/codigo/AND-01").status_code == 404
