"""
Tests de conversión de fechas en la frontera de la API
"""
import pytest
from datetime import date, datetime
from decimal import Decimal

from almacen.application.dtos import EntradaOut
from almacen.application.excepciones import ValidacionError
from almacen.application.fechas import formatear_fecha, parse_fecha


@pytest.mark.parametrize("texto,esperado", [
    ("05/03/2026", date(2026, 3, 5)),
    ("5/3/2026", date(2026, 3, 5)),
    ("2026-03-05", date(2026, 3, 5)),
    (" 31/12/2025 ", date(2025, 12, 31)),
])
def test_parse_fecha(texto, esperado):
    assert parse_fecha(texto) == esperado


@pytest.mark.parametrize("texto", ["31/02/2026", "2026/03/05", "ayer", "05-03-2026"])
def test_parse_fecha_invalida(texto):
    with pytest.raises(ValidacionError):
        parse_fecha(texto)


def test_vacios_y_fechas_pasan_sin_cambio():
    assert parse_fecha(None) is None
    assert parse_fecha("  ") is None
    assert parse_fecha(date(2026, 1, 1)) == date(2026, 1, 1)


def test_formatear_fecha():
    assert formatear_fecha(date(2026, 3, 5)) == "05/03/2026"
    assert formatear_fecha(None) is None


def test_dto_devuelve_dd_mm_yyyy():
    salida = EntradaOut(
        id=1, fecha="2026-03-05", codigo_producto="P-001", descripcion="x",
        precio_unitario=Decimal("1"), cantidad=1,
        created_at=datetime(2026, 3, 5, 10, 0), updated_at=datetime(2026, 3, 5, 10, 0),
    )
    assert salida.fecha == date(2026, 3, 5)
    assert salida.model_dump(mode="json")["fecha"] == "05/03/2026"
