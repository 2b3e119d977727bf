"""
Tests de Salida y Retorno de Equipos
"""
import pytest
from datetime import date

from almacen.application.dtos import EquipoIn, RetornoEquipoIn
from almacen.application.excepciones import NoEncontradoError, StockInsuficienteError
from almacen.application.services_equipos import EquiposService
from almacen.domain.enums import EstadoEquipo
from almacen.infrastructure.unit_of_work import ejecutar_en_transaccion


def _equipos(fn):
    return ejecutar_en_transaccion(lambda uow: fn(EquiposService(uow)))


def _salida_equipo(codigo, cantidad, responsable="Luis Rojas"):
    datos = EquipoIn(
        equipo="Amoladora",
        serie_codigo=codigo,
        cantidad=cantidad,
        estado_equipo=EstadoEquipo.BUENO,
        responsable=responsable,
        fecha_salida="12/06/2026",
        hora_salida="07:45",
        area_proyecto="Obra Sur",
    )
    return _equipos(lambda s: s.registrar_salida_equipo(datos)).id


class TestSalidaEquipo:

    def test_salida_descuenta_stock(self, crear_producto, leer_producto):
        crear_producto("EQ-01", stock=4)
        reporte_id = _salida_equipo("EQ-01", 3)

        assert leer_producto("EQ-01").stock_actual == 1
        reporte = _equipos(lambda s: s.obtener_reporte(reporte_id))
        assert reporte.fecha_salida == date(2026, 6, 12)
        assert reporte.estado_equipo == "Bueno"

    def test_salida_sin_stock(self, crear_producto, leer_producto):
        crear_producto("EQ-01", stock=2)
        with pytest.raises(StockInsuficienteError):
            _salida_equipo("EQ-01", 3)
        assert leer_producto("EQ-01").stock_actual == 2
        assert _equipos(lambda s: s.listar_reportes()) == []

    def test_codigo_inexistente(self):
        with pytest.raises(NoEncontradoError):
            _salida_equipo("NO-EXISTE", 1)


class TestRetornoYEdicion:

    def test_retorno_no_repone_stock(self, crear_producto, leer_producto):
        crear_producto("EQ-01", stock=5)
        reporte_id = _salida_equipo("EQ-01", 2)

        retorno = RetornoEquipoIn(
            fecha_retorno="20/06/2026",
            hora_retorno="18:00",
            estado_retorno=EstadoEquipo.EN_REPARACION,
            responsable_retorno="Marta",
        )
        reporte = _equipos(lambda s: s.registrar_retorno(reporte_id, retorno))

        assert reporte.fecha_retorno == date(2026, 6, 20)
        assert reporte.estado_retorno == "En Reparación"
        assert leer_producto("EQ-01").stock_actual == 3

    def test_editar_y_eliminar_no_tocan_stock(self, crear_producto, leer_producto):
        crear_producto("EQ-01", stock=5)
        reporte_id = _salida_equipo("EQ-01", 2)

        reporte = _equipos(lambda s: s.actualizar_reporte(
            reporte_id, {"estado_equipo": EstadoEquipo.REGULAR, "responsable": None}
        ))
        assert reporte.estado_equipo == "Regular"
        assert reporte.responsable == "Luis Rojas"

        _equipos(lambda s: s.eliminar_reporte(reporte_id))

        assert leer_producto("EQ-01").stock_actual == 3
        with pytest.raises(NoEncontradoError):
            _equipos(lambda s: s.obtener_reporte(reporte_id))


def test_ultimo_reporte_y_busqueda(crear_producto):
    crear_producto("EQ-01", stock=10)
    crear_producto("EQ-02", stock=10)
    _salida_equipo("EQ-01", 1, responsable="Ana")
    ultimo = _salida_equipo("EQ-01", 1, responsable="Pedro")
    _salida_equipo("EQ-02", 1, responsable="Ana")

    assert _equipos(lambda s: s.ultimo_por_codigo("EQ-01")).id == ultimo
    assert _equipos(lambda s: s.ultimo_por_codigo("EQ-99")) is None
    assert len(_equipos(lambda s: s.listar_reportes("ana"))) == 2
