"""
Tests del Catálogo de Productos

Cubre:
- Unicidad de código entre productos activos y reuso tras archivar
- Propagación de renombre a movimientos, equipos y órdenes
- Ajuste manual de stock y recálculo de costo total
- Clasificación de alertas de stock
"""
import pytest
from datetime import date
from decimal import Decimal

from almacen.application.dtos import EntradaIn, SalidaIn, EquipoIn, OrdenCompraProductoIn
from almacen.application.excepciones import ConflictoError, NoEncontradoError
from almacen.application.services_equipos import EquiposService
from almacen.application.services_inventario import InventarioService, clasificar_stock
from almacen.application.services_movimientos import MovimientosService
from almacen.application.services_ordenes_compra import OrdenesCompraService
from almacen.domain.enums import EstadoAlertaStock, EstadoEquipo
from almacen.infrastructure.unit_of_work import UnitOfWork, ejecutar_en_transaccion


def _inventario(fn):
    return ejecutar_en_transaccion(lambda uow: fn(InventarioService(uow)))


def _id(codigo):
    return _inventario(lambda s: s.obtener_por_codigo(codigo)).id


class TestCodigoUnico:

    def test_codigo_duplicado(self, crear_producto):
        crear_producto("P-001")
        with pytest.raises(ConflictoError):
            crear_producto("P-001")

    def test_archivar_libera_el_codigo(self, crear_producto, leer_producto):
        crear_producto("P-001", stock=4)
        anterior = _id("P-001")
        _inventario(lambda s: s.archivar_producto(anterior))

        assert leer_producto("P-001") is None
        crear_producto("P-001", stock=9)

        nuevo = leer_producto("P-001")
        assert nuevo.id != anterior
        assert nuevo.stock_actual == 9

    def test_archivado_no_se_encuentra(self, crear_producto):
        crear_producto("P-001")
        producto_id = _id("P-001")
        _inventario(lambda s: s.archivar_producto(producto_id))

        with pytest.raises(NoEncontradoError):
            _inventario(lambda s: s.obtener_producto(producto_id))
        assert _inventario(lambda s: s.listar_productos()) == []

    def test_cambiar_a_codigo_ocupado(self, crear_producto):
        crear_producto("P-001")
        crear_producto("P-002")
        producto_id = _id("P-002")

        with pytest.raises(ConflictoError):
            _inventario(lambda s: s.actualizar_producto(producto_id, {"codigo": "P-001"}))


class TestActualizarProducto:

    def test_ajuste_manual_de_stock(self, crear_producto, leer_producto):
        crear_producto("P-001", stock=10, costo="3.00")
        producto_id = _id("P-001")

        _inventario(lambda s: s.actualizar_producto(producto_id, {"stock_actual": 7}))

        p = leer_producto("P-001")
        assert p.stock_actual == 7
        assert Decimal(str(p.costo_total)) == Decimal("21.00")

    def test_cambio_de_costo_recalcula_total(self, crear_producto, leer_producto):
        crear_producto("P-001", stock=10, costo="3.00")
        producto_id = _id("P-001")

        _inventario(lambda s: s.actualizar_producto(producto_id, {"costo_unitario": Decimal("4.50")}))

        assert Decimal(str(leer_producto("P-001").costo_total)) == Decimal("45.00")

    def test_renombre_se_propaga(self, crear_producto, leer_producto):
        crear_producto("P-001", stock=20, nombre="Taladro")
        fecha = date(2026, 5, 2)

        def registrar(uow):
            movimientos = MovimientosService(uow)
            movimientos.crear_entrada(EntradaIn(
                fecha=fecha, codigo_producto="P-001", descripcion="Taladro",
                precio_unitario=Decimal("10"), cantidad=2,
            ))
            movimientos.crear_salida(SalidaIn(
                fecha=fecha, codigo_producto="P-001", descripcion="Taladro",
                precio_unitario=Decimal("10"), cantidad=1,
            ))
            EquiposService(uow).registrar_salida_equipo(EquipoIn(
                equipo="Taladro", serie_codigo="P-001", cantidad=1, estado_equipo=EstadoEquipo.BUENO,
                responsable="Luis", fecha_salida=fecha, hora_salida="08:30", area_proyecto="Obra",
            ))
            ordenes = OrdenesCompraService(uow)
            orden = ordenes.crear_orden(fecha)
            ordenes.agregar_producto(orden.id, OrdenCompraProductoIn(
                fecha=fecha, codigo="P-001", nombre="Taladro", cantidad=1, costo_unitario=Decimal("10"),
            ))

        ejecutar_en_transaccion(registrar)
        producto_id = _id("P-001")

        _inventario(lambda s: s.actualizar_producto(producto_id, {"codigo": "P-100", "nombre": "Taladro percutor"}))

        assert leer_producto("P-001") is None
        assert leer_producto("P-100").nombre == "Taladro percutor"

        uow = UnitOfWork()
        try:
            entrada = uow.entradas.query_activos().one()
            salida = uow.salidas.query_activos().one()
            reporte = uow.equipos.list()[0]
            orden = uow.ordenes.list()[0]
            assert (entrada.codigo_producto, entrada.descripcion) == ("P-100", "Taladro percutor")
            assert (salida.codigo_producto, salida.descripcion) == ("P-100", "Taladro percutor")
            assert (reporte.serie_codigo, reporte.equipo) == ("P-100", "Taladro percutor")
            assert (orden.productos[0].codigo, orden.productos[0].nombre) == ("P-100", "Taladro percutor")
        finally:
            uow.close()


class TestAlertas:

    @pytest.mark.parametrize("stock,minimo,esperado", [
        (0, 10, EstadoAlertaStock.CRITICO),
        (3, 10, EstadoAlertaStock.CRITICO),
        (4, 10, EstadoAlertaStock.BAJO),
        (9, 10, EstadoAlertaStock.BAJO),
        (10, 10, EstadoAlertaStock.NORMAL),
        (2, 2, EstadoAlertaStock.NORMAL),
    ])
    def test_clasificar_stock(self, stock, minimo, esperado):
        assert clasificar_stock(stock, minimo) == esperado

    def test_alertas_con_filtros(self, crear_producto):
        crear_producto("A-1", stock=0, categoria="Herramientas")
        crear_producto("A-2", stock=5, categoria="Herramientas")
        crear_producto("A-3", stock=50, categoria="Herramientas")
        crear_producto("B-1", stock=1, categoria="Consumibles", stock_minimo=2)

        todas = _inventario(lambda s: s.alertas_stock())
        estados = {a["codigo"]: a["estado"] for a in todas}
        assert estados == {"A-1": "critico", "A-2": "bajo", "A-3": "normal", "B-1": "critico"}

        criticos = _inventario(lambda s: s.alertas_stock(categoria="herram", solo_criticos=True))
        assert [a["codigo"] for a in criticos] == ["A-1"]

        bajos = _inventario(lambda s: s.alertas_stock(estado="bajo"))
        assert [a["codigo"] for a in bajos] == ["A-2"]
        assert bajos[0]["stock_minimo"] == 10


def test_propagar_renombre_cuenta_registros(crear_producto):
    crear_producto("P-001", stock=5)
    crear_producto("P-002", stock=5)
    for codigo in ("P-001", "P-001", "P-002"):
        datos = EntradaIn(
            fecha=date(2026, 5, 2), codigo_producto=codigo, descripcion="x",
            precio_unitario=Decimal("1"), cantidad=1,
        )
        ejecutar_en_transaccion(lambda uow: MovimientosService(uow).crear_entrada(datos))

    afectados = _inventario(lambda s: s.propagar_renombre("P-001", "P-001", "Nombre nuevo"))

    assert afectados == {"entradas": 2, "salidas": 0, "equipos": 0, "ordenes": 0}
