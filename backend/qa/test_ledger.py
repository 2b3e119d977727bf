"""
Tests del Libro de Stock

Cubre:
- Deltas de entrada y salida sobre contadores, stock y costo total
- Rechazo de deltas negativos y de resultados bajo cero
- Ajuste manual desde el catálogo
"""
import pytest
from decimal import Decimal

from almacen.application.excepciones import NoEncontradoError, StockInsuficienteError, ValidacionError
from almacen.application.services_ledger import LedgerStockService, calcular_costo_total
from almacen.infrastructure.unit_of_work import ejecutar_en_transaccion


def _ajustar(codigo, **deltas):
    return ejecutar_en_transaccion(lambda uow: LedgerStockService(uow).ajustar_stock(codigo, **deltas))


class TestAjustarStock:

    def test_entrada_suma_stock_y_contador(self, crear_producto, leer_producto):
        crear_producto("P-001", stock=10, costo="2.50")
        _ajustar("P-001", entradas=5)

        p = leer_producto("P-001")
        assert p.stock_actual == 15
        assert p.entradas == 5
        assert p.salidas == 0
        assert Decimal(str(p.costo_total)) == Decimal("37.50")

    def test_salida_resta_stock_y_suma_contador(self, crear_producto, leer_producto):
        crear_producto("P-001", stock=10)
        _ajustar("P-001", salidas=4)

        p = leer_producto("P-001")
        assert p.stock_actual == 6
        assert p.salidas == 4

    def test_salida_exacta_deja_stock_en_cero(self, crear_producto, leer_producto):
        crear_producto("P-001", stock=3)
        _ajustar("P-001", salidas=3)
        assert leer_producto("P-001").stock_actual == 0

    def test_resultado_negativo_se_rechaza_sin_escribir(self, crear_producto, leer_producto):
        crear_producto("P-001", stock=3)

        with pytest.raises(StockInsuficienteError) as exc:
            _ajustar("P-001", salidas=4)

        assert exc.value.disponible == 3
        assert exc.value.solicitado == 4
        p = leer_producto("P-001")
        assert p.stock_actual == 3
        assert p.salidas == 0

    def test_delta_negativo_es_invalido(self, crear_producto):
        crear_producto("P-001", stock=3)
        with pytest.raises(ValidacionError):
            _ajustar("P-001", entradas=-1)

    def test_codigo_inexistente(self):
        with pytest.raises(NoEncontradoError):
            _ajustar("NO-EXISTE", entradas=1)

    def test_contadores_no_se_revierten(self, crear_producto, leer_producto):
        """Una salida seguida de su reverso deja el stock igual pero ambos contadores suben"""
        crear_producto("P-001", stock=10)
        _ajustar("P-001", salidas=2)
        _ajustar("P-001", entradas=2)

        p = leer_producto("P-001")
        assert p.stock_actual == 10
        assert p.entradas == 2
        assert p.salidas == 2


class TestFijarStock:

    def test_fijar_stock_recalcula_costo_total(self, crear_producto, leer_producto):
        crear_producto("P-001", stock=10, costo="1.25")

        def operacion(uow):
            ledger = LedgerStockService(uow)
            ledger.fijar_stock(ledger.obtener_activo("P-001"), 4)

        ejecutar_en_transaccion(operacion)

        p = leer_producto("P-001")
        assert p.stock_actual == 4
        assert Decimal(str(p.costo_total)) == Decimal("5.00")
        assert p.entradas == 0 and p.salidas == 0

    def test_fijar_stock_negativo(self, crear_producto):
        crear_producto("P-001", stock=10)

        def operacion(uow):
            ledger = LedgerStockService(uow)
            ledger.fijar_stock(ledger.obtener_activo("P-001"), -1)

        with pytest.raises(ValidacionError):
            ejecutar_en_transaccion(operacion)


def test_calcular_costo_total_redondea_a_centimos():
    assert calcular_costo_total(3, "0.334") == Decimal("1.00")
    assert calcular_costo_total(0, Decimal("9.99")) == Decimal("0.00")
