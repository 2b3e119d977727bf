"""
Libro de Stock
==============

Único componente autorizado a escribir los campos de stock de un producto
(entradas, salidas, stock_actual, costo_total). Movimientos, equipos y
órdenes de compra piden deltas aquí; nunca tocan esas columnas.

PRINCIPIOS:
- Los deltas son cantidades no negativas de la operación, no totales
- entradas/salidas son contadores acumulados: siempre suben
- stock_actual nunca queda negativo: el libro rechaza el delta
- costo_total = stock_actual × costo_unitario tras cada cambio
"""
from decimal import Decimal
import logging

from ..infrastructure.unit_of_work import UnitOfWork
from ..domain.models import Producto
from .excepciones import NoEncontradoError, StockInsuficienteError, ValidacionError

logger = logging.getLogger(__name__)


def calcular_costo_total(stock: int, costo_unitario) -> Decimal:
    return (Decimal(stock) * Decimal(str(costo_unitario or 0))).quantize(Decimal("0.01"))


class LedgerStockService:
    """
    Aplica deltas de stock dentro de la transacción del UnitOfWork recibido.

    La fila del producto se lee con FOR UPDATE y además lleva columna de
    versión, de modo que dos operaciones concurrentes sobre el mismo código
    se serializan (PostgreSQL) o la segunda se reintenta (SQLite).
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def obtener_activo(self, codigo: str, bloquear: bool = False) -> Producto:
        """Busca un producto activo por código (findByCode)."""
        producto = self.uow.productos.by_code(codigo, for_update=bloquear)
        if not producto:
            raise NoEncontradoError(f"Producto con código {codigo} no encontrado")
        return producto

    def buscar_activo(self, codigo: str, bloquear: bool = False) -> Producto | None:
        """Igual que obtener_activo pero devuelve None si no existe."""
        return self.uow.productos.by_code(codigo, for_update=bloquear)

    @staticmethod
    def verificar_disponible(producto: Producto, cantidad: int, mensaje: str | None = None) -> None:
        if producto.stock_actual < cantidad:
            logger.warning(
                f"Stock insuficiente para {producto.codigo}: disponible={producto.stock_actual}, solicitado={cantidad}"
            )
            raise StockInsuficienteError(producto.stock_actual, cantidad, mensaje)

    def ajustar_stock(self, codigo: str, entradas: int = 0, salidas: int = 0) -> Producto:
        """
        Aplica un delta al stock de un producto.

        Args:
            codigo: Código de un producto activo
            entradas: Cantidad que ingresa (>= 0)
            salidas: Cantidad que sale (>= 0)

        Returns:
            Producto actualizado

        Raises:
            NoEncontradoError: si el código no corresponde a un producto activo
            StockInsuficienteError: si el resultado sería negativo
        """
        if entradas < 0 or salidas < 0:
            raise ValidacionError("Los deltas de stock deben ser cantidades no negativas")

        producto = self.obtener_activo(codigo, bloquear=True)
        stock_anterior = producto.stock_actual
        stock_nuevo = stock_anterior + entradas - salidas

        if stock_nuevo < 0:
            logger.warning(
                f"Delta rechazado para {codigo}: stock={stock_anterior}, entradas={entradas}, salidas={salidas}"
            )
            raise StockInsuficienteError(stock_anterior, salidas - entradas)

        producto.entradas = (producto.entradas or 0) + entradas
        producto.salidas = (producto.salidas or 0) + salidas
        producto.stock_actual = stock_nuevo
        producto.costo_total = calcular_costo_total(stock_nuevo, producto.costo_unitario)
        self.uow.db.flush()

        logger.debug(
            f"Stock {codigo}: {stock_anterior} -> {stock_nuevo} (entradas=+{entradas}, salidas=+{salidas})"
        )
        return producto

    def fijar_stock(self, producto: Producto, stock_nuevo: int) -> Producto:
        """Ajuste manual desde el catálogo; no altera los contadores acumulados."""
        if stock_nuevo < 0:
            raise ValidacionError("El stock no puede ser negativo")
        logger.info(f"Ajuste manual de stock {producto.codigo}: {producto.stock_actual} -> {stock_nuevo}")
        producto.stock_actual = stock_nuevo
        producto.costo_total = calcular_costo_total(stock_nuevo, producto.costo_unitario)
        self.uow.db.flush()
        return producto

    def recalcular_costo_total(self, producto: Producto) -> Producto:
        producto.costo_total = calcular_costo_total(producto.stock_actual, producto.costo_unitario)
        return producto
