"""
Servicios de Órdenes de Compra
==============================

Agregado cabecera + líneas. La cabecera guarda totales derivados:

    cantidad = Σ linea.cantidad   (líneas activas)
    costo    = Σ linea.subtotal   (líneas activas)

Se recalculan completos después de cada alta/edición/baja de línea, dentro
de la misma transacción.

Una línea cuyo código existe en el catálogo al agregarse descuenta stock
como una salida (descuenta_stock=True). Si el código no existe la línea es
un ítem cotizado y no toca el stock.

Cabecera y líneas llevan versión: una edición o baja que leyó una línea
ya modificada por otra transacción falla al escribir y se reintenta
completa, así la devolución de stock se aplica una sola vez.
"""
import re
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List
import logging

from ..infrastructure.unit_of_work import UnitOfWork
from ..domain.models import OrdenCompra, OrdenCompraProducto
from ..config import settings
from .dtos import OrdenCompraProductoIn
from .excepciones import NoEncontradoError
from .services_ledger import LedgerStockService

logger = logging.getLogger(__name__)


def calcular_subtotal(cantidad: int, costo_unitario) -> Decimal:
    return (Decimal(cantidad) * Decimal(str(costo_unitario))).quantize(Decimal("0.01"))


class OrdenesCompraService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.ledger = LedgerStockService(uow)

    # ===== CABECERA =====

    def siguiente_codigo(self) -> str:
        """OC-0001, OC-0002, ... considerando también órdenes eliminadas."""
        prefijo = settings.purchase_order_prefix
        patron = re.compile(rf"^{re.escape(prefijo)}-(\d+)$")
        ultimo = 0
        for codigo in self.uow.ordenes.all_codes():
            match = patron.match(codigo or "")
            if match:
                ultimo = max(ultimo, int(match.group(1)))
        return f"{prefijo}-{str(ultimo + 1).zfill(settings.purchase_order_digits)}"

    def crear_orden(self, fecha) -> OrdenCompra:
        orden = OrdenCompra(
            codigo=self.siguiente_codigo(),
            fecha=fecha,
            cantidad=0,
            costo=Decimal("0.00"),
        )
        self.uow.ordenes.add(orden)
        self.uow.db.flush()
        logger.info(f"Orden de compra {orden.codigo} creada")
        return orden

    def listar_ordenes(self) -> List[OrdenCompra]:
        return self.uow.ordenes.list()

    def obtener_orden(self, orden_id: int, bloquear: bool = False) -> OrdenCompra:
        orden = self.uow.ordenes.get(orden_id, for_update=bloquear)
        if not orden:
            raise NoEncontradoError(f"Orden de compra {orden_id} no encontrada")
        return orden

    def actualizar_orden(self, orden_id: int, cambios: Dict[str, Any]) -> OrdenCompra:
        orden = self.obtener_orden(orden_id, bloquear=True)
        if cambios.get("fecha") is not None:
            orden.fecha = cambios["fecha"]
        self.uow.db.flush()
        return orden

    def eliminar_orden(self, orden_id: int) -> None:
        """Borrado lógico de la cabecera. Las líneas quedan como histórico y no devuelven stock."""
        orden = self.obtener_orden(orden_id, bloquear=True)
        orden.deleted_at = datetime.now()
        self.uow.db.flush()
        logger.info(f"Orden de compra {orden.codigo} eliminada")

    def actualizar_totales(self, orden: OrdenCompra) -> OrdenCompra:
        """Recalcula cantidad y costo sobre las líneas activas (recálculo completo)."""
        self.uow.db.flush()
        cantidad, costo = self.uow.ordenes.active_totals(orden.id)
        orden.cantidad = int(cantidad or 0)
        orden.costo = Decimal(str(costo or 0)).quantize(Decimal("0.01"))
        self.uow.db.flush()
        logger.debug(f"Totales {orden.codigo}: cantidad={orden.cantidad}, costo={orden.costo}")
        return orden

    # ===== LÍNEAS =====

    def obtener_linea(self, orden_id: int, linea_id: int, bloquear: bool = False) -> OrdenCompraProducto:
        linea = self.uow.ordenes.get_line(orden_id, linea_id, for_update=bloquear)
        if not linea:
            raise NoEncontradoError(f"Producto {linea_id} no encontrado en la orden {orden_id}")
        return linea

    def agregar_producto(self, orden_id: int, datos: OrdenCompraProductoIn) -> OrdenCompraProducto:
        orden = self.obtener_orden(orden_id, bloquear=True)

        producto = self.ledger.buscar_activo(datos.codigo, bloquear=True)
        if producto is not None:
            self.ledger.verificar_disponible(producto, datos.cantidad)
        else:
            logger.info(f"Código {datos.codigo} no está en el catálogo; se agrega a {orden.codigo} sin mover stock")

        linea = OrdenCompraProducto(
            fecha=datos.fecha,
            codigo=datos.codigo,
            nombre=datos.nombre,
            area=datos.area,
            proyecto=datos.proyecto,
            responsable=datos.responsable,
            cantidad=datos.cantidad,
            costo_unitario=datos.costo_unitario,
            subtotal=calcular_subtotal(datos.cantidad, datos.costo_unitario),
            descuenta_stock=producto is not None,
        )
        linea.orden = orden
        self.uow.ordenes.add_line(linea)

        if linea.descuenta_stock:
            self.ledger.ajustar_stock(datos.codigo, salidas=datos.cantidad)

        self.actualizar_totales(orden)
        return linea

    def actualizar_producto(self, orden_id: int, linea_id: int, cambios: Dict[str, Any]) -> OrdenCompraProducto:
        """
        Edita una línea.

        - Mismo código vinculado: aumento de cantidad requiere stock, disminución lo devuelve
        - Código distinto: se valida el nuevo código, se devuelve todo al anterior
          y se descuenta del nuevo si existe en el catálogo
        """
        orden = self.obtener_orden(orden_id, bloquear=True)
        linea = self.obtener_linea(orden_id, linea_id, bloquear=True)

        nueva_cantidad = cambios.get("cantidad") or linea.cantidad
        nuevo_codigo = cambios.get("codigo") or linea.codigo

        if nuevo_codigo != linea.codigo:
            nuevo_producto = self.ledger.buscar_activo(nuevo_codigo, bloquear=True)
            if nuevo_producto is not None:
                self.ledger.verificar_disponible(nuevo_producto, nueva_cantidad)
            if linea.descuenta_stock:
                self._devolver_stock(linea.codigo, linea.cantidad)
            if nuevo_producto is not None:
                self.ledger.ajustar_stock(nuevo_codigo, salidas=nueva_cantidad)
            linea.descuenta_stock = nuevo_producto is not None
        elif linea.descuenta_stock and nueva_cantidad != linea.cantidad:
            diferencia = nueva_cantidad - linea.cantidad
            if diferencia > 0:
                producto = self.ledger.obtener_activo(linea.codigo, bloquear=True)
                self.ledger.verificar_disponible(
                    producto,
                    diferencia,
                    f"Stock insuficiente para aumentar la cantidad. Disponible: {producto.stock_actual}, "
                    f"Requerido: {diferencia}",
                )
                self.ledger.ajustar_stock(linea.codigo, salidas=diferencia)
            else:
                self._devolver_stock(linea.codigo, abs(diferencia))

        for campo, valor in cambios.items():
            if valor is None and campo in ("fecha", "codigo", "nombre", "cantidad", "costo_unitario"):
                continue
            setattr(linea, campo, valor)
        linea.subtotal = calcular_subtotal(linea.cantidad, linea.costo_unitario)

        self.actualizar_totales(orden)
        return linea

    def eliminar_producto(self, orden_id: int, linea_id: int) -> None:
        orden = self.obtener_orden(orden_id, bloquear=True)
        linea = self.obtener_linea(orden_id, linea_id, bloquear=True)

        if linea.descuenta_stock:
            self._devolver_stock(linea.codigo, linea.cantidad)

        linea.deleted_at = datetime.now()
        self.actualizar_totales(orden)
        logger.info(f"Línea {linea.id} eliminada de {orden.codigo}")

    def _devolver_stock(self, codigo: str, cantidad: int) -> None:
        if self.ledger.buscar_activo(codigo) is None:
            logger.warning(f"Producto {codigo} ya no está activo; no se devuelven {cantidad} unidades")
            return
        self.ledger.ajustar_stock(codigo, entradas=cantidad)
