"""
Servicios de Movimientos de Stock (Entradas y Salidas)
======================================================

Cada movimiento activo está reflejado exactamente una vez en el stock del
producto. Ciclo de vida: Activo -> Editado (0..n) -> Eliminado (terminal).

ORDEN DE CADA OPERACIÓN:
1. Leer el movimiento y el producto, ambos bloqueados. Si otra operación
   confirmó antes un cambio sobre el mismo movimiento, la versión leída ya
   no coincide al escribir y la operación completa se reintenta
2. Validar la precondición de stock (sin escribir nada)
3. Aplicar el delta en el libro de stock
4. Escribir / editar / marcar eliminado el movimiento

Todo ocurre dentro de la transacción del UnitOfWork: si algo falla no
queda ni el delta ni el registro.
"""
import math
from datetime import datetime
from typing import Any, Dict, Optional
import logging

from ..infrastructure.unit_of_work import UnitOfWork
from ..domain.models import MovimientoEntrada, MovimientoSalida
from ..config import settings
from .dtos import EntradaIn, SalidaIn
from .excepciones import NoEncontradoError, ValidacionError
from .fechas import parse_fecha
from .services_ledger import LedgerStockService

logger = logging.getLogger(__name__)

# Campos que no admiten null al editar
_NO_NULOS = ("fecha", "descripcion", "precio_unitario", "cantidad")


def _aplicar_cambios(movimiento, cambios: Dict[str, Any]) -> None:
    for campo, valor in cambios.items():
        if campo in _NO_NULOS and valor is None:
            continue
        setattr(movimiento, campo, valor)


class MovimientosService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.ledger = LedgerStockService(uow)

    # ===== ALTAS =====

    def crear_entrada(self, datos: EntradaIn) -> MovimientoEntrada:
        producto = self.ledger.obtener_activo(datos.codigo_producto, bloquear=True)

        entrada = MovimientoEntrada(
            fecha=datos.fecha,
            codigo_producto=datos.codigo_producto,
            descripcion=datos.descripcion,
            precio_unitario=datos.precio_unitario,
            cantidad=datos.cantidad,
            responsable=datos.responsable,
            area=datos.area,
            categoria=producto.categoria,
        )
        self.uow.entradas.add(entrada)
        self.ledger.ajustar_stock(datos.codigo_producto, entradas=datos.cantidad)
        self.uow.db.flush()

        logger.info(f"Entrada {entrada.id} registrada: {entrada.codigo_producto} +{entrada.cantidad}")
        return entrada

    def crear_salida(self, datos: SalidaIn) -> MovimientoSalida:
        producto = self.ledger.obtener_activo(datos.codigo_producto, bloquear=True)
        self.ledger.verificar_disponible(producto, datos.cantidad)

        salida = MovimientoSalida(
            fecha=datos.fecha,
            codigo_producto=datos.codigo_producto,
            descripcion=datos.descripcion,
            precio_unitario=datos.precio_unitario,
            cantidad=datos.cantidad,
            responsable=datos.responsable,
            area=datos.area,
            proyecto=datos.proyecto,
            categoria=producto.categoria,
        )
        self.uow.salidas.add(salida)
        self.ledger.ajustar_stock(datos.codigo_producto, salidas=datos.cantidad)
        self.uow.db.flush()

        logger.info(f"Salida {salida.id} registrada: {salida.codigo_producto} -{salida.cantidad}")
        return salida

    # ===== CONSULTAS =====

    def obtener_entrada(self, entrada_id: int, bloquear: bool = False) -> MovimientoEntrada:
        entrada = self.uow.entradas.get(entrada_id, for_update=bloquear)
        if not entrada:
            raise NoEncontradoError(f"Entrada {entrada_id} no encontrada")
        return entrada

    def obtener_salida(self, salida_id: int, bloquear: bool = False) -> MovimientoSalida:
        salida = self.uow.salidas.get(salida_id, for_update=bloquear)
        if not salida:
            raise NoEncontradoError(f"Salida {salida_id} no encontrada")
        return salida

    def listar_entradas(self, page: int = 1, limit: Optional[int] = None, **filtros) -> Dict[str, Any]:
        return self._listar(self.uow.entradas, MovimientoEntrada, page, limit, **filtros)

    def listar_salidas(self, page: int = 1, limit: Optional[int] = None, **filtros) -> Dict[str, Any]:
        return self._listar(self.uow.salidas, MovimientoSalida, page, limit, **filtros)

    def buscar_movimientos(self, query: str) -> Dict[str, Any]:
        """Búsqueda combinada: primeros 1000 resultados de entradas y de salidas."""
        return {
            "entries": self.listar_entradas(page=1, limit=1000, search=query)["data"],
            "exits": self.listar_salidas(page=1, limit=1000, search=query)["data"],
        }

    def _listar(
        self,
        repo,
        model,
        page: int = 1,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        categoria: Optional[str] = None,
        area: Optional[str] = None,
        responsable: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Lista movimientos activos con filtros y paginación.

        Las fechas de filtro aceptan YYYY-MM-DD o DD/MM/YYYY y son inclusivas.
        total y totalPages se calculan sobre el conjunto filtrado.
        """
        limit = limit or settings.page_limit_default
        if page < 1 or limit < 1:
            raise ValidacionError("page y limit deben ser mayores a 0")
        limit = min(limit, settings.page_limit_max)

        query = repo.query_activos()

        if search:
            like = f"%{search}%"
            condicion = (
                model.codigo_producto.ilike(like)
                | model.descripcion.ilike(like)
                | model.responsable.ilike(like)
            )
            if hasattr(model, "proyecto"):
                condicion = condicion | model.proyecto.ilike(like)
            query = query.filter(condicion)

        if categoria:
            query = query.filter(model.categoria == categoria)
        if area:
            query = query.filter(model.area == area)
        if responsable:
            query = query.filter(model.responsable == responsable)

        desde = parse_fecha(start_date)
        hasta = parse_fecha(end_date)
        if desde:
            query = query.filter(model.fecha >= desde)
        if hasta:
            query = query.filter(model.fecha <= hasta)

        total = query.count()
        data = (
            query.order_by(model.created_at.desc(), model.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "data": data,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit),
            },
        }

    # ===== EDICIONES =====

    def actualizar_entrada(self, entrada_id: int, cambios: Dict[str, Any]) -> MovimientoEntrada:
        """
        Edita una entrada. Si cambia la cantidad se aplica la diferencia:
        - disminuye: el stock debe cubrir la reducción
        - aumenta: ingresa la diferencia
        """
        entrada = self.obtener_entrada(entrada_id, bloquear=True)
        nueva = cambios.get("cantidad")

        if nueva is not None and nueva != entrada.cantidad:
            producto = self.ledger.obtener_activo(entrada.codigo_producto, bloquear=True)
            diferencia = nueva - entrada.cantidad

            if diferencia < 0:
                self.ledger.verificar_disponible(
                    producto,
                    abs(diferencia),
                    f"No se puede reducir la entrada. Una reducción de {abs(diferencia)} dejaría stock negativo. "
                    f"Disponible: {producto.stock_actual}",
                )
                self.ledger.ajustar_stock(entrada.codigo_producto, salidas=abs(diferencia))
            else:
                self.ledger.ajustar_stock(entrada.codigo_producto, entradas=diferencia)

            logger.info(f"Entrada {entrada.id}: cantidad {entrada.cantidad} -> {nueva}")

        _aplicar_cambios(entrada, cambios)
        self.uow.db.flush()
        return entrada

    def actualizar_salida(self, salida_id: int, cambios: Dict[str, Any]) -> MovimientoSalida:
        """
        Edita una salida. Si cambia la cantidad se aplica la diferencia:
        - aumenta: el stock debe cubrir el aumento
        - disminuye: la diferencia vuelve al stock
        """
        salida = self.obtener_salida(salida_id, bloquear=True)
        nueva = cambios.get("cantidad")

        if nueva is not None and nueva != salida.cantidad:
            producto = self.ledger.obtener_activo(salida.codigo_producto, bloquear=True)
            diferencia = nueva - salida.cantidad

            if diferencia > 0:
                self.ledger.verificar_disponible(
                    producto,
                    diferencia,
                    f"Stock insuficiente para aumentar la cantidad. Disponible: {producto.stock_actual}, "
                    f"Requerido: {diferencia}",
                )
                self.ledger.ajustar_stock(salida.codigo_producto, salidas=diferencia)
            else:
                self.ledger.ajustar_stock(salida.codigo_producto, entradas=abs(diferencia))

            logger.info(f"Salida {salida.id}: cantidad {salida.cantidad} -> {nueva}")

        _aplicar_cambios(salida, cambios)
        self.uow.db.flush()
        return salida

    def actualizar_cantidad_salida(self, salida_id: int, cantidad: int) -> MovimientoSalida:
        return self.actualizar_salida(salida_id, {"cantidad": cantidad})

    # ===== ELIMINACIONES (lógicas) =====

    def eliminar_entrada(self, entrada_id: int) -> None:
        """Revierte la entrada (resta su cantidad) y la marca eliminada."""
        entrada = self.obtener_entrada(entrada_id, bloquear=True)
        producto = self.ledger.obtener_activo(entrada.codigo_producto, bloquear=True)

        self.ledger.verificar_disponible(
            producto,
            entrada.cantidad,
            f"No se puede eliminar la entrada: el stock quedaría negativo. "
            f"Actual: {producto.stock_actual}, Requerido para revertir: {entrada.cantidad}",
        )
        self.ledger.ajustar_stock(entrada.codigo_producto, salidas=entrada.cantidad)

        entrada.deleted_at = datetime.now()
        self.uow.db.flush()
        logger.info(f"Entrada {entrada.id} eliminada, {entrada.cantidad} unidades revertidas de {entrada.codigo_producto}")

    def eliminar_salida(self, salida_id: int) -> None:
        """Revierte la salida (devuelve su cantidad) y la marca eliminada."""
        salida = self.obtener_salida(salida_id, bloquear=True)
        self.ledger.ajustar_stock(salida.codigo_producto, entradas=salida.cantidad)

        salida.deleted_at = datetime.now()
        self.uow.db.flush()
        logger.info(f"Salida {salida.id} eliminada, {salida.cantidad} unidades devueltas a {salida.codigo_producto}")
