"""
Servicios de Catálogo de Productos
==================================

Alta, edición y archivado de productos. Los campos de stock solo cambian a
través de LedgerStockService. Renombrar un producto (nombre o código) se
propaga explícitamente a los registros históricos que guardan una copia.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from ..infrastructure.unit_of_work import UnitOfWork
from ..domain.models import Producto
from ..domain.enums import EstadoProducto, EstadoAlertaStock
from ..config import settings
from .dtos import ProductoIn
from .excepciones import ConflictoError, NoEncontradoError
from .services_ledger import LedgerStockService, calcular_costo_total

logger = logging.getLogger(__name__)

# Columnas NOT NULL: un null explícito en la edición se ignora
_NO_NULOS = ("codigo", "nombre", "costo_unitario", "ubicacion", "unidad_medida")


def clasificar_stock(stock_actual: int, stock_minimo: int) -> EstadoAlertaStock:
    """critico: sin stock, o bajo el mínimo y en el umbral crítico; bajo: bajo el mínimo."""
    if stock_actual == 0:
        return EstadoAlertaStock.CRITICO
    if stock_actual < stock_minimo:
        if stock_actual <= settings.stock_critico_umbral:
            return EstadoAlertaStock.CRITICO
        return EstadoAlertaStock.BAJO
    return EstadoAlertaStock.NORMAL


class InventarioService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.ledger = LedgerStockService(uow)

    def crear_producto(self, datos: ProductoIn) -> Producto:
        if self.uow.productos.code_taken(datos.codigo):
            raise ConflictoError(f"Ya existe un producto con código {datos.codigo}")

        producto = Producto(
            codigo=datos.codigo,
            nombre=datos.nombre,
            costo_unitario=datos.costo_unitario,
            ubicacion=datos.ubicacion,
            unidad_medida=datos.unidad_medida,
            marca=datos.marca,
            categoria=datos.categoria,
            stock_minimo=datos.stock_minimo,
            entradas=datos.entradas,
            salidas=datos.salidas,
            stock_actual=datos.stock_actual,
            costo_total=calcular_costo_total(datos.stock_actual, datos.costo_unitario),
            estado=EstadoProducto.ACTIVO.value,
        )
        self.uow.productos.add(producto)
        self.uow.db.flush()
        logger.info(f"Producto {producto.codigo} creado con stock inicial {producto.stock_actual}")
        return producto

    def listar_productos(self, search: Optional[str] = None) -> List[Producto]:
        return self.uow.productos.list(search)

    def obtener_producto(self, producto_id: int) -> Producto:
        producto = self.uow.productos.get(producto_id)
        if not producto:
            raise NoEncontradoError(f"Producto {producto_id} no encontrado")
        return producto

    def obtener_por_codigo(self, codigo: str) -> Producto:
        return self.ledger.obtener_activo(codigo)

    def actualizar_producto(self, producto_id: int, cambios: Dict[str, Any]) -> Producto:
        """
        Actualiza un producto.

        - codigo: debe seguir siendo único entre productos activos
        - stock_actual: ajuste manual a través del libro de stock
        - costo_unitario: recalcula costo_total
        - nombre/codigo distintos: se propagan a movimientos, equipos y órdenes
        """
        producto = self.obtener_producto(producto_id)
        codigo_anterior = producto.codigo
        nombre_anterior = producto.nombre

        nuevo_codigo = cambios.get("codigo")
        if nuevo_codigo and nuevo_codigo != codigo_anterior:
            if self.uow.productos.code_taken(nuevo_codigo, exclude_id=producto.id):
                raise ConflictoError(f"Ya existe un producto con código {nuevo_codigo}")

        stock_nuevo = cambios.pop("stock_actual", None)
        for campo, valor in cambios.items():
            if campo in _NO_NULOS and valor is None:
                continue
            setattr(producto, campo, valor)

        if stock_nuevo is not None and stock_nuevo != producto.stock_actual:
            self.ledger.fijar_stock(producto, stock_nuevo)
        elif cambios.get("costo_unitario") is not None:
            self.ledger.recalcular_costo_total(producto)

        if producto.codigo != codigo_anterior or producto.nombre != nombre_anterior:
            self.propagar_renombre(codigo_anterior, producto.codigo, producto.nombre)

        self.uow.db.flush()
        return producto

    def propagar_renombre(self, codigo_anterior: str, codigo_nuevo: str, nombre_nuevo: str) -> Dict[str, int]:
        """Reescribe la copia de código/nombre en los registros históricos del producto."""
        afectados = {
            "entradas": self.uow.entradas.rename_product(codigo_anterior, codigo_nuevo, nombre_nuevo),
            "salidas": self.uow.salidas.rename_product(codigo_anterior, codigo_nuevo, nombre_nuevo),
            "equipos": self.uow.equipos.rename_product(codigo_anterior, codigo_nuevo, nombre_nuevo),
            "ordenes": self.uow.ordenes.rename_product(codigo_anterior, codigo_nuevo, nombre_nuevo),
        }
        logger.info(f"Renombre {codigo_anterior} -> {codigo_nuevo} '{nombre_nuevo}' propagado: {afectados}")
        return afectados

    def archivar_producto(self, producto_id: int) -> None:
        """Borrado lógico: el producto deja de ser visible y su código queda libre."""
        producto = self.obtener_producto(producto_id)
        producto.estado = EstadoProducto.ARCHIVADO.value
        producto.archivado_at = datetime.now()
        self.uow.db.flush()
        logger.info(f"Producto {producto.codigo} archivado (stock al archivar: {producto.stock_actual})")

    def alertas_stock(
        self,
        categoria: Optional[str] = None,
        ubicacion: Optional[str] = None,
        estado: Optional[str] = None,
        solo_criticos: bool = False,
    ) -> List[Dict[str, Any]]:
        resultado = []
        for producto in self.uow.productos.for_alerts(categoria, ubicacion):
            stock_minimo = producto.stock_minimo or settings.stock_minimo_default
            clasificacion = clasificar_stock(producto.stock_actual, stock_minimo)
            if estado and clasificacion.value != estado:
                continue
            if solo_criticos and clasificacion != EstadoAlertaStock.CRITICO:
                continue
            resultado.append({
                "id": producto.id,
                "codigo": producto.codigo,
                "nombre": producto.nombre,
                "stock_actual": producto.stock_actual,
                "stock_minimo": stock_minimo,
                "ubicacion": producto.ubicacion,
                "categoria": producto.categoria or "Sin categoría",
                "ultima_actualizacion": producto.updated_at.date().isoformat() if producto.updated_at else "",
                "estado": clasificacion.value,
            })
        return resultado
