"""
API de Inventario
=================

Catálogo de productos y alertas de stock. El stock se modifica a través de
movimientos, equipos y órdenes de compra; aquí solo el ajuste manual.
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from ...dependencies import get_uow
from ...infrastructure.unit_of_work import UnitOfWork, ejecutar_en_transaccion
from ...application.dtos import ProductoIn, ProductoUpdate, ProductoOut, AlertaStockOut
from ...application.services_inventario import InventarioService
from ...domain.enums import EstadoAlertaStock
from ...security.permisos import Permiso, requiere_permiso

router = APIRouter(prefix="/inventario", tags=["inventario"])


@router.post("/productos", response_model=ProductoOut)
def create_product(payload: ProductoIn, _=Depends(requiere_permiso(Permiso.INVENTORY_CREATE))):
    return ejecutar_en_transaccion(
        lambda uow: ProductoOut.model_validate(InventarioService(uow).crear_producto(payload))
    )

@router.get("/productos", response_model=List[ProductoOut])
def list_products(
    search: Optional[str] = None,
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.INVENTORY_READ)),
):
    return [ProductoOut.model_validate(p) for p in InventarioService(uow).listar_productos(search)]

@router.get("/productos/codigo/{codigo}", response_model=ProductoOut)
def get_product_by_code(
    codigo: str,
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.INVENTORY_READ)),
):
    return ProductoOut.model_validate(InventarioService(uow).obtener_por_codigo(codigo))

@router.get("/productos/{producto_id}", response_model=ProductoOut)
def get_product(
    producto_id: int,
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.INVENTORY_READ)),
):
    return ProductoOut.model_validate(InventarioService(uow).obtener_producto(producto_id))

@router.patch("/productos/{producto_id}", response_model=ProductoOut)
def update_product(
    producto_id: int,
    payload: ProductoUpdate,
    _=Depends(requiere_permiso(Permiso.INVENTORY_UPDATE)),
):
    """
    Actualiza un producto. Un cambio de código o nombre se propaga a
    movimientos, reportes de equipo y líneas de órdenes de compra.
    """
    cambios = payload.model_dump(exclude_unset=True)
    return ejecutar_en_transaccion(
        lambda uow: ProductoOut.model_validate(InventarioService(uow).actualizar_producto(producto_id, dict(cambios)))
    )

@router.delete("/productos/{producto_id}", status_code=204)
def delete_product(producto_id: int, _=Depends(requiere_permiso(Permiso.INVENTORY_DELETE))):
    """Archiva el producto; su código queda disponible para uno nuevo."""
    ejecutar_en_transaccion(lambda uow: InventarioService(uow).archivar_producto(producto_id))

@router.get("/alertas", response_model=List[AlertaStockOut])
def stock_alerts(
    categoria: Optional[str] = None,
    ubicacion: Optional[str] = None,
    estado: Optional[EstadoAlertaStock] = None,
    solo_criticos: bool = Query(False),
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.REPORTS_READ)),
):
    return InventarioService(uow).alertas_stock(
        categoria=categoria,
        ubicacion=ubicacion,
        estado=estado.value if estado else None,
        solo_criticos=solo_criticos,
    )
