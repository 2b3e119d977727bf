"""
API de Órdenes de Compra
========================

Cabecera + líneas. Las líneas con código del catálogo descuentan stock al
agregarse y lo devuelven al eliminarse; los totales de la cabecera se
recalculan en cada cambio de línea.
"""
from fastapi import APIRouter, Depends
from typing import List

from ...dependencies import get_uow
from ...infrastructure.unit_of_work import UnitOfWork, ejecutar_en_transaccion
from ...application.dtos import (
    OrdenCompraIn, OrdenCompraUpdate, OrdenCompraOut,
    OrdenCompraProductoIn, OrdenCompraProductoUpdate, OrdenCompraProductoOut,
)
from ...application.services_ordenes_compra import OrdenesCompraService
from ...security.permisos import Permiso, requiere_permiso

router = APIRouter(prefix="/ordenes-compra", tags=["ordenes-compra"])


@router.post("", response_model=OrdenCompraOut)
def create_order(payload: OrdenCompraIn, _=Depends(requiere_permiso(Permiso.MOVEMENTS_CREATE))):
    return ejecutar_en_transaccion(
        lambda uow: OrdenCompraOut.model_validate(OrdenesCompraService(uow).crear_orden(payload.fecha))
    )

@router.get("", response_model=List[OrdenCompraOut])
def list_orders(
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_READ)),
):
    return [OrdenCompraOut.model_validate(o) for o in OrdenesCompraService(uow).listar_ordenes()]

@router.get("/{orden_id}", response_model=OrdenCompraOut)
def get_order(
    orden_id: int,
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_READ)),
):
    return OrdenCompraOut.model_validate(OrdenesCompraService(uow).obtener_orden(orden_id))

@router.patch("/{orden_id}", response_model=OrdenCompraOut)
def update_order(
    orden_id: int,
    payload: OrdenCompraUpdate,
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_UPDATE)),
):
    cambios = payload.model_dump(exclude_unset=True)
    return ejecutar_en_transaccion(
        lambda uow: OrdenCompraOut.model_validate(OrdenesCompraService(uow).actualizar_orden(orden_id, cambios))
    )

@router.delete("/{orden_id}", status_code=204)
def delete_order(orden_id: int, _=Depends(requiere_permiso(Permiso.MOVEMENTS_DELETE))):
    """Elimina la cabecera. Las líneas no devuelven stock."""
    ejecutar_en_transaccion(lambda uow: OrdenesCompraService(uow).eliminar_orden(orden_id))

# ===== LÍNEAS =====

@router.post("/{orden_id}/productos", response_model=OrdenCompraProductoOut)
def add_order_line(
    orden_id: int,
    payload: OrdenCompraProductoIn,
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_CREATE)),
):
    return ejecutar_en_transaccion(
        lambda uow: OrdenCompraProductoOut.model_validate(OrdenesCompraService(uow).agregar_producto(orden_id, payload))
    )

@router.patch("/{orden_id}/productos/{linea_id}", response_model=OrdenCompraProductoOut)
def update_order_line(
    orden_id: int,
    linea_id: int,
    payload: OrdenCompraProductoUpdate,
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_UPDATE)),
):
    cambios = payload.model_dump(exclude_unset=True)
    return ejecutar_en_transaccion(
        lambda uow: OrdenCompraProductoOut.model_validate(
            OrdenesCompraService(uow).actualizar_producto(orden_id, linea_id, cambios)
        )
    )

@router.delete("/{orden_id}/productos/{linea_id}", status_code=204)
def delete_order_line(
    orden_id: int,
    linea_id: int,
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_DELETE)),
):
    ejecutar_en_transaccion(lambda uow: OrdenesCompraService(uow).eliminar_producto(orden_id, linea_id))
