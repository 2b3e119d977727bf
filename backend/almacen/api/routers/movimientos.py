"""
API de Movimientos
==================

Entradas y salidas de almacén. Cada alta, edición o eliminación ajusta el
stock del producto en la misma transacción.
"""
from fastapi import APIRouter, Depends, Query
from typing import Optional

from ...dependencies import get_uow
from ...infrastructure.unit_of_work import UnitOfWork, ejecutar_en_transaccion
from ...application.dtos import (
    EntradaIn, SalidaIn, EntradaUpdate, SalidaUpdate, SalidaCantidadUpdate,
    EntradaOut, SalidaOut, BusquedaMovimientosOut, Pagina,
)
from ...application.services_movimientos import MovimientosService
from ...security.permisos import Permiso, requiere_permiso

router = APIRouter(prefix="/movimientos", tags=["movimientos"])


def _pagina(resultado: dict, out) -> dict:
    return {
        "data": [out.model_validate(m) for m in resultado["data"]],
        "pagination": resultado["pagination"],
    }

# ===== ENTRADAS =====

@router.post("/entradas", response_model=EntradaOut)
def create_entry(payload: EntradaIn, _=Depends(requiere_permiso(Permiso.MOVEMENTS_CREATE))):
    return ejecutar_en_transaccion(
        lambda uow: EntradaOut.model_validate(MovimientosService(uow).crear_entrada(payload))
    )

@router.get("/entradas", response_model=Pagina[EntradaOut])
def list_entries(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    search: Optional[str] = None,
    categoria: Optional[str] = None,
    area: Optional[str] = None,
    responsable: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_READ)),
):
    """Fechas de filtro en YYYY-MM-DD o DD/MM/YYYY (inclusivas)."""
    resultado = MovimientosService(uow).listar_entradas(
        page=page, limit=limit, search=search, categoria=categoria, area=area,
        responsable=responsable, start_date=start_date, end_date=end_date,
    )
    return _pagina(resultado, EntradaOut)

@router.get("/entradas/{entrada_id}", response_model=EntradaOut)
def get_entry(
    entrada_id: int,
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_READ)),
):
    return EntradaOut.model_validate(MovimientosService(uow).obtener_entrada(entrada_id))

@router.patch("/entradas/{entrada_id}", response_model=EntradaOut)
def update_entry(
    entrada_id: int,
    payload: EntradaUpdate,
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_UPDATE)),
):
    cambios = payload.model_dump(exclude_unset=True)
    return ejecutar_en_transaccion(
        lambda uow: EntradaOut.model_validate(MovimientosService(uow).actualizar_entrada(entrada_id, cambios))
    )

@router.delete("/entradas/{entrada_id}", status_code=204)
def delete_entry(entrada_id: int, _=Depends(requiere_permiso(Permiso.MOVEMENTS_DELETE))):
    ejecutar_en_transaccion(lambda uow: MovimientosService(uow).eliminar_entrada(entrada_id))

# ===== SALIDAS =====

@router.post("/salidas", response_model=SalidaOut)
def create_exit(payload: SalidaIn, _=Depends(requiere_permiso(Permiso.MOVEMENTS_CREATE))):
    return ejecutar_en_transaccion(
        lambda uow: SalidaOut.model_validate(MovimientosService(uow).crear_salida(payload))
    )

@router.get("/salidas", response_model=Pagina[SalidaOut])
def list_exits(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    search: Optional[str] = None,
    categoria: Optional[str] = None,
    area: Optional[str] = None,
    responsable: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_READ)),
):
    resultado = MovimientosService(uow).listar_salidas(
        page=page, limit=limit, search=search, categoria=categoria, area=area,
        responsable=responsable, start_date=start_date, end_date=end_date,
    )
    return _pagina(resultado, SalidaOut)

@router.get("/salidas/{salida_id}", response_model=SalidaOut)
def get_exit(
    salida_id: int,
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_READ)),
):
    return SalidaOut.model_validate(MovimientosService(uow).obtener_salida(salida_id))

@router.patch("/salidas/{salida_id}", response_model=SalidaOut)
def update_exit(
    salida_id: int,
    payload: SalidaUpdate,
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_UPDATE)),
):
    cambios = payload.model_dump(exclude_unset=True)
    return ejecutar_en_transaccion(
        lambda uow: SalidaOut.model_validate(MovimientosService(uow).actualizar_salida(salida_id, cambios))
    )

@router.patch("/salidas/{salida_id}/cantidad", response_model=SalidaOut)
def update_exit_quantity(
    salida_id: int,
    payload: SalidaCantidadUpdate,
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_UPDATE)),
):
    return ejecutar_en_transaccion(
        lambda uow: SalidaOut.model_validate(
            MovimientosService(uow).actualizar_cantidad_salida(salida_id, payload.cantidad)
        )
    )

@router.delete("/salidas/{salida_id}", status_code=204)
def delete_exit(salida_id: int, _=Depends(requiere_permiso(Permiso.MOVEMENTS_DELETE))):
    ejecutar_en_transaccion(lambda uow: MovimientosService(uow).eliminar_salida(salida_id))

# ===== BÚSQUEDA =====

@router.get("/buscar", response_model=BusquedaMovimientosOut)
def search_movements(
    q: str = Query(..., min_length=1),
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.MOVEMENTS_READ)),
):
    resultado = MovimientosService(uow).buscar_movimientos(q)
    return {
        "entries": [EntradaOut.model_validate(m) for m in resultado["entries"]],
        "exits": [SalidaOut.model_validate(m) for m in resultado["exits"]],
    }
