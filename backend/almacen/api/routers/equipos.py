"""
API de Equipos
==============

Reportes de salida de equipos. Registrar la salida descuenta stock; el
retorno y las ediciones no lo tocan.
"""
from fastapi import APIRouter, Depends
from typing import List, Optional

from ...dependencies import get_uow
from ...infrastructure.unit_of_work import UnitOfWork, ejecutar_en_transaccion
from ...application.dtos import EquipoIn, EquipoUpdate, RetornoEquipoIn, EquipoOut
from ...application.excepciones import NoEncontradoError
from ...application.services_equipos import EquiposService
from ...security.permisos import Permiso, requiere_permiso

router = APIRouter(prefix="/equipos", tags=["equipos"])


@router.post("", response_model=EquipoOut)
def checkout_equipment(payload: EquipoIn, _=Depends(requiere_permiso(Permiso.EQUIPMENT_CREATE))):
    return ejecutar_en_transaccion(
        lambda uow: EquipoOut.model_validate(EquiposService(uow).registrar_salida_equipo(payload))
    )

@router.get("", response_model=List[EquipoOut])
def list_equipment(
    search: Optional[str] = None,
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.EQUIPMENT_READ)),
):
    return [EquipoOut.model_validate(r) for r in EquiposService(uow).listar_reportes(search)]

@router.get("/codigo/{serie_codigo}", response_model=EquipoOut)
def get_latest_by_code(
    serie_codigo: str,
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.EQUIPMENT_READ)),
):
    """Último reporte registrado para un código de equipo."""
    reporte = EquiposService(uow).ultimo_por_codigo(serie_codigo)
    if not reporte:
        raise NoEncontradoError(f"No hay reportes para el equipo {serie_codigo}")
    return EquipoOut.model_validate(reporte)

@router.get("/{reporte_id}", response_model=EquipoOut)
def get_equipment(
    reporte_id: int,
    uow: UnitOfWork = Depends(get_uow),
    _=Depends(requiere_permiso(Permiso.EQUIPMENT_READ)),
):
    return EquipoOut.model_validate(EquiposService(uow).obtener_reporte(reporte_id))

@router.patch("/{reporte_id}", response_model=EquipoOut)
def update_equipment(
    reporte_id: int,
    payload: EquipoUpdate,
    _=Depends(requiere_permiso(Permiso.EQUIPMENT_UPDATE)),
):
    cambios = payload.model_dump(exclude_unset=True)
    return ejecutar_en_transaccion(
        lambda uow: EquipoOut.model_validate(EquiposService(uow).actualizar_reporte(reporte_id, cambios))
    )

@router.patch("/{reporte_id}/retorno", response_model=EquipoOut)
def return_equipment(
    reporte_id: int,
    payload: RetornoEquipoIn,
    _=Depends(requiere_permiso(Permiso.EQUIPMENT_UPDATE)),
):
    return ejecutar_en_transaccion(
        lambda uow: EquipoOut.model_validate(EquiposService(uow).registrar_retorno(reporte_id, payload))
    )

@router.delete("/{reporte_id}", status_code=204)
def delete_equipment(reporte_id: int, _=Depends(requiere_permiso(Permiso.EQUIPMENT_DELETE))):
    ejecutar_en_transaccion(lambda uow: EquiposService(uow).eliminar_reporte(reporte_id))
