"""
Permisos por rol
================

Cada ruta exige el permiso de su familia de recursos. Las órdenes de compra
usan la familia de movimientos.
"""
from enum import Enum
from typing import Dict, List
import logging

from fastapi import Depends, HTTPException, status

from ..domain.enums import UserRole
from .auth import Principal, get_current_user

logger = logging.getLogger(__name__)


class Permiso(str, Enum):
    INVENTORY_READ = "inventory:read"
    INVENTORY_CREATE = "inventory:create"
    INVENTORY_UPDATE = "inventory:update"
    INVENTORY_DELETE = "inventory:delete"
    MOVEMENTS_READ = "movements:read"
    MOVEMENTS_CREATE = "movements:create"
    MOVEMENTS_UPDATE = "movements:update"
    MOVEMENTS_DELETE = "movements:delete"
    EQUIPMENT_READ = "equipment:read"
    EQUIPMENT_CREATE = "equipment:create"
    EQUIPMENT_UPDATE = "equipment:update"
    EQUIPMENT_DELETE = "equipment:delete"
    REPORTS_READ = "reports:read"
    REPORTS_GENERATE = "reports:generate"


AVAILABLE_PERMISSIONS: List[Permiso] = list(Permiso)

# Los tres roles operan todo el almacén; difieren en usuarios y proveedores,
# que no viven en este servicio
ROLE_PERMISSIONS: Dict[str, List[Permiso]] = {
    UserRole.GERENTE.value: AVAILABLE_PERMISSIONS,
    UserRole.AYUDANTE.value: AVAILABLE_PERMISSIONS,
    UserRole.ASISTENTE.value: AVAILABLE_PERMISSIONS,
}


def tiene_permiso(role: str, permiso: Permiso) -> bool:
    return permiso in ROLE_PERMISSIONS.get(role, [])


def requiere_permiso(*permisos: Permiso):
    """Dependencia FastAPI: 403 si el rol del token no tiene todos los permisos."""

    def _verificar(principal: Principal = Depends(get_current_user)) -> Principal:
        faltantes = [p.value for p in permisos if not tiene_permiso(principal.role, p)]
        if faltantes:
            logger.warning(f"Acceso denegado a {principal.username} ({principal.role}): faltan {faltantes}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permisos insuficientes: {', '.join(faltantes)}",
            )
        return principal

    return _verificar
