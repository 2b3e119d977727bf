"""
Servicios de Salida y Retorno de Equipos
========================================

- Registrar la salida descuenta stock exactamente como una salida de
  almacén (mismo control de disponibilidad).
- El retorno solo actualiza estado, fecha y responsable: no repone stock.
- Editar o eliminar un reporte tampoco toca el stock.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from ..infrastructure.unit_of_work import UnitOfWork
from ..domain.models import ReporteEquipo
from .dtos import EquipoIn, RetornoEquipoIn
from .excepciones import NoEncontradoError
from .services_ledger import LedgerStockService

logger = logging.getLogger(__name__)


class EquiposService:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self.ledger = LedgerStockService(uow)

    def registrar_salida_equipo(self, datos: EquipoIn) -> ReporteEquipo:
        producto = self.ledger.obtener_activo(datos.serie_codigo, bloquear=True)
        self.ledger.verificar_disponible(producto, datos.cantidad)

        reporte = ReporteEquipo(
            equipo=datos.equipo,
            serie_codigo=datos.serie_codigo,
            cantidad=datos.cantidad,
            estado_equipo=datos.estado_equipo.value,
            responsable=datos.responsable,
            fecha_salida=datos.fecha_salida,
            hora_salida=datos.hora_salida,
            area_proyecto=datos.area_proyecto,
            firma=datos.firma,
        )
        self.uow.equipos.add(reporte)
        self.ledger.ajustar_stock(datos.serie_codigo, salidas=datos.cantidad)
        self.uow.db.flush()

        logger.info(f"Equipo {reporte.serie_codigo} x{reporte.cantidad} entregado a {reporte.responsable}")
        return reporte

    def listar_reportes(self, search: Optional[str] = None) -> List[ReporteEquipo]:
        return self.uow.equipos.list(search)

    def obtener_reporte(self, reporte_id: int) -> ReporteEquipo:
        reporte = self.uow.equipos.get(reporte_id)
        if not reporte:
            raise NoEncontradoError(f"Reporte de equipo {reporte_id} no encontrado")
        return reporte

    def ultimo_por_codigo(self, serie_codigo: str) -> Optional[ReporteEquipo]:
        return self.uow.equipos.latest_by_code(serie_codigo)

    def actualizar_reporte(self, reporte_id: int, cambios: Dict[str, Any]) -> ReporteEquipo:
        reporte = self.obtener_reporte(reporte_id)
        for campo, valor in cambios.items():
            if valor is None and campo != "firma":
                continue
            if hasattr(valor, "value"):
                valor = valor.value
            setattr(reporte, campo, valor)
        self.uow.db.flush()
        return reporte

    def registrar_retorno(self, reporte_id: int, datos: RetornoEquipoIn) -> ReporteEquipo:
        # TODO: reponer stock al retornar cuando se defina la política de equipos dañados
        reporte = self.obtener_reporte(reporte_id)
        reporte.fecha_retorno = datos.fecha_retorno
        reporte.hora_retorno = datos.hora_retorno
        reporte.estado_retorno = datos.estado_retorno.value
        reporte.responsable_retorno = datos.responsable_retorno
        reporte.firma_retorno = datos.firma_retorno
        self.uow.db.flush()

        logger.info(f"Retorno registrado para reporte {reporte.id} ({reporte.serie_codigo}), estado {reporte.estado_retorno}")
        return reporte

    def eliminar_reporte(self, reporte_id: int) -> None:
        reporte = self.obtener_reporte(reporte_id)
        reporte.deleted_at = datetime.now()
        self.uow.db.flush()
