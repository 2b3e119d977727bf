import logging
from typing import Callable, TypeVar
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from ..config import settings
from ..db import SessionLocal
from ..domain.models import MovimientoEntrada, MovimientoSalida
from ..application.excepciones import ConflictoConcurrenciaError
from .repositories import ProductoRepository, MovimientoRepository, EquipoRepository, OrdenCompraRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UnitOfWork:
    def __init__(self, db: Session = None):
        self.db: Session = db if db is not None else SessionLocal()
        self.productos = ProductoRepository(self.db)
        self.entradas = MovimientoRepository(self.db, MovimientoEntrada)
        self.salidas = MovimientoRepository(self.db, MovimientoSalida)
        self.equipos = EquipoRepository(self.db)
        self.ordenes = OrdenCompraRepository(self.db)

    def commit(self): self.db.commit()
    def rollback(self): self.db.rollback()
    def close(self): self.db.close()


def ejecutar_en_transaccion(
    operacion: Callable[[UnitOfWork], T],
    intentos: int | None = None,
    session_factory: Callable[[], Session] | None = None,
) -> T:
    """
    Ejecuta operacion(uow) en una sola transacción y hace commit.

    Cualquier excepción revierte todo. Un conflicto de versión en un producto
    (otro proceso lo modificó entre la lectura y la escritura) revierte y
    vuelve a ejecutar la operación completa sobre el estado fresco.
    """
    intentos = intentos or settings.stock_retry_attempts
    factory = session_factory or SessionLocal
    for intento in range(1, intentos + 1):
        uow = UnitOfWork(factory())
        try:
            resultado = operacion(uow)
            uow.commit()
            return resultado
        except StaleDataError as e:
            uow.rollback()
            logger.warning(f"Conflicto de concurrencia (intento {intento}/{intentos}): {e}")
            if intento == intentos:
                raise ConflictoConcurrenciaError(
                    "El stock fue modificado por otra operación concurrente. Intente nuevamente."
                ) from e
        except BaseException:
            uow.rollback()
            raise
        finally:
            uow.close()
