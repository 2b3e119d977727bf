from typing import Generator

from .infrastructure.unit_of_work import UnitOfWork


def get_uow() -> Generator[UnitOfWork, None, None]:
    """UnitOfWork de solo lectura para consultas; las escrituras usan ejecutar_en_transaccion."""
    uow = UnitOfWork()
    try:
        yield uow
    finally:
        uow.close()
