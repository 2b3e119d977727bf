"""
Compatibilidad de fechas en la frontera de la API.

La API acepta y devuelve fechas como texto "DD/MM/YYYY"; internamente se
guardan como DATE para que los filtros por rango comparen fechas reales.
"""
from datetime import date, datetime

from .excepciones import ValidacionError

FORMATO_API = "%d/%m/%Y"


def parse_fecha(valor: str | date | None) -> date | None:
    """
    Convierte "DD/MM/YYYY" (también "D/M/YYYY") o "YYYY-MM-DD" a date.

    Raises:
        ValidacionError: si el texto no tiene ninguno de los dos formatos
    """
    if valor is None or isinstance(valor, date):
        return valor
    texto = valor.strip()
    if not texto:
        return None
    try:
        if "/" in texto:
            dia, mes, anio = texto.split("/")
            return date(int(anio), int(mes), int(dia))
        return datetime.strptime(texto, "%Y-%m-%d").date()
    except ValueError:
        raise ValidacionError(f"Fecha inválida '{valor}'. Use DD/MM/YYYY o YYYY-MM-DD")


def formatear_fecha(valor: date | None) -> str | None:
    if valor is None:
        return None
    return valor.strftime(FORMATO_API)
