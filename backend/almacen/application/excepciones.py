"""
Excepciones del motor de stock
==============================

Todas heredan de AlmacenError; la API traduce cada clase a un código HTTP
en un único manejador (ver main.py). Ninguna se reintenta salvo
ConflictoConcurrenciaError, que solo aparece cuando ya se agotaron los
reintentos.
"""


class AlmacenError(Exception):
    """Excepción base del módulo de almacén"""
    status_code = 400

    def __init__(self, mensaje: str):
        super().__init__(mensaje)
        self.mensaje = mensaje

    def to_dict(self) -> dict:
        return {"detail": self.mensaje, "error": type(self).__name__}


class NoEncontradoError(AlmacenError):
    """Producto, movimiento, orden, línea o reporte inexistente o eliminado"""
    status_code = 404


class ConflictoError(AlmacenError):
    """Violación de unicidad (código de producto activo duplicado)"""
    status_code = 409


class ValidacionError(AlmacenError):
    """Entrada mal formada que el esquema no pudo rechazar"""
    status_code = 422


class StockInsuficienteError(AlmacenError):
    """Una precondición de stock falló; no se escribió nada"""
    status_code = 400

    def __init__(self, disponible: int, solicitado: int, mensaje: str | None = None):
        self.disponible = disponible
        self.solicitado = solicitado
        super().__init__(
            mensaje or f"Stock insuficiente. Disponible: {disponible}, Solicitado: {solicitado}"
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({"disponible": self.disponible, "solicitado": self.solicitado})
        return data


class ConflictoConcurrenciaError(AlmacenError):
    """El control optimista de versión siguió fallando tras todos los reintentos"""
    status_code = 409
