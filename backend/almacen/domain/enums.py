from enum import Enum

class EstadoProducto(str, Enum):
    ACTIVO = "ACTIVO"
    ARCHIVADO = "ARCHIVADO"  # Eliminado lógicamente; libera el código

class EstadoEquipo(str, Enum):
    BUENO = "Bueno"
    REGULAR = "Regular"
    MALO = "Malo"
    EN_REPARACION = "En Reparación"
    DANADO = "Dañado"

class EstadoAlertaStock(str, Enum):
    CRITICO = "critico"
    BAJO = "bajo"
    NORMAL = "normal"

class UserRole(str, Enum):
    GERENTE = "GERENTE"
    AYUDANTE = "AYUDANTE"
    ASISTENTE = "ASISTENTE"
