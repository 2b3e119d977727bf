from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, constr
from typing import Annotated, Generic, List, Optional, TypeVar
from datetime import date, datetime
from decimal import Decimal

from .excepciones import ValidacionError
from .fechas import parse_fecha, formatear_fecha
from ..domain.enums import EstadoEquipo


def _validar_fecha(valor):
    try:
        return parse_fecha(valor)
    except ValidacionError as e:
        raise ValueError(e.mensaje)


# Fecha "DD/MM/YYYY" en la API, date en el dominio
FechaApi = Annotated[date, BeforeValidator(_validar_fecha), PlainSerializer(formatear_fecha, return_type=str)]
Texto = constr(strip_whitespace=True, min_length=1)

T = TypeVar("T")


class Paginacion(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int

class Pagina(BaseModel, Generic[T]):
    data: List[T]
    pagination: Paginacion

# ===== PRODUCTOS =====

class ProductoIn(BaseModel):
    codigo: Texto
    nombre: Texto
    costo_unitario: Decimal = Field(..., ge=0)
    ubicacion: str = ""
    unidad_medida: str = "UN"
    marca: Optional[str] = None
    categoria: Optional[str] = None
    stock_actual: int = Field(default=0, ge=0)
    stock_minimo: Optional[int] = Field(default=None, ge=0)
    entradas: int = Field(default=0, ge=0)
    salidas: int = Field(default=0, ge=0)

class ProductoUpdate(BaseModel):
    codigo: Optional[Texto] = None
    nombre: Optional[Texto] = None
    costo_unitario: Optional[Decimal] = Field(default=None, ge=0)
    ubicacion: Optional[str] = None
    unidad_medida: Optional[str] = None
    marca: Optional[str] = None
    categoria: Optional[str] = None
    stock_actual: Optional[int] = Field(default=None, ge=0)  # Ajuste manual vía libro de stock
    stock_minimo: Optional[int] = Field(default=None, ge=0)

class ProductoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    codigo: str
    nombre: str
    costo_unitario: Decimal
    ubicacion: str
    unidad_medida: str
    marca: Optional[str] = None
    categoria: Optional[str] = None
    entradas: int
    salidas: int
    stock_actual: int
    stock_minimo: Optional[int] = None
    costo_total: Decimal
    estado: str
    created_at: datetime
    updated_at: datetime

class AlertaStockOut(BaseModel):
    id: int
    codigo: str
    nombre: str
    stock_actual: int
    stock_minimo: int
    ubicacion: str
    categoria: str
    ultima_actualizacion: str
    estado: str

# ===== MOVIMIENTOS =====

class EntradaIn(BaseModel):
    fecha: FechaApi
    codigo_producto: Texto
    descripcion: Texto
    precio_unitario: Decimal = Field(..., ge=0)
    cantidad: int = Field(..., ge=1)
    responsable: Optional[str] = None
    area: Optional[str] = None

class SalidaIn(EntradaIn):
    proyecto: Optional[str] = None

class EntradaUpdate(BaseModel):
    fecha: Optional[FechaApi] = None
    descripcion: Optional[Texto] = None
    precio_unitario: Optional[Decimal] = Field(default=None, ge=0)
    cantidad: Optional[int] = Field(default=None, ge=1)
    responsable: Optional[str] = None
    area: Optional[str] = None

class SalidaUpdate(EntradaUpdate):
    proyecto: Optional[str] = None

class SalidaCantidadUpdate(BaseModel):
    cantidad: int = Field(..., ge=1)

class EntradaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    fecha: FechaApi
    codigo_producto: str
    descripcion: str
    precio_unitario: Decimal
    cantidad: int
    responsable: Optional[str] = None
    area: Optional[str] = None
    categoria: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class SalidaOut(EntradaOut):
    proyecto: Optional[str] = None

class BusquedaMovimientosOut(BaseModel):
    entries: List[EntradaOut]
    exits: List[SalidaOut]

# ===== EQUIPOS =====

class EquipoIn(BaseModel):
    equipo: Texto
    serie_codigo: Texto
    cantidad: int = Field(..., ge=1)
    estado_equipo: EstadoEquipo
    responsable: Texto
    fecha_salida: FechaApi
    hora_salida: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    area_proyecto: Texto
    firma: Optional[str] = None

class EquipoUpdate(BaseModel):
    equipo: Optional[Texto] = None
    estado_equipo: Optional[EstadoEquipo] = None
    responsable: Optional[Texto] = None
    fecha_salida: Optional[FechaApi] = None
    hora_salida: Optional[str] = Field(default=None, pattern=r"^\d{2}:\d{2}$")
    area_proyecto: Optional[Texto] = None
    firma: Optional[str] = None

class RetornoEquipoIn(BaseModel):
    fecha_retorno: FechaApi
    hora_retorno: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    estado_retorno: EstadoEquipo
    responsable_retorno: Optional[str] = None
    firma_retorno: Optional[str] = None

class EquipoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    equipo: str
    serie_codigo: str
    cantidad: int
    estado_equipo: str
    responsable: str
    fecha_salida: FechaApi
    hora_salida: str
    area_proyecto: str
    firma: Optional[str] = None
    fecha_retorno: Optional[FechaApi] = None
    hora_retorno: Optional[str] = None
    estado_retorno: Optional[str] = None
    responsable_retorno: Optional[str] = None
    firma_retorno: Optional[str] = None
    created_at: datetime
    updated_at: datetime

# ===== ÓRDENES DE COMPRA =====

class OrdenCompraIn(BaseModel):
    fecha: FechaApi

class OrdenCompraUpdate(BaseModel):
    fecha: Optional[FechaApi] = None

class OrdenCompraProductoIn(BaseModel):
    fecha: FechaApi
    codigo: Texto
    nombre: Texto
    area: Optional[str] = None
    proyecto: Optional[str] = None
    responsable: Optional[str] = None
    cantidad: int = Field(..., ge=1)
    costo_unitario: Decimal = Field(..., ge=0)

class OrdenCompraProductoUpdate(BaseModel):
    fecha: Optional[FechaApi] = None
    codigo: Optional[Texto] = None
    nombre: Optional[Texto] = None
    area: Optional[str] = None
    proyecto: Optional[str] = None
    responsable: Optional[str] = None
    cantidad: Optional[int] = Field(default=None, ge=1)
    costo_unitario: Optional[Decimal] = Field(default=None, ge=0)

class OrdenCompraProductoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    orden_id: int
    fecha: FechaApi
    codigo: str
    nombre: str
    area: Optional[str] = None
    proyecto: Optional[str] = None
    responsable: Optional[str] = None
    cantidad: int
    costo_unitario: Decimal
    subtotal: Decimal
    descuenta_stock: bool

class OrdenCompraOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    codigo: str
    fecha: FechaApi
    cantidad: int
    costo: Decimal
    created_at: datetime
    updated_at: datetime
    # Solo líneas activas
    productos: List[OrdenCompraProductoOut] = Field(default=[], validation_alias="productos_activos")
