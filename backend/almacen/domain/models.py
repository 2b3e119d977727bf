"""
Modelos del Dominio de Almacén
==============================

- Producto: catálogo + contadores del libro de stock
- MovimientoEntrada / MovimientoSalida: bitácora de movimientos (borrado lógico)
- ReporteEquipo: salida y retorno de equipos
- OrdenCompra / OrdenCompraProducto: agregado de orden de compra con totales derivados

Los movimientos, reportes y líneas referencian al producto por código
(texto), no por clave foránea.
"""
from decimal import Decimal
from datetime import datetime, date
from sqlalchemy import Integer, String, Boolean, ForeignKey, Numeric, Date, DateTime, Index, text
from sqlalchemy.orm import relationship, Mapped, mapped_column, declared_attr
from ..db import Base
from .enums import EstadoProducto


class Producto(Base):
    """
    Producto del catálogo.

    Solo el libro de stock (services_ledger) escribe entradas, salidas,
    stock_actual y costo_total. El código es único entre productos activos;
    un producto archivado conserva su código y lo deja libre para reuso.
    """
    __tablename__ = "productos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    codigo: Mapped[str] = mapped_column(String(50), index=True)
    nombre: Mapped[str] = mapped_column(String(200))
    costo_unitario: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    ubicacion: Mapped[str] = mapped_column(String(100), default="")
    unidad_medida: Mapped[str] = mapped_column(String(20), default="UN")
    marca: Mapped[str | None] = mapped_column(String(100), nullable=True)
    categoria: Mapped[str | None] = mapped_column(String(100), nullable=True)
    stock_minimo: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Contadores acumulados (auditoría, no se revierten)
    entradas: Mapped[int] = mapped_column(Integer, default=0)
    salidas: Mapped[int] = mapped_column(Integer, default=0)
    stock_actual: Mapped[int] = mapped_column(Integer, default=0)
    costo_total: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))

    estado: Mapped[str] = mapped_column(String(20), default=EstadoProducto.ACTIVO.value)
    archivado_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        Index(
            "uq_producto_codigo_activo",
            "codigo",
            unique=True,
            sqlite_where=text("archivado_at IS NULL"),
            postgresql_where=text("archivado_at IS NULL"),
        ),
    )
    # Control optimista: UPDATE ... WHERE version = :leida
    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Producto {self.codigo} stock={self.stock_actual}>"


class MovimientoMixin:
    """Columnas comunes de entradas y salidas"""
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    fecha: Mapped[date] = mapped_column(Date, index=True)
    codigo_producto: Mapped[str] = mapped_column(String(50), index=True)
    descripcion: Mapped[str] = mapped_column(String(255))  # Copia del nombre del producto
    precio_unitario: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    cantidad: Mapped[int] = mapped_column(Integer)
    responsable: Mapped[str | None] = mapped_column(String(150), nullable=True)
    area: Mapped[str | None] = mapped_column(String(100), nullable=True)
    categoria: Mapped[str | None] = mapped_column(String(100), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Una reversión o edición con la versión vieja falla y se reintenta
    @declared_attr.directive
    def __mapper_args__(cls):
        return {"version_id_col": cls.__table__.c.version}


class MovimientoEntrada(MovimientoMixin, Base):
    __tablename__ = "movement_entries"

    def __repr__(self):
        return f"<MovimientoEntrada {self.id} {self.codigo_producto} x{self.cantidad}>"


class MovimientoSalida(MovimientoMixin, Base):
    __tablename__ = "movement_exits"

    proyecto: Mapped[str | None] = mapped_column(String(150), nullable=True)

    def __repr__(self):
        return f"<MovimientoSalida {self.id} {self.codigo_producto} x{self.cantidad}>"


class ReporteEquipo(Base):
    """
    Salida de equipo. Al crearse descuenta stock como una salida;
    el retorno solo actualiza campos y no repone stock.
    """
    __tablename__ = "equipment_reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    equipo: Mapped[str] = mapped_column(String(200))
    serie_codigo: Mapped[str] = mapped_column(String(50), index=True)  # Código del producto
    cantidad: Mapped[int] = mapped_column(Integer)
    estado_equipo: Mapped[str] = mapped_column(String(20))
    responsable: Mapped[str] = mapped_column(String(150))
    fecha_salida: Mapped[date] = mapped_column(Date)
    hora_salida: Mapped[str] = mapped_column(String(5))  # HH:MM
    area_proyecto: Mapped[str] = mapped_column(String(150))
    firma: Mapped[str | None] = mapped_column(String(150), nullable=True)
    fecha_retorno: Mapped[date | None] = mapped_column(Date, nullable=True)
    hora_retorno: Mapped[str | None] = mapped_column(String(5), nullable=True)
    estado_retorno: Mapped[str | None] = mapped_column(String(20), nullable=True)
    responsable_retorno: Mapped[str | None] = mapped_column(String(150), nullable=True)
    firma_retorno: Mapped[str | None] = mapped_column(String(150), nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)


class OrdenCompra(Base):
    """
    Cabecera de orden de compra.
    cantidad y costo se recalculan siempre sobre las líneas activas.
    """
    __tablename__ = "purchase_orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    codigo: Mapped[str] = mapped_column(String(20), unique=True, index=True)  # OC-0001
    fecha: Mapped[date] = mapped_column(Date)
    cantidad: Mapped[int] = mapped_column(Integer, default=0)
    costo: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relaciones
    productos = relationship(
        "OrdenCompraProducto",
        back_populates="orden",
        order_by="OrdenCompraProducto.id",
    )
    # Dos cambios de líneas en paralelo no pueden pisar los totales
    __mapper_args__ = {"version_id_col": version}

    @property
    def productos_activos(self) -> list["OrdenCompraProducto"]:
        return [p for p in self.productos if p.deleted_at is None]


class OrdenCompraProducto(Base):
    """
    Línea de orden de compra.
    descuenta_stock indica que, al crearse, el código existía en el catálogo
    y la cantidad se descontó del stock; solo esas líneas devuelven stock.
    """
    __tablename__ = "purchase_order_products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    orden_id: Mapped[int] = mapped_column(ForeignKey("purchase_orders.id"), index=True)
    fecha: Mapped[date] = mapped_column(Date)
    codigo: Mapped[str] = mapped_column(String(50), index=True)
    nombre: Mapped[str] = mapped_column(String(200))
    area: Mapped[str | None] = mapped_column(String(100), nullable=True)
    proyecto: Mapped[str | None] = mapped_column(String(150), nullable=True)
    responsable: Mapped[str | None] = mapped_column(String(150), nullable=True)
    cantidad: Mapped[int] = mapped_column(Integer)
    costo_unitario: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    subtotal: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    descuenta_stock: Mapped[bool] = mapped_column(Boolean, default=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relaciones
    orden = relationship("OrdenCompra", back_populates="productos")

    __mapper_args__ = {"version_id_col": version}
