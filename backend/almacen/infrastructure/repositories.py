from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session
from ..domain.models import (
    Producto, MovimientoEntrada, MovimientoSalida, ReporteEquipo, OrdenCompra, OrdenCompraProducto
)


def _contiene(columna, texto: str):
    return columna.ilike(f"%{texto}%")


class ProductoRepository:
    def __init__(self, db: Session): self.db = db
    def add(self, p: Producto): self.db.add(p); return p
    def get(self, id: int): return self.db.query(Producto).filter(Producto.id == id, Producto.archivado_at.is_(None)).first()

    def by_code(self, codigo: str, for_update: bool = False):
        q = self.db.query(Producto).filter(Producto.codigo == codigo, Producto.archivado_at.is_(None))
        if for_update:
            q = q.with_for_update()
        return q.first()

    def code_taken(self, codigo: str, exclude_id: int | None = None) -> bool:
        q = self.db.query(Producto.id).filter(Producto.codigo == codigo, Producto.archivado_at.is_(None))
        if exclude_id is not None:
            q = q.filter(Producto.id != exclude_id)
        return q.first() is not None

    def list(self, search: str | None = None):
        q = self.db.query(Producto).filter(Producto.archivado_at.is_(None))
        if search:
            q = q.filter(or_(
                _contiene(Producto.codigo, search),
                _contiene(Producto.nombre, search),
                _contiene(Producto.marca, search),
                _contiene(Producto.categoria, search),
            ))
        return q.order_by(Producto.created_at.desc(), Producto.id.desc()).all()

    def for_alerts(self, categoria: str | None = None, ubicacion: str | None = None):
        q = self.db.query(Producto).filter(Producto.archivado_at.is_(None))
        if categoria:
            q = q.filter(_contiene(Producto.categoria, categoria))
        if ubicacion:
            q = q.filter(_contiene(Producto.ubicacion, ubicacion))
        return q.order_by(Producto.codigo).all()


class MovimientoRepository:
    """Repositorio genérico para MovimientoEntrada y MovimientoSalida"""

    def __init__(self, db: Session, model):
        self.db = db
        self.model = model

    def add(self, m): self.db.add(m); return m
    def get(self, id: int, for_update: bool = False):
        q = self.db.query(self.model).filter(self.model.id == id, self.model.deleted_at.is_(None))
        if for_update:
            q = q.with_for_update()
        return q.first()

    def query_activos(self):
        return self.db.query(self.model).filter(self.model.deleted_at.is_(None))

    def rename_product(self, codigo_anterior: str, codigo_nuevo: str, descripcion: str) -> int:
        """Reescribe por código: también alcanza registros de un producto archivado que usaba ese código"""
        result = self.db.execute(
            update(self.model)
            .where(self.model.codigo_producto == codigo_anterior)
            .values(codigo_producto=codigo_nuevo, descripcion=descripcion, version=self.model.version + 1)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount


class EquipoRepository:
    def __init__(self, db: Session): self.db = db
    def add(self, r: ReporteEquipo): self.db.add(r); return r
    def get(self, id: int): return self.db.query(ReporteEquipo).filter(ReporteEquipo.id == id, ReporteEquipo.deleted_at.is_(None)).first()

    def list(self, search: str | None = None):
        q = self.db.query(ReporteEquipo).filter(ReporteEquipo.deleted_at.is_(None))
        if search:
            q = q.filter(or_(
                _contiene(ReporteEquipo.equipo, search),
                _contiene(ReporteEquipo.serie_codigo, search),
                _contiene(ReporteEquipo.responsable, search),
                _contiene(ReporteEquipo.area_proyecto, search),
            ))
        return q.order_by(ReporteEquipo.created_at.desc(), ReporteEquipo.id.desc()).all()

    def latest_by_code(self, serie_codigo: str):
        return (
            self.db.query(ReporteEquipo)
            .filter(ReporteEquipo.serie_codigo == serie_codigo, ReporteEquipo.deleted_at.is_(None))
            .order_by(ReporteEquipo.created_at.desc(), ReporteEquipo.id.desc())
            .first()
        )

    def rename_product(self, codigo_anterior: str, codigo_nuevo: str, nombre: str) -> int:
        """Reescribe por código: también alcanza registros de un producto archivado que usaba ese código"""
        result = self.db.execute(
            update(ReporteEquipo)
            .where(ReporteEquipo.serie_codigo == codigo_anterior)
            .values(serie_codigo=codigo_nuevo, equipo=nombre)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount


class OrdenCompraRepository:
    def __init__(self, db: Session): self.db = db
    def add(self, o: OrdenCompra): self.db.add(o); return o
    def add_line(self, l: OrdenCompraProducto): self.db.add(l); return l
    def get(self, id: int, for_update: bool = False):
        q = self.db.query(OrdenCompra).filter(OrdenCompra.id == id, OrdenCompra.deleted_at.is_(None))
        if for_update:
            q = q.with_for_update()
        return q.first()

    def list(self):
        return (
            self.db.query(OrdenCompra)
            .filter(OrdenCompra.deleted_at.is_(None))
            .order_by(OrdenCompra.created_at.desc(), OrdenCompra.id.desc())
            .all()
        )

    def get_line(self, orden_id: int, linea_id: int, for_update: bool = False):
        q = self.db.query(OrdenCompraProducto).filter(
            OrdenCompraProducto.id == linea_id,
            OrdenCompraProducto.orden_id == orden_id,
            OrdenCompraProducto.deleted_at.is_(None),
        )
        if for_update:
            q = q.with_for_update()
        return q.first()

    def active_totals(self, orden_id: int):
        """(Σ cantidad, Σ subtotal) sobre líneas activas"""
        return self.db.query(
            func.coalesce(func.sum(OrdenCompraProducto.cantidad), 0),
            func.coalesce(func.sum(OrdenCompraProducto.subtotal), 0),
        ).filter(
            OrdenCompraProducto.orden_id == orden_id,
            OrdenCompraProducto.deleted_at.is_(None),
        ).one()

    def all_codes(self):
        """Todos los códigos, incluidas órdenes eliminadas"""
        return [c for (c,) in self.db.query(OrdenCompra.codigo).all()]

    def rename_product(self, codigo_anterior: str, codigo_nuevo: str, nombre: str) -> int:
        """Reescribe por código: también alcanza registros de un producto archivado que usaba ese código"""
        result = self.db.execute(
            update(OrdenCompraProducto)
            .where(OrdenCompraProducto.codigo == codigo_anterior)
            .values(codigo=codigo_nuevo, nombre=nombre, version=OrdenCompraProducto.version + 1)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
