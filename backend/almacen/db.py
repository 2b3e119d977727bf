import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from .config import settings


def _engine_kwargs(url: str) -> dict:
    kwargs = {"echo": False, "future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # SQLite en memoria: una sola conexión compartida entre sesiones
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            os.makedirs("./data", exist_ok=True)
    return kwargs


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine, future=True)
Base = declarative_base()


def _import_all_models():
    """Importa todos los modelos para que Base.metadata los registre."""
    from .domain import models  # noqa: F401 - Producto, MovimientoEntrada, MovimientoSalida, ReporteEquipo, OrdenCompra


def init_db():
    """Crear tablas si no existen (arranque normal)."""
    _import_all_models()
    Base.metadata.create_all(bind=engine)


def recreate_schema_from_models():
    """Elimina todas las tablas y las recrea desde los modelos."""
    _import_all_models()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
