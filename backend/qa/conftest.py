"""
Configuración global de pytest para tests del libro de stock
"""
import os
import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Agregar el directorio raíz al path para imports
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

# BD en memoria y sin archivos de log, antes de importar almacen
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_TO_FILE"] = "false"
os.environ["SECRET_KEY"] = "clave-de-pruebas-almacen-0123456789abcdef"

from almacen.db import recreate_schema_from_models
from almacen.application.dtos import ProductoIn
from almacen.application.services_inventario import InventarioService
from almacen.infrastructure.unit_of_work import UnitOfWork, ejecutar_en_transaccion


@pytest.fixture(autouse=True)
def schema():
    """Esquema limpio por test"""
    recreate_schema_from_models()
    yield


@pytest.fixture
def crear_producto():
    """Crea un producto activo y devuelve su código"""

    def _crear(codigo="P-001", stock=10, costo="5.00", nombre=None, **extra):
        datos = ProductoIn(
            codigo=codigo,
            nombre=nombre or f"Producto {codigo}",
            costo_unitario=Decimal(costo),
            stock_actual=stock,
            **extra,
        )
        return ejecutar_en_transaccion(lambda uow: InventarioService(uow).crear_producto(datos)).codigo

    return _crear


@pytest.fixture
def leer_producto():
    """Lee el estado confirmado de un producto activo en una sesión nueva"""

    def _leer(codigo):
        uow = UnitOfWork()
        try:
            return uow.productos.by_code(codigo)
        finally:
            uow.close()

    return _leer
