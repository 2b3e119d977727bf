"""
Configuración de logging para la aplicación
Crea archivos de log por día en la carpeta configurada (logs/ por defecto)
"""
import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime
from pathlib import Path

from ..config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_dir: str | None = None, to_file: bool | None = None):
    """Configura el sistema de logging con archivos diarios"""
    level = getattr(logging, settings.log_level, logging.INFO)
    to_file = settings.log_to_file if to_file is None else to_file

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Eliminar handlers existentes para evitar duplicados
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    log_file = None
    if to_file:
        directory = Path(log_dir or settings.log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        today = datetime.now().strftime("%Y-%m-%d")
        log_file = directory / f"almacen_{today}.log"

        # maxBytes=10MB, backupCount=5
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("almacen").setLevel(level)
    logging.getLogger("almacen.api").setLevel(level)

    # El libro de stock registra cada delta aplicado
    ledger_logger = logging.getLogger("almacen.application.services_ledger")
    ledger_logger.setLevel(logging.DEBUG)

    # Solo warnings y errores de SQL
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)

    if log_file:
        logging.info(f"Sistema de logging configurado. Archivo: {log_file}")
    else:
        logging.info("Sistema de logging configurado (solo consola)")

    return root_logger


def get_logger(name: str = None):
    """Obtiene un logger con el nombre especificado"""
    if name:
        return logging.getLogger(f"almacen.{name}")
    return logging.getLogger("almacen")
