import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from .db import init_db
from .api.routers import health, inventario, movimientos, equipos, ordenes_compra
from .application.excepciones import AlmacenError
from .infrastructure.logging_config import setup_logging, get_logger
from .config import settings as app_settings

# Configurar logging al iniciar la aplicación
setup_logging()
logger = get_logger("api")

# Inicializar BD (no fallar si la conexión no está configurada - primer arranque)
try:
    init_db()
except Exception as e:
    logger.warning("No se pudo inicializar la base de datos: %s. Puede requerir configuración inicial.", e)

app = FastAPI(
    title="Almacén - Control de Stock",
    version="0.1.0",
    description="Libro de stock, movimientos, salida de equipos y órdenes de compra",
    docs_url="/docs" if app_settings.environment != "production" else None,
    redoc_url="/redoc" if app_settings.environment != "production" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Requested-With"],
)

# Middleware para agregar headers de seguridad HTTP
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

    if app_settings.environment == "production":
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    return response

@app.exception_handler(AlmacenError)
async def almacen_error_handler(request: Request, exc: AlmacenError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.mensaje}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.mensaje}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

app.include_router(health.router)
app.include_router(inventario.router)
app.include_router(movimientos.router)
app.include_router(equipos.router)
app.include_router(ordenes_compra.router)
