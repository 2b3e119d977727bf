from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, model_validator, field_validator
import secrets

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # ===== ENTORNO =====
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # ===== DATABASE =====
    database_url: str = Field(default="sqlite:///./data/almacen.db")

    # ===== SECURITY =====
    secret_key: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    access_token_expire_minutes: int = Field(default=120)

    # ===== CORS =====
    allowed_origins: str = Field(default="http://localhost:5173,http://localhost:3000")

    # ===== LOGGING =====
    log_dir: str = Field(default="logs")
    log_level: str = Field(default="INFO")
    log_to_file: bool = Field(default=True)

    # ===== STOCK =====
    # Reintentos de una transacción de stock tras un conflicto de versión
    stock_retry_attempts: int = Field(default=3, ge=1)
    stock_minimo_default: int = Field(default=10, ge=0)
    stock_critico_umbral: int = Field(default=3, ge=0)

    # ===== PAGINACIÓN =====
    page_limit_default: int = Field(default=100, ge=1)
    page_limit_max: int = Field(default=1000, ge=1)

    # ===== ÓRDENES DE COMPRA =====
    purchase_order_prefix: str = Field(default="OC")
    purchase_order_digits: int = Field(default=4, ge=1)

    @field_validator("log_level", mode="after")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.strip().upper() if v and v.strip() else "INFO"

    @model_validator(mode="after")
    def validate_secret_key(self):
        if self.environment == "production" and len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY debe tener al menos 32 caracteres en producción.")
        return self

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


settings = Settings()
