import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_DB_URL = "sqlite+aiosqlite:////data/data.db"


def _get_bool(env_name: str, default: bool = False) -> bool:
    val = os.getenv(env_name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def resolve_database_url(secret_path: Optional[str], env_value: Optional[str] = None) -> str:
    """Secret file wins over the environment, which wins over the local default."""
    if secret_path:
        path = Path(secret_path)
        if path.is_file():
            value = path.read_text(encoding="utf-8").strip()
            if value:
                return value
    return env_value or DEFAULT_DB_URL


@dataclass
class Settings:
    # App
    APP_HOST: str = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT: int = int(os.getenv("APP_PORT", "8000"))
    INSTANCE_ID: str = os.getenv("INSTANCE_ID", "unknown")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Which service this process serves: "products" or "orders"
    SERVICE: str = os.getenv("SERVICE", "products")

    # Storage ("sql" or "memory"); SQLite by default in a Docker volume
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "sql")
    DB_SECRET_PATH: str = os.getenv("DB_SECRET_PATH", "/vault/secrets/database")
    # Final value is resolved against DB_SECRET_PATH in __post_init__
    DB_URL: str = os.getenv("DB_URL", "")

    # Startup seeding
    SEED_DATA: bool = _get_bool("SEED_DATA", True)

    # "permissive" accepts any status change, "strict" enforces the lifecycle
    ORDER_STATUS_POLICY: str = os.getenv("ORDER_STATUS_POLICY", "permissive")

    # Telemetry
    OTEL_EXPORTER_OTLP_ENDPOINT: str = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://otel-collector:4317")

    def __post_init__(self):
        self.DB_URL = resolve_database_url(self.DB_SECRET_PATH, self.DB_URL or None)


settings = Settings()
