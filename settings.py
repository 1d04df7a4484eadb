import os
from functools import lru_cache
from typing import List, Optional, Mapping

from pydantic import BaseModel


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Runtime configuration, read once from the environment."""

    database_url: str = "sqlite:///./voidshop.db"
    jwt_secret: str = "supersecreto_voidshop"
    jwt_expires_min: int = 120
    encryption_key: str = "12345678901234567890123456789012"
    admin_email: str = "admin@voidshop.com"
    admin_password: str = "admin123"
    admin_username: str = "admin"
    allowed_origins: List[str] = ["http://localhost:5173", "http://localhost:5174"]
    auto_migrate: bool = True
    seed_demo_data: bool = True
    enforce_coupon_limits: bool = False
    strict_order_transitions: bool = False
    catalog_requires_admin: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = cls()
        origins = env.get("ALLOWED_ORIGINS")
        return cls(
            database_url=env.get("DATABASE_URL", defaults.database_url),
            jwt_secret=env.get("JWT_SECRET", defaults.jwt_secret),
            jwt_expires_min=int(env.get("JWT_EXPIRES_MIN", defaults.jwt_expires_min)),
            encryption_key=env.get("ENCRYPTION_KEY", defaults.encryption_key),
            admin_email=env.get("ADMIN_EMAIL", defaults.admin_email),
            admin_password=env.get("ADMIN_PASSWORD", defaults.admin_password),
            admin_username=env.get("ADMIN_USERNAME", defaults.admin_username),
            allowed_origins=[o.strip() for o in origins.split(",") if o.strip()] if origins else defaults.allowed_origins,
            auto_migrate=_flag(env.get("AUTO_MIGRATE"), defaults.auto_migrate),
            seed_demo_data=_flag(env.get("SEED_DEMO_DATA"), defaults.seed_demo_data),
            enforce_coupon_limits=_flag(env.get("ENFORCE_COUPON_LIMITS"), defaults.enforce_coupon_limits),
            strict_order_transitions=_flag(env.get("STRICT_ORDER_TRANSITIONS"), defaults.strict_order_transitions),
            catalog_requires_admin=_flag(env.get("CATALOG_REQUIRE_ADMIN"), defaults.catalog_requires_admin),
            log_level=env.get("LOG_LEVEL", defaults.log_level).upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
