from typing import Any, Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fleetquery.models import ProductTypeEnum


class Settings(BaseSettings):
    """
    Application settings, read from the environment or a ``.env`` file.

    DATABASE_* describe the datasource behind the connection pool.
    DATABASE_XML switches mapping-valued columns from JSON to XML text.
    DATABASE_STRICT_FIELDS turns per-field binding failures into errors
    instead of logged warnings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "fleetquery"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    SECRET_KEY: str = "changethis"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    SENTRY_DSN: str | None = None

    DATABASE_PRODUCT_TYPE: ProductTypeEnum = ProductTypeEnum.SQLITE
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432
    DATABASE_NAME: str = "fleetquery.db"
    DATABASE_USER: str = ""
    DATABASE_PASSWORD: str = ""
    DATABASE_CONNECT_TIMEOUT: int = 10
    DATABASE_POOL_SIZE: int = 8
    DATABASE_POOL_MAX_AGE_SEC: float = 600.0
    DATABASE_XML: bool = False
    DATABASE_STRICT_FIELDS: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def datasource(self) -> dict[str, Any]:
        return {
            "product_type": self.DATABASE_PRODUCT_TYPE,
            "host": self.DATABASE_HOST,
            "port": self.DATABASE_PORT,
            "database": self.DATABASE_NAME,
            "username": self.DATABASE_USER,
            "password": self.DATABASE_PASSWORD,
        }


settings = Settings()  # type: ignore
