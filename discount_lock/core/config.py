from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file if it exists
load_dotenv()


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Runtime
    ENVIRONMENT: str = Field("development")  # "production" disables test billing
    PORT: int = Field(3000)
    LOG_LEVEL: str = Field("INFO")

    # Public host of the app, as Shopify reaches it (scheme optional)
    HOST: str = Field("localhost:3000")

    # Session cookie signing (OAuth state + installed shop)
    SESSION_SECRET_KEY: str = Field(...)

    # Session storage
    DATABASE_URL: str = Field("sqlite+aiosqlite:///./database.sqlite")

    # Shopify app credentials
    SHOPIFY_API_KEY: str | None = Field(None)
    SHOPIFY_API_SECRET: str | None = Field(None)
    SHOPIFY_API_VERSION: str = Field("2024-10")
    # Comma-separated, e.g. "read_checkouts,write_checkouts"
    SHOPIFY_SCOPES: str = Field("read_checkouts,write_checkouts")

    # Comma-separated list of allowed origins
    CORS_ALLOWED_ORIGINS: str = Field("https://admin.shopify.com")

    # Tracing
    OPENTELEMETRY_ENABLED: bool = Field(False)
    OTEL_EXPORTER_OTLP_ENDPOINT: str | None = Field(None)

    # Rate limits (slowapi syntax)
    HEALTH_RATE_LIMIT: str = Field("60/minute")
    AUTH_RATE_LIMIT: str = Field("20/minute")

    @property
    def scopes(self) -> list[str]:
        return _split_csv(self.SHOPIFY_SCOPES)

    @property
    def cors_origins(self) -> list[str]:
        return _split_csv(self.CORS_ALLOWED_ORIGINS)

    @property
    def host_name(self) -> str:
        """HOST without scheme or trailing slash."""
        host = self.HOST
        for scheme in ("https://", "http://"):
            if host.startswith(scheme):
                host = host[len(scheme):]
        return host.rstrip("/")

    @property
    def app_url(self) -> str:
        return f"https://{self.host_name}"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def billing_test_mode(self) -> bool:
        return not self.is_production


settings = Settings()
