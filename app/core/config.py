from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from container + optionally from files
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.docker"),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="dev", validation_alias=AliasChoices("ENVIRONMENT", "environment"))
    APP_NAME: str = Field(default="billing_engine", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    DEBUG: bool = Field(default=False, validation_alias=AliasChoices("DEBUG", "debug"))

    # Infrastructure
    DATABASE_URL: str = Field(
        default="postgresql+asyncpg://postgres:postgres@db:5432/billing_db",
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
    )
    # Hosted Postgres providers (Supabase, Neon) require TLS
    DATABASE_SSL: bool = Field(default=False, validation_alias=AliasChoices("DATABASE_SSL", "database_ssl"))

    # Display defaults (per-tenant overrides are passed explicitly)
    DEFAULT_CURRENCY: str = Field(default="INR", validation_alias=AliasChoices("DEFAULT_CURRENCY", "default_currency"))
    DEFAULT_DATE_FORMAT: str = Field(
        default="DD/MM/YYYY",
        validation_alias=AliasChoices("DEFAULT_DATE_FORMAT", "default_date_format"),
    )


settings = Settings()
