"""Shared configuration management for the invoice ledger.

Based on Pydantic Settings v2 best practices:
https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with the prefix 'APP_'.
    Example: APP_EXPORT_DECIMAL_SEPARATOR=,
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Service configuration
    service_name: str = Field(
        default="invoice-ledger",
        description="Service identifier for metrics and logs",
    )
    service_version: str = Field(
        default="0.1.0",
        description="Service version",
    )

    # Extraction provider configuration
    extraction_provider: Literal["openai"] = Field(
        default="openai",
        description="Extraction provider used to scan invoice images",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="Vision-capable OpenAI model used for invoice scanning",
    )

    # Ledger view and export
    page_size: int = Field(
        default=10,
        ge=1,
        description="Number of invoices per table page",
    )
    currency_symbol: str = Field(
        default="$",
        description="Symbol prefixed to monetary cells in the table and the export",
    )
    export_decimal_separator: Literal[".", ","] = Field(
        default=".",
        description="Decimal separator for numeric cells in CSV exports (',' for EU spreadsheets)",
    )
    export_filename_prefix: str = Field(
        default="invoices",
        description="Prefix of the dated CSV export filename",
    )

    # Uploads and ownership
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1,
        description="Maximum accepted size of a scanned invoice image",
    )
    default_owner_id: str = Field(
        default="local",
        description="Owner assigned to invoices created through this process",
    )


def get_settings() -> Settings:
    """Factory function to get settings instance.

    Returns:
        Configured Settings instance
    """
    return Settings()
