"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "flowstark-sepa"
    log_level: str = "INFO"

    # pain.008 message
    message_id_prefix: str = "FLOWSTARK"
    currency: str = "EUR"
    local_instrument: str = "CORE"  # CORE or B2B
    batch_booking: bool = True

    # Field budgets
    remittance_max_length: int = 140
    end_to_end_id_budget: int = 25  # chars of the item id kept after "E2E-"

    # Export
    export_file_prefix: str = "remesa_sepa"


settings = Settings()
