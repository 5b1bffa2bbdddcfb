from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


"""Configuration settings using pydantic-settings BaseSettings. - config"""


class Settings(BaseSettings):
    """Application settings.

    - Reads configuration from environment variables and a local .env file
    - Fields: db_address, db_key, sib_key, sib_url, nominatim_url, user_agent
      plus store selection: store_variant, mirror_to_marketing, persist_without_coordinates
    """
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Database REST endpoint (PostgREST-style table URL) and its auth key
    db_address: str = ""
    db_key: str = ""

    # Marketing contacts API (Sendinblue / Brevo)
    sib_key: str = ""
    sib_url: str = "https://api.sendinblue.com/v3/contacts"
    marketing_page_size: int = 500

    # Nominatim-compatible geocoder
    nominatim_url: str = "https://nominatim.openstreetmap.org"

    # HTTP User-Agent sent to Nominatim servers (required by their usage policy)
    user_agent: str = "mapping-relay/1.0"

    # Which store receives submissions and serves the listing
    store_variant: Literal["database", "marketing"] = "database"

    # After a successful database insert, also push the contact to the marketing list
    mirror_to_marketing: bool = True

    # Keep registrations whose address could not be geocoded (with empty lat/lon)
    persist_without_coordinates: bool = False

    http_timeout: float = 10.0

    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"


def get_settings() -> Settings:
    """Return a Settings instance for dependency injection. - get_settings"""
    return Settings()
