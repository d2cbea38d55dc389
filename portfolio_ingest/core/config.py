from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from portfolio_ingest.core.errors import ConfigError

DEFAULT_SEED_ADDRESSES = [
    "0xba8a8f39b2315d4bc725c026ce3898c2c7e74f57",
    "0x2bd4284509bf6626d5def7ef20d4ca38ce71792e",
    "0x3ea91c76b176779d10cc2a27fd2687888886f0c2",
    "0xe8e94110e568fd45c8eb578bef0f36b5f154b794",
    "0x21bce0768110b9a8c50942be257637a843a7eac6",
    "0x9429614ccabfb2b24f444f33ede29d4575ebcdd1",
    "0x12244c23101f66741dae553c8836a9b2fd4e413a",
    "0x8c2753ee27ba890fbb60653d156d92e1c334f528",
]


class ErrorPolicy(str, Enum):
    EXIT = "exit"
    REPORT = "report"


class Settings(BaseSettings):
    """Centralized application configuration."""

    app_name: str = "Portfolio Ingest"
    host: str = "0.0.0.0"
    port: int = Field(8080, ge=1, le=65535)

    # Ingestion
    poll_interval: int = Field(4 * 60 * 60, gt=0, description="Seconds between scheduled sweeps")
    storage_path: Path = Path("./store.db")
    seed_addresses: List[str] = Field(default_factory=lambda: list(DEFAULT_SEED_ADDRESSES))
    single_flight: bool = False
    error_policy: ErrorPolicy = ErrorPolicy.EXIT

    # Portfolio API
    portfolio_url_template: str = "https://openapi.debank.com/v1/user/token_list?id={address}&is_all=true"
    access_key: str = ""
    fetch_timeout_sec: Optional[float] = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("portfolio_url_template")
    @classmethod
    def _template_has_address(cls, value: str) -> str:
        if "{address}" not in value:
            raise ValueError("portfolio_url_template must contain an {address} placeholder")
        try:
            value.format(address="0x0")
        except (KeyError, IndexError, ValueError) as exc:
            raise ValueError(f"portfolio_url_template may only use the {{address}} placeholder: {exc!r}") from exc
        return value

    @field_validator("seed_addresses")
    @classmethod
    def _strip_addresses(cls, value: List[str]) -> List[str]:
        cleaned = [item.strip() for item in value if item and item.strip()]
        if any(len(item) > 42 for item in cleaned):
            raise ValueError("seed addresses are limited to 42 characters")
        return cleaned

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, raising ConfigError on bad values."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
