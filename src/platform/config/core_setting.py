from pathlib import Path

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Flight Seat Lease Engine'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Remote booking/inventory service
    BOOKING_API_BASE_URL: str = 'http://localhost:4000/api'
    BOOKING_API_TOKEN: SecretStr = SecretStr('')  # Bearer token, empty = anonymous
    BOOKING_API_TIMEOUT_SECONDS: float = 20.0

    @field_validator('BOOKING_API_BASE_URL', mode='before')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip('/') if isinstance(v, str) else v

    # Seat inventory
    SEAT_MAP_REFRESH_INTERVAL_SECONDS: int = 600  # 10 minutes
    EXIT_ROW_DETECTION_ENABLED: bool = True

    # Hold / lease
    HOLD_TTL_MINUTES: int = 10
    HOLD_COUNTDOWN_TICK_SECONDS: float = 1.0
    DEFAULT_HOLDER_ID: str = 'guest'
    MAX_PASSENGERS: int = 6

    # Fare rules
    TAX_RATE: float = 0.05
    CHILD_DISCOUNT_RATE: float = 0.25
    ASSISTANCE_DISCOUNT_RATE: float = 0.30
    DEFAULT_CURRENCY: str = 'INR'

    @field_validator('TAX_RATE', 'CHILD_DISCOUNT_RATE', 'ASSISTANCE_DISCOUNT_RATE')
    @classmethod
    def validate_rate(cls, v: float) -> float:
        if not 0 <= v < 1:
            raise ValueError('rate must be within [0, 1)')
        return v


settings = Settings()  # type: ignore
