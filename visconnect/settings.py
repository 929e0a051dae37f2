import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()


class Settings(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # VIS API Configuration
    vis_api_url: str = Field(
        default="https://www.fivb.org/VisSDK/VisWebService/api/v1",
        alias="VIS_API_URL",
    )
    vis_api_key: str = Field(default="", alias="VIS_API_KEY", repr=False)
    demo_mode: bool = Field(default=False, alias="DEMO_MODE")
    request_timeout: float = Field(default=10.0, gt=0, alias="REQUEST_TIMEOUT")
    connect_timeout: float = Field(default=5.0, gt=0, alias="CONNECT_TIMEOUT")

    # Cache Configuration
    cache_ttl: int = Field(default=300, gt=0, alias="CACHE_TTL")
    cache_max_size: int = Field(default=1000, gt=0, alias="CACHE_MAX_SIZE")

    # Outbound Rate Limiting
    rate_limit_rpm: int = Field(default=60, gt=0, alias="RATE_LIMIT_MAX_REQUESTS")
    request_queue_max_size: int = Field(default=0, ge=0, alias="REQUEST_QUEUE_MAX_SIZE")

    # Retry Configuration
    max_retries: int = Field(default=3, ge=0, alias="MAX_RETRIES")
    retry_base_delay: float = Field(default=1.0, ge=0, alias="RETRY_BASE_DELAY")
    retry_max_delay: float = Field(default=5.0, ge=0, alias="RETRY_MAX_DELAY")

    # Circuit Breaker Configuration
    circuit_breaker_threshold: int = Field(default=5, gt=0, alias="CIRCUIT_BREAKER_THRESHOLD")
    circuit_breaker_cooldown: float = Field(default=60.0, gt=0, alias="CIRCUIT_BREAKER_COOLDOWN")

    # Server / Logging
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3001, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def is_demo(self) -> bool:
        """No API key means offline/demo mode."""
        return self.demo_mode or not self.vis_api_key


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build settings from the process environment (and .env)."""
    return Settings.model_validate(dict(os.environ if environ is None else environ))
