from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    log_level: str = "INFO"
    # Timezone for rendering wall-clock times in table rows.
    # Examples: "America/New_York", "Europe/London", or "local" to use system tz.
    timezone: str = "local"

    # Upload limits
    max_upload_mb: int = 50

    # Explorer (full record listing) pagination
    explorer_page_size: int = 15

    # fitparse CRC verification; off by default so slightly damaged
    # device files still load
    fit_check_crc: bool = False

    # Allow empty env strings for optional fields
    @field_validator("timezone", mode="before")
    @classmethod
    def _empty_to_local(cls, v):
        if v in ("", None, "null", "None"):
            return "local"
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v):
        return str(v).upper() if v else "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
