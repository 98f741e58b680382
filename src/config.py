import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


class Settings(BaseModel):
    """Runtime configuration, read from the environment (and a .env file if present)."""
    model_config = ConfigDict(frozen=True)

    data_dir: Path = Field(Path("data"), description="Directory holding the catalog JSON files")
    api_host: str = "0.0.0.0"
    api_port: int = Field(8080, gt=0, lt=65536)
    api_base_url: str = "http://localhost:8080"
    log_level: str = "INFO"


def load_settings() -> Settings:
    load_dotenv()
    defaults = Settings()
    return Settings(
        data_dir=os.getenv("DATA_DIR", str(defaults.data_dir)),
        api_host=os.getenv("API_HOST", defaults.api_host),
        api_port=os.getenv("API_PORT", str(defaults.api_port)),
        api_base_url=os.getenv("API_BASE_URL", defaults.api_base_url),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )
