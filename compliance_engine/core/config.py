"""Application configuration and feature flags."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

# Rule files shipped inside the package
BUNDLED_RULES_DIR = Path(__file__).resolve().parents[1] / "rules" / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API
    app_name: str = "Compliance Rule Engine"
    debug: bool = False
    log_level: str = "INFO"

    # Evaluation
    evaluation_cache_enabled: bool = True

    # Paths
    rules_dir: str = str(BUNDLED_RULES_DIR)

    # Layout defaults (pixels)
    layout_node_width: float = 200
    layout_node_height: float = 80
    layout_horizontal_spacing: float = 40
    layout_vertical_spacing: float = 60
    layout_padding: float = 20

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
