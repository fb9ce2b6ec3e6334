"""Application configuration and logging setup."""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

PACKAGE_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API
    app_name: str = "Disclosure Decision Workbench"
    debug: bool = False
    log_level: str = "INFO"

    # Regulation data
    data_dir: Path = PACKAGE_DATA_DIR
    rules_file: str = "disclosure_rules.yaml"
    questions_file: str = "disclosure_questions.yaml"
    scenarios_file: str = "disclosure_scenarios.yaml"

    # Unknown attribute names in rule conditions fail the load instead of warning
    strict_attribute_names: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "DISCLOSURE_",
    }

    @property
    def rules_path(self) -> Path:
        return Path(self.data_dir) / self.rules_file

    @property
    def questions_path(self) -> Path:
        return Path(self.data_dir) / self.questions_file

    @property
    def scenarios_path(self) -> Path:
        return Path(self.data_dir) / self.scenarios_file


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure the package logger once for the running process."""
    level = (level or get_settings().log_level).upper()
    logger = logging.getLogger("disclosure")
    logger.setLevel(getattr(logging, level, logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        logger.addHandler(handler)
