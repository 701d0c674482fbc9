"""
Engine Settings

Loads process settings from environment variables and provides defaults.
A .env file at the project root is read with python-dotenv.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from identity_engine.models.config import EngineConfig

ROOT_DIR = Path(__file__).resolve().parent.parent

root_env = ROOT_DIR / ".env"
if root_env.exists():
    load_dotenv(root_env)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@dataclass
class EngineSettings:
    """Process-level settings."""

    # Optional JSON file with sectioned EngineConfig overrides
    config_path: Optional[Path] = None
    log_level: str = "INFO"
    prediction_cache_ttl_seconds: float = 300.0
    # None = non-deterministic ML fallback ranking
    ml_fallback_seed: Optional[int] = None

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """Load settings from environment variables."""
        raw_path = os.getenv("IDENTITY_ENGINE_CONFIG_PATH")
        config_path = None
        if raw_path:
            config_path = Path(raw_path)
            if not config_path.is_absolute():
                config_path = (ROOT_DIR / config_path).resolve()
        seed = os.getenv("ML_FALLBACK_SEED", "").strip()
        return cls(
            config_path=config_path,
            log_level=os.getenv("IDENTITY_LOG_LEVEL", "INFO").upper(),
            prediction_cache_ttl_seconds=float(os.getenv("PREDICTION_CACHE_TTL_SECONDS", "300")),
            ml_fallback_seed=int(seed) if seed else None,
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the settings.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []
        if self.config_path is not None and not self.config_path.exists():
            errors.append(f"Engine config file not found: {self.config_path}")
        if self.prediction_cache_ttl_seconds <= 0:
            errors.append("PREDICTION_CACHE_TTL_SECONDS must be positive")
        if not isinstance(logging.getLevelName(self.log_level), int):
            errors.append(f"Unknown log level: {self.log_level}")
        return len(errors) == 0, errors


# Global settings instance
_settings: Optional[EngineSettings] = None


def get_settings() -> EngineSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = EngineSettings.from_env()
    return _settings


def reload_settings() -> EngineSettings:
    """Reload settings from environment."""
    global _settings
    _settings = None
    return get_settings()


def load_engine_config(settings: Optional[EngineSettings] = None) -> EngineConfig:
    """
    Build the EngineConfig for these settings.

    The JSON file (when configured) provides sectioned overrides; the ML
    fallback seed and cache TTL from the environment are applied on top.
    """
    settings = settings or get_settings()
    data = {}
    if settings.config_path is not None:
        with open(settings.config_path) as f:
            data = json.load(f)
    config = EngineConfig.from_dict(data)
    ml = config.ml
    if settings.ml_fallback_seed is not None:
        ml = ml.model_copy(update={"fallback_seed": settings.ml_fallback_seed})
    predictive = config.predictive
    file_predictive = data.get("predictive")
    if not (isinstance(file_predictive, dict) and "cache_ttl_seconds" in file_predictive):
        predictive = predictive.model_copy(update={"cache_ttl_seconds": settings.prediction_cache_ttl_seconds})
    return config.model_copy(update={"ml": ml, "predictive": predictive})


def configure_logging(settings: Optional[EngineSettings] = None) -> None:
    """Apply the configured level to the identity_engine logger tree."""
    settings = settings or get_settings()
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger("identity_engine").setLevel(settings.log_level)
