"""
Configuration for the diffusion job client.

Values come from the environment, with a .env file loaded first.
Command line options override these per run.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file early so environment variables are available for Config class
# This must happen before the Config class is defined
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.environ.get(name, str(default)))


class Config:
    """Default configuration."""

    ENVIRONMENT = os.environ.get("DIFFUSION_ENV", "development")
    DEBUG = os.environ.get("DIFFUSION_DEBUG", "0") == "1"
    TESTING = False

    # ==========================================================================
    # Remote service
    # ==========================================================================
    # DIFFUSION_SERVICE_URL wins when set; otherwise the HTTP gateway of the
    # canister named by DIFFUSION_CANISTER_ID is used.
    CANISTER_ID = os.environ.get("DIFFUSION_CANISTER_ID", "uxrrr-q7777-77774-qaaaq-cai")
    SERVICE_URL = os.environ.get(
        "DIFFUSION_SERVICE_URL", f"https://{CANISTER_ID}.raw.icp0.io"
    )

    # Seconds; status/submit calls vs. the (larger) result download
    REQUEST_TIMEOUT_SECONDS = _env_float("REQUEST_TIMEOUT_SECONDS", 30.0)
    RESULT_TIMEOUT_SECONDS = _env_float("RESULT_TIMEOUT_SECONDS", 60.0)

    # ==========================================================================
    # Polling budget
    # ==========================================================================
    # Worst-case wait is (POLL_MAX_ATTEMPTS - 1) * POLL_DELAY_SECONDS plus
    # the time spent in the status calls themselves.
    POLL_MAX_ATTEMPTS = _env_int("POLL_MAX_ATTEMPTS", 30)
    POLL_DELAY_SECONDS = _env_float("POLL_DELAY_SECONDS", 2.0)

    # ==========================================================================
    # Request defaults
    # ==========================================================================
    DEFAULT_WIDTH = _env_int("DEFAULT_WIDTH", 64)
    DEFAULT_HEIGHT = _env_int("DEFAULT_HEIGHT", 64)
    DEFAULT_STEPS = _env_int("DEFAULT_STEPS", 10)
    DEFAULT_GUIDANCE = _env_float("DEFAULT_GUIDANCE", 7.5)
    DEFAULT_SEED = _env_int("DEFAULT_SEED", 12345)

    DEFAULT_OUTPUT_PATH = os.environ.get("DEFAULT_OUTPUT_PATH", "generated_image.bmp")

    # Logging
    LOG_DIR = Path(os.environ.get("LOG_DIR", str(BASE_DIR / "logs")))
    ENABLE_FILE_LOGGING = False


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    ENABLE_FILE_LOGGING = True


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    POLL_MAX_ATTEMPTS = 3
    POLL_DELAY_SECONDS = 0.0


_CONFIGS = {
    "production": ProductionConfig,
    "development": DevelopmentConfig,
    "testing": TestingConfig,
}


def get_config(environment: Optional[str] = None) -> type:
    """
    Select the configuration class for an environment name.

    Args:
        environment: "production", "development" or "testing"
            (default: Config.ENVIRONMENT)

    Returns:
        Config subclass; unknown names fall back to Config
    """
    name = (environment or Config.ENVIRONMENT).lower()
    return _CONFIGS.get(name, Config)
