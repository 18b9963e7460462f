"""
Configuration management for SurgiScore.

This module provides centralized configuration management including:
- Environment variable loading
- Logging configuration
- Data, log and content locations

Clinical thresholds are fixed constants in the scoring modules and are not
configurable here.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_CME_LIBRARY = PACKAGE_DIR / "training" / "data" / "cme_modules.yaml"

DEFAULT_UNIT_NAME = "PLASTIC AND RECONSTRUCTIVE SURGERY UNIT"
DEFAULT_HOSPITAL_NAME = "University of Nigeria Teaching Hospital, Enugu"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(level: str = "INFO", format_string: Optional[str] = None) -> None:
    """
    Configure logging for SurgiScore.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string for log messages

    Raises:
        ValueError: If level is not one of LOG_LEVELS
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    if level.upper() not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}; expected one of {', '.join(LOG_LEVELS)}")

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_string,
        force=True,  # Override any existing configuration
    )


def load_environment(env_file: Optional[Path] = None) -> bool:
    """
    Load environment variables from a .env file.

    Args:
        env_file: Path to .env file. If None, looks for .env in the working directory.

    Returns:
        True if the .env file was found and loaded, False otherwise.
    """
    if env_file is None:
        env_file = Path.cwd() / ".env"

    if env_file.exists():
        load_dotenv(dotenv_path=env_file)
        logging.info(f"Environment loaded from {env_file}")
        return True

    logging.info(f"No .env file found at {env_file}. Using system environment variables.")
    return False


def get_config() -> Dict[str, Any]:
    """
    Get consolidated configuration for SurgiScore.

    Returns:
        Dictionary containing all configuration values.
    """
    return {
        "data_dir": Path(os.getenv("SURGISCORE_DATA_DIR", "data")),
        "log_dir": Path(os.getenv("SURGISCORE_LOG_DIR", "logs/scoring")),
        "log_level": os.getenv("SURGISCORE_LOG_LEVEL", "INFO"),
        "cme_library": Path(os.getenv("SURGISCORE_CME_LIBRARY", str(DEFAULT_CME_LIBRARY))),
        "unit_name": os.getenv("SURGISCORE_UNIT_NAME", DEFAULT_UNIT_NAME),
        "hospital_name": os.getenv("SURGISCORE_HOSPITAL_NAME", DEFAULT_HOSPITAL_NAME),
    }


def initialize_config(log_level: Optional[str] = None) -> Dict[str, Any]:
    """
    Initialize complete configuration.

    This is the main entry point that should be called by the CLI and scripts
    to set up the environment properly.

    Args:
        log_level: Logging level to use; falls back to SURGISCORE_LOG_LEVEL

    Returns:
        Complete configuration dictionary
    """
    load_environment()
    config = get_config()
    setup_logging(level=log_level or config["log_level"])

    logging.info("SurgiScore configuration initialized")
    logging.debug(f"Configuration: {config}")
    return config
