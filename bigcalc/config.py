# config.py
"""
Runtime settings for the bigcalc command line and HTTP service.

Settings come from environment variables (optionally from a .env file via
python-dotenv) and are validated with pydantic. Command line flags override
them.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

ENV_PREFIX = "BIGCALC_"

_LEVEL_NAMES = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseModel):
    """Validated runtime settings."""
    log_level: str = Field("WARNING", description="Name of the root logging level")
    show_tree: bool = Field(False, description="Print the parse tree after each result")
    prompt: str = Field("> ", description="Prompt shown by the interactive loop")
    max_batch_size: int = Field(100, ge=1, le=10000, description="Largest accepted batch request")

    @field_validator('log_level')
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LEVEL_NAMES:
            raise ValueError(f"Unknown log level '{v}'; use one of {', '.join(_LEVEL_NAMES)}")
        return level


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Build Settings from BIGCALC_* environment variables.

    Variables already set in the environment win over the .env file.
    Raises pydantic.ValidationError when a value is invalid.
    """
    load_dotenv(env_file)
    values = {}
    for name in Settings.model_fields:
        raw = os.getenv(ENV_PREFIX + name.upper())
        if raw is not None:
            values[name] = raw
    return Settings(**values)


def configure_logging(level: str = "WARNING") -> None:
    """Configure root logging the same way for every entry point."""
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT)
