from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import load_dotenv

from .api import DEFAULT_API_URL
from .engine import DEFAULT_MAX_ATTEMPTS
from .keyboard import DEFAULT_ALPHABET

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class ClientConfig:
    api_url: str = DEFAULT_API_URL
    timeout: float = 10.0
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    error_display_seconds: float = 3.0
    alphabet: str = DEFAULT_ALPHABET
    preferences_path: Path = Path.home() / ".wordle_client.json"
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.max_attempts <= 0:
            raise ValueError("max_attempts must be >= 1")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if self.error_display_seconds < 0:
            raise ValueError("error_display_seconds must be >= 0")
        if not self.alphabet:
            raise ValueError("alphabet must not be empty")

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ClientConfig":
        """
        Build a config from WORDLE_* environment variables.

        A .env file (or `env_file`) is loaded first; variables already set in
        the process environment take precedence over it.
        """
        if environ is None:
            load_dotenv(env_file)
            environ = os.environ

        defaults = cls()
        return cls(
            api_url=environ.get("WORDLE_API_URL", defaults.api_url),
            timeout=float(environ.get("WORDLE_TIMEOUT", defaults.timeout)),
            max_attempts=int(environ.get("WORDLE_MAX_ATTEMPTS", defaults.max_attempts)),
            error_display_seconds=float(
                environ.get("WORDLE_ERROR_DISPLAY_SECONDS", defaults.error_display_seconds)
            ),
            alphabet=environ.get("WORDLE_ALPHABET", defaults.alphabet).upper(),
            preferences_path=Path(environ.get("WORDLE_PREFERENCES_PATH", str(defaults.preferences_path))),
            log_level=environ.get("WORDLE_LOG_LEVEL", defaults.log_level).upper(),
        )


def configure_logging(level: Union[str, int] = "WARNING") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
