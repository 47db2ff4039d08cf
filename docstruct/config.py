"""
Environment-driven configuration.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_MODEL = "claude-3-haiku-20240307"
DEFAULT_API_VERSION = "2023-06-01"


def load_environment(env_file: Optional[str] = None) -> bool:
    """
    Load variables from a .env file without overriding the process environment.

    Args:
        env_file: Explicit path; defaults to ``.env`` in the working directory

    Returns:
        True if a file was found and loaded
    """
    path = Path(env_file) if env_file else Path.cwd() / ".env"
    if not path.exists():
        return False
    return load_dotenv(path, override=False)


def log_level_from_env(default: str = "INFO") -> str:
    return os.getenv("DOCSTRUCT_LOG_LEVEL", default)


@dataclass(frozen=True)
class SummarizerConfig:
    """Settings for the remote summarization collaborator."""
    api_key: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL
    api_version: str = DEFAULT_API_VERSION
    max_tokens: int = 2000
    timeout: float = 60.0
    max_prompt_chars: int = 8000

    @classmethod
    def from_env(cls, api_key: Optional[str] = None) -> "SummarizerConfig":
        """
        Build the configuration from DOCSTRUCT_* variables.

        Args:
            api_key: Key that takes precedence over the environment

        Returns:
            SummarizerConfig instance
        """
        return cls(
            api_key=api_key or os.getenv("DOCSTRUCT_API_KEY") or os.getenv("ANTHROPIC_API_KEY") or None,
            api_url=os.getenv("DOCSTRUCT_API_URL", DEFAULT_API_URL),
            model=os.getenv("DOCSTRUCT_MODEL", DEFAULT_MODEL),
            max_tokens=int(os.getenv("DOCSTRUCT_MAX_TOKENS", "2000")),
            timeout=float(os.getenv("DOCSTRUCT_TIMEOUT", "60")),
        )
