"""
Centralized environment variable loading for Panelsmith.

Secrets (capability API keys) come only from the environment. A ``.env`` file
is loaded once per process, looked up in the working directory first and then
next to the source checkout.

Usage:
    from panelsmith.core.env_loader import get_fibo_api_key
    token = get_fibo_api_key()
"""

import os
from pathlib import Path
from typing import List, Optional, Sequence

from dotenv import load_dotenv

_env_loaded = False


def get_project_root() -> Path:
    """Checkout root (two levels above this package's core/ directory)."""
    return Path(__file__).resolve().parent.parent.parent


def candidate_env_files() -> List[Path]:
    candidates = [Path.cwd() / ".env", get_project_root() / ".env"]
    unique = []
    for path in candidates:
        if path not in unique:
            unique.append(path)
    return unique


def ensure_env_loaded(override: bool = False) -> bool:
    """
    Load the first ``.env`` found, once.

    Args:
        override: Let .env values replace variables already set in the process

    Returns:
        True if a file was loaded by this call
    """
    global _env_loaded

    if _env_loaded:
        return False
    _env_loaded = True

    for env_path in candidate_env_files():
        if env_path.is_file():
            load_dotenv(env_path, override=override)
            return True
    return False


def get_api_key(key_name: str, fallback_keys: Sequence[str] = ()) -> Optional[str]:
    """First non-empty value among ``key_name`` and its fallbacks."""
    ensure_env_loaded()
    for name in (key_name, *fallback_keys):
        value = os.getenv(name)
        if value:
            return value
    return None


def get_azure_openai_api_key() -> Optional[str]:
    return get_api_key("AZURE_OPENAI_API_KEY")


def get_azure_openai_endpoint() -> Optional[str]:
    return get_api_key("AZURE_OPENAI_ENDPOINT")


def get_azure_openai_api_version() -> Optional[str]:
    """API version override; the configured version is used when unset."""
    return get_api_key("AZURE_OPENAI_API_VERSION")


def get_openai_api_key() -> Optional[str]:
    return get_api_key("OPENAI_API_KEY")


def get_fibo_api_key() -> Optional[str]:
    """FIBO image synthesis token (``BRIA_API_TOKEN`` accepted as an alias)."""
    return get_api_key("FIBO_API_KEY", ["BRIA_API_TOKEN"])
