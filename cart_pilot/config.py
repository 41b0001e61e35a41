"""Environment-backed configuration for cart_pilot.

Values are read lazily so tests can monkeypatch the environment after import.
"""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


class _Config:
    @property
    def CART_PILOT_LOGGING_LEVEL(self) -> str:
        return os.getenv('CART_PILOT_LOGGING_LEVEL', 'info').lower()

    @property
    def CART_PILOT_SETUP_LOGGING(self) -> bool:
        return _env_bool('CART_PILOT_SETUP_LOGGING', True)

    @property
    def OPENAI_API_KEY(self) -> str | None:
        return os.getenv('OPENAI_API_KEY')

    @property
    def GOOGLE_API_KEY(self) -> str | None:
        return os.getenv('GOOGLE_API_KEY') or os.getenv('GEMINI_API_KEY')

    @property
    def CART_PILOT_MODEL(self) -> str:
        return os.getenv('CART_PILOT_MODEL', 'gpt-4o')

    @property
    def CART_PILOT_HEADLESS(self) -> bool:
        return _env_bool('CART_PILOT_HEADLESS', False)

    @property
    def CART_PILOT_STORAGE_PATH(self) -> Path:
        raw = os.getenv('CART_PILOT_STORAGE_PATH')
        if raw:
            return Path(raw).expanduser()
        return Path.home() / '.config' / 'cart_pilot' / 'storage.json'


CONFIG = _Config()
