"""
Application Configuration

Settings are read from the environment once, after loading the project's
``.env`` file. The counter profiles capture the two known variants of the
``counters`` collection; which one is deployed is an operator decision.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# backend/valueboard/core/config.py -> backend
BACKEND_DIR = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class CounterProfile:
    """Record id and write rules for the ``counters`` collection."""

    name: str
    record_id: str
    create_rule: Optional[str]
    update_rule: Optional[str]


COUNTER_PROFILES = {
    "main": CounterProfile(
        name="main",
        record_id="main",
        create_rule=None,
        update_rule="",
    ),
    "public": CounterProfile(
        name="public",
        record_id="maincounterid00",
        create_rule="",
        update_rule="",
    ),
}

DEFAULT_COUNTER_PROFILE = "main"


def get_counter_profile(name: str) -> CounterProfile:
    """Look up a counter profile by name."""
    try:
        return COUNTER_PROFILES[name]
    except KeyError:
        known = ", ".join(sorted(COUNTER_PROFILES))
        raise ValueError(f"Unknown counter profile '{name}' (expected one of: {known})") from None


@dataclass(frozen=True)
class Settings:
    environment: str
    storage_backend: str
    data_dir: Path
    counter_profile: CounterProfile
    demo_mode: bool


STORAGE_BACKENDS = ("firestore", "local")

_settings: Settings | None = None


def load_settings() -> Settings:
    """Build settings from the environment (and ``.env`` at the project root)."""
    load_dotenv(BACKEND_DIR.parent / ".env")

    storage_backend = os.environ.get("STORAGE_BACKEND", "firestore").lower()
    if storage_backend not in STORAGE_BACKENDS:
        raise ValueError(
            f"Unknown storage backend '{storage_backend}' "
            f"(expected one of: {', '.join(STORAGE_BACKENDS)})"
        )

    return Settings(
        environment=os.environ.get("ENVIRONMENT", "development"),
        storage_backend=storage_backend,
        data_dir=Path(os.environ.get("DATA_DIR", BACKEND_DIR / "data")),
        counter_profile=get_counter_profile(
            os.environ.get("COUNTER_PROFILE", DEFAULT_COUNTER_PROFILE).lower()
        ),
        demo_mode=os.environ.get("DEMO_MODE", "true").lower() == "true",
    )


def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
