"""Tests for environment-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from valueboard.core.config import (
    COUNTER_PROFILES,
    get_counter_profile,
    get_settings,
    load_settings,
)


def test_counter_profiles_cover_both_variants():
    main = COUNTER_PROFILES["main"]
    public = COUNTER_PROFILES["public"]

    assert (main.record_id, main.create_rule, main.update_rule) == ("main", None, "")
    assert (public.record_id, public.create_rule, public.update_rule) == ("maincounterid00", "", "")


def test_unknown_counter_profile():
    with pytest.raises(ValueError):
        get_counter_profile("legacy")


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("STORAGE_BACKEND", "LOCAL")
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.setenv("COUNTER_PROFILE", "public")
    monkeypatch.setenv("DEMO_MODE", "false")
    monkeypatch.setenv("ENVIRONMENT", "production")

    settings = load_settings()

    assert settings.storage_backend == "local"
    assert settings.data_dir == Path(tmp_path)
    assert settings.counter_profile.record_id == "maincounterid00"
    assert settings.demo_mode is False
    assert settings.environment == "production"


def test_unknown_backend(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "postgres")
    with pytest.raises(ValueError):
        load_settings()


def test_settings_cached():
    assert get_settings() is get_settings()
