"""Tests for Settings."""

import pytest

from parceldesk.config import Settings
from parceldesk.core.entities.session import Role


class TestSettings:
    """Tests for Settings.from_env and offline detection."""

    def test_from_env(self) -> None:
        settings = Settings.from_env(
            {
                "PARCELDESK_SUPABASE_URL": "https://proj.supabase.co/",
                "PARCELDESK_SUPABASE_ANON_KEY": "anon",
                "PARCELDESK_REQUEST_TIMEOUT": "8",
                "PARCELDESK_FALLBACK_ROLE": "editor",
                "PARCELDESK_STORAGE_BUCKET": "docs",
            }
        )

        assert settings.supabase_url == "https://proj.supabase.co"
        assert settings.supabase_anon_key == "anon"
        assert settings.request_timeout == 8.0
        assert settings.fallback_role is Role.EDITOR
        assert settings.storage_bucket == "docs"
        assert not settings.offline

    def test_unprefixed_names(self) -> None:
        settings = Settings.from_env(
            {"SUPABASE_URL": "https://proj.supabase.co", "SUPABASE_ANON_KEY": "anon"}
        )

        assert settings.supabase_anon_key == "anon"
        assert not settings.offline

    def test_defaults(self) -> None:
        settings = Settings.from_env({})

        assert settings.supabase_url is None
        assert settings.request_timeout == 15.0
        assert settings.fallback_role is Role.VIEWER
        assert settings.storage_bucket == "file"
        assert settings.offline

    @pytest.mark.parametrize(
        "url",
        ["https://demo.supabase.co", "https://xyz.demo.supabase.co"],
    )
    def test_demo_host_is_offline(self, url: str) -> None:
        assert Settings(supabase_url=url, supabase_anon_key="anon").offline

    def test_missing_key_is_offline(self) -> None:
        assert Settings(supabase_url="https://proj.supabase.co").offline

    def test_lookalike_host_is_online(self) -> None:
        settings = Settings(supabase_url="https://notdemo.supabase.co", supabase_anon_key="k")
        assert not settings.offline

    @pytest.mark.parametrize("value", ["0", "-1", "soon"])
    def test_bad_timeout(self, value: str) -> None:
        with pytest.raises(ValueError):
            Settings.from_env({"PARCELDESK_REQUEST_TIMEOUT": value})

    def test_bad_role(self) -> None:
        with pytest.raises(ValueError, match="Unknown role"):
            Settings.from_env({"PARCELDESK_FALLBACK_ROLE": "owner"})
