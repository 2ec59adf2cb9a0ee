"""
Unit tests for application settings.

Settings are built with _env_file=None so a developer's .env file
can't leak into the results.
"""

import pytest

from src.config.settings import Settings, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("SYNC_TARGETS", "STRICT_EMPTY", "AWS_REGION", "AWS_PROFILE",
                 "CA_BUNDLE_PATH", "API_KEYS", "STORAGE_MOCK_MODE"):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Tests for environment-driven configuration."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.sync_targets is None
        assert settings.strict_empty is False
        assert settings.aws_region == "us-east-1"
        assert settings.aws_profile is None
        assert settings.ca_bundle_path is None
        assert not settings.has_sync_targets

    def test_sync_targets_decoded_from_json(self, monkeypatch):
        monkeypatch.setenv(
            "SYNC_TARGETS",
            '[{"bucketName": "bkt1", "localDir": "dist"}]',
        )

        settings = Settings(_env_file=None)

        assert settings.sync_targets == [{"bucketName": "bkt1", "localDir": "dist"}]
        assert settings.has_sync_targets

    def test_undecodable_sync_targets_kept_raw(self, monkeypatch):
        """Garbage isn't a startup error; it just means 'no configuration'."""
        monkeypatch.setenv("SYNC_TARGETS", "dist:bkt1")

        settings = Settings(_env_file=None)

        assert settings.sync_targets == "dist:bkt1"
        assert not settings.has_sync_targets

    def test_sync_targets_accepts_python_values(self):
        settings = Settings(_env_file=None, sync_targets=[{"bucketName": "b", "localDir": "d"}])

        assert settings.has_sync_targets

    def test_aws_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("AWS_REGION", "us-east-2")
        monkeypatch.setenv("AWS_PROFILE", "deploy")
        monkeypatch.setenv("CA_BUNDLE_PATH", "/etc/ssl/corp-ca.pem")
        monkeypatch.setenv("STRICT_EMPTY", "true")

        settings = Settings(_env_file=None)

        assert settings.aws_region == "us-east-2"
        assert settings.aws_profile == "deploy"
        assert settings.ca_bundle_path == "/etc/ssl/corp-ca.pem"
        assert settings.strict_empty is True

    def test_api_keys_list(self):
        settings = Settings(_env_file=None, api_keys=" one, two ,,three")

        assert settings.api_keys_list == ["one", "two", "three"]

    def test_validate_required_fields(self):
        assert Settings(_env_file=None).validate_required_fields() == []
        assert Settings(_env_file=None, api_keys="").validate_required_fields() == ["API_KEYS"]
        assert Settings(_env_file=None, aws_region="").validate_required_fields() == ["AWS_REGION"]
        assert Settings(
            _env_file=None, aws_region="", storage_mock_mode=True
        ).validate_required_fields() == []

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()

        assert get_settings() is get_settings()

        get_settings.cache_clear()
