import pytest
from pydantic import ValidationError

from telefile_api.settings import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("DEPLOYMENT_MODE", raising=False)
    monkeypatch.delenv("MAX_UPLOAD_BYTES", raising=False)

    settings = Settings(_env_file=None)

    assert settings.deployment_mode == "local-dev"
    assert settings.max_upload_bytes == 2 * 1024 * 1024


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DEPLOYMENT_MODE", "aws-mock")
    monkeypatch.setenv("S3_BUCKET_NAME", "from-env")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.deployment_mode == "aws-mock"
    assert settings.s3_bucket_name == "from-env"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("legacy, expected", [("local", "local-dev"), ("local-mock", "local-dev"), ("cloud", "aws-prod")])
def test_legacy_modes_are_normalized(legacy, expected):
    assert Settings(_env_file=None, deployment_mode=legacy).deployment_mode == expected


def test_unknown_mode_is_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, deployment_mode="on-prem")
