import pytest

from supascan.core.config import ScanConfig
from supascan.core.errors import ConfigError


def test_validate_requires_url_and_key():
    with pytest.raises(ConfigError, match="Missing required parameters: url and key"):
        ScanConfig(service_url="", api_key="k").validate()
    with pytest.raises(ConfigError):
        ScanConfig(service_url="https://abc.supabase.co", api_key=None).validate()

    ScanConfig(service_url="https://abc.supabase.co", api_key="k").validate()


def test_from_env_reads_prefixed_variables():
    config = ScanConfig.from_env(
        {
            "SUPASCAN_URL": "https://abc.supabase.co",
            "SUPASCAN_KEY": "anon",
            "SUPASCAN_EMAIL": " a@x.io ",
            "SUPASCAN_PASSWORD": "",
            "SUPASCAN_FAST_DISCOVERY": "TRUE",
            "SUPASCAN_EXPORT_SQL": "schema.sql",
        }
    )

    assert config.service_url == "https://abc.supabase.co"
    assert config.api_key == "anon"
    assert config.email == "a@x.io"
    assert config.password is None
    assert config.bearer_token is None
    assert config.fast_discovery is True
    assert config.export_requested


def test_from_env_defaults():
    config = ScanConfig.from_env({})

    assert config.fast_discovery is False
    assert not config.export_requested
    with pytest.raises(ConfigError):
        config.validate()
