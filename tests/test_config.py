"""Tests for client settings and store construction."""

import pytest
from pydantic import ValidationError

from crudstore import ClientSettings, RemoteStore, connect, simple


def test_defaults():
    settings = ClientSettings(endpoint="http://localhost:8080")

    assert settings.timeout == 30.0
    assert settings.max_frame_bytes == 16 * 1024 * 1024
    assert settings.request_headers() == {"Content-Type": "application/json"}


def test_api_key_and_extra_headers():
    settings = ClientSettings(endpoint="https://store.example", api_key="k", headers={"X-Trace": "1"})

    assert settings.request_headers() == {"Content-Type": "application/json", "X-API-Key": "k", "X-Trace": "1"}


@pytest.mark.parametrize("endpoint", ["", "localhost:8080", "ftp://store.example", "http://"])
def test_invalid_endpoint(endpoint):
    with pytest.raises(ValidationError, match="Invalid HTTP endpoint"):
        ClientSettings(endpoint=endpoint)


def test_non_positive_timeout_is_rejected():
    with pytest.raises(ValidationError):
        ClientSettings(endpoint="http://localhost", timeout=0)


def test_from_env(monkeypatch):
    monkeypatch.setenv("CRUDSTORE_ENDPOINT", "http://env.example:9000")
    monkeypatch.setenv("CRUDSTORE_TIMEOUT", "2.5")
    monkeypatch.setenv("CRUDSTORE_MAX_FRAME_BYTES", "4096")
    monkeypatch.delenv("CRUDSTORE_API_KEY", raising=False)

    settings = ClientSettings.from_env()

    assert settings.endpoint == "http://env.example:9000"
    assert settings.timeout == 2.5
    assert settings.max_frame_bytes == 4096
    assert settings.api_key == ""


def test_from_env_overrides(monkeypatch):
    monkeypatch.setenv("CRUDSTORE_ENDPOINT", "http://env.example")

    settings = ClientSettings.from_env(api_key="explicit")

    assert settings.api_key == "explicit"


def test_from_env_without_endpoint(monkeypatch):
    monkeypatch.delenv("CRUDSTORE_ENDPOINT", raising=False)

    with pytest.raises(ValidationError):
        ClientSettings.from_env()


def test_from_yaml(tmp_path):
    config_file = tmp_path / "crudstore.yaml"
    config_file.write_text("endpoint: http://yaml.example\ntimeout: 7\nheaders:\n  X-Team: storage\n")

    settings = ClientSettings.from_yaml(config_file)

    assert settings.endpoint == "http://yaml.example"
    assert settings.timeout == 7.0
    assert settings.headers == {"X-Team": "storage"}


def test_from_yaml_rejects_non_mapping(tmp_path):
    config_file = tmp_path / "crudstore.yaml"
    config_file.write_text("- http://yaml.example\n")

    with pytest.raises(ValueError, match="must contain a mapping"):
        ClientSettings.from_yaml(config_file)


@pytest.mark.asyncio
async def test_connect_from_endpoint_string():
    async with connect("http://localhost:8080/store") as store:
        assert isinstance(store, RemoteStore)
        assert str(store.tag.url) == "http://localhost:8080/store/tag"
        assert store.transport.settings.endpoint == "http://localhost:8080/store"


@pytest.mark.asyncio
async def test_connect_from_env(monkeypatch):
    monkeypatch.setenv("CRUDSTORE_ENDPOINT", "http://env.example")
    monkeypatch.setenv("CRUDSTORE_API_KEY", "secret")

    async with connect() as store:
        assert store.transport.client.headers["X-API-Key"] == "secret"


@pytest.mark.asyncio
async def test_simple_builds_all_sub_stores():
    async with simple("http://localhost:8080") as store:
        assert str(store.value.url) == "http://localhost:8080/value"
        assert str(store.revision.url) == "http://localhost:8080/revision"
