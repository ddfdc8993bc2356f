from pathlib import Path

from blogo.settings import Settings, choose_env_file


def test_public_url_prefers_explicit_value_without_trailing_slash():
    s = Settings(PUBLIC_URL="https://blog.example.com/")
    assert s.public_url == "https://blog.example.com"


def test_public_url_falls_back_to_host_and_port():
    s = Settings(PUBLIC_URL="", HOST="0.0.0.0", PORT=9000)
    assert s.public_url == "http://0.0.0.0:9000"


def test_watch_enabled_only_in_production():
    assert Settings(ENVIRONMENT="production").watch_enabled is True
    assert Settings(ENVIRONMENT="development").watch_enabled is False
    assert Settings(ENVIRONMENT="test").watch_enabled is False


def test_atproto_configuration_and_publication_uri():
    partial = Settings(ATPROTO_DID="did:plc:abc", ATPROTO_HANDLE="", ATPROTO_APP_PASSWORD="")
    assert partial.atproto_configured is False

    full = Settings(ATPROTO_DID="did:plc:abc", ATPROTO_HANDLE="me.example.com", ATPROTO_APP_PASSWORD="pw")
    assert full.atproto_configured is True
    assert full.publication_uri == "at://did:plc:abc/site.standard.publication/self"


def test_cache_ttl_can_be_disabled():
    assert Settings(CACHE_TTL_SECONDS=None).CACHE_TTL_SECONDS is None


def test_choose_env_file_prefers_env_local(monkeypatch):
    monkeypatch.setattr(Path, "exists", lambda self: str(self) == ".env.local")
    assert choose_env_file() == ".env.local"


def test_choose_env_file_falls_back(monkeypatch):
    monkeypatch.setattr(Path, "exists", lambda self: False)
    assert choose_env_file() == ".env"
