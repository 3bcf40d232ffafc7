# tests/test_config.py
from importlib import reload
import pytest
import askstream.core.config as cfg_mod

@pytest.fixture(autouse=True)
def _restore_config():
    yield
    reload(cfg_mod)

def test_defaults_present(monkeypatch):
    # With nothing set, there is no read timeout (long generations are allowed)
    # but connecting is still bounded.
    monkeypatch.delenv("ASK_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("ASK_CONNECT_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("ASK_PROVIDER", raising=False)
    reload(cfg_mod)
    assert cfg_mod.TIMEOUT_SECONDS is None
    assert cfg_mod.CONNECT_TIMEOUT_SECONDS == 10.0
    assert cfg_mod.PROVIDER == "anthropic"

def test_timeout_parsing(monkeypatch):
    monkeypatch.setenv("ASK_TIMEOUT_SECONDS", "45")
    reload(cfg_mod)
    assert cfg_mod.TIMEOUT_SECONDS == 45.0
    # blank is treated the same as unset
    monkeypatch.setenv("ASK_TIMEOUT_SECONDS", "  ")
    reload(cfg_mod)
    assert cfg_mod.TIMEOUT_SECONDS is None

def test_log_level_upper(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    reload(cfg_mod)
    assert cfg_mod.LOG_LEVEL == "DEBUG"

def test_transport_timeout_follows_config(monkeypatch):
    from askstream.providers import transport
    monkeypatch.setenv("ASK_TIMEOUT_SECONDS", "45")
    monkeypatch.setenv("ASK_CONNECT_TIMEOUT_SECONDS", "3")
    reload(cfg_mod)
    t = transport._timeout()
    assert t.read == 45.0
    assert t.connect == 3.0
    monkeypatch.delenv("ASK_TIMEOUT_SECONDS")
    reload(cfg_mod)
    assert transport._timeout().read is None
