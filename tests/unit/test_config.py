"""Unit tests for configuration and logging setup."""

import logging

import pytest

from birdsock import config
from birdsock.config import (
    BIRD2_SOCKET,
    BIRD3_SOCKET,
    BirdConfig,
    discover_socket,
    get_config,
    set_config,
)
from birdsock.logging_config import configure_logging, get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_config():
    set_config(None)
    yield
    set_config(None)


class TestBirdConfig:
    """Test environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        for name in ("BIRDSOCK_DAEMON", "BIRDSOCK_SOCKET", "BIRDSOCK_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)

        cfg = BirdConfig.from_env()

        assert cfg.daemon == "bird2"
        assert cfg.timeout == 10.0
        assert cfg.resolved_socket_path == BIRD2_SOCKET

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("BIRDSOCK_DAEMON", "BIRD3")
        monkeypatch.setenv("BIRDSOCK_TIMEOUT", "2.5")
        monkeypatch.delenv("BIRDSOCK_SOCKET", raising=False)

        cfg = BirdConfig.from_env()

        assert cfg.daemon == "bird3"
        assert cfg.timeout == 2.5
        assert cfg.resolved_socket_path == BIRD3_SOCKET

    def test_explicit_socket_wins(self, monkeypatch):
        monkeypatch.delenv("BIRDSOCK_DAEMON", raising=False)
        monkeypatch.delenv("BIRDSOCK_TIMEOUT", raising=False)
        monkeypatch.setenv("BIRDSOCK_SOCKET", "/tmp/custom.ctl")

        assert BirdConfig.from_env().resolved_socket_path == "/tmp/custom.ctl"

    def test_invalid_daemon(self, monkeypatch):
        monkeypatch.setenv("BIRDSOCK_DAEMON", "bird1")

        with pytest.raises(ValueError, match="BIRDSOCK_DAEMON"):
            BirdConfig.from_env()

    def test_invalid_timeout(self, monkeypatch):
        monkeypatch.delenv("BIRDSOCK_DAEMON", raising=False)
        monkeypatch.setenv("BIRDSOCK_TIMEOUT", "soon")

        with pytest.raises(ValueError, match="BIRDSOCK_TIMEOUT"):
            BirdConfig.from_env()

    def test_global_instance(self, monkeypatch):
        monkeypatch.delenv("BIRDSOCK_DAEMON", raising=False)
        monkeypatch.delenv("BIRDSOCK_TIMEOUT", raising=False)

        assert get_config() is get_config()

        custom = BirdConfig(socket_path="/tmp/x.ctl")
        set_config(custom)
        assert get_config() is custom


class TestDiscoverSocket:
    """Test socket discovery."""

    def test_first_existing_path(self, tmp_path):
        present = tmp_path / "bird3.ctl"
        present.touch()

        found = discover_socket([str(tmp_path / "bird.ctl"), str(present)])

        assert found == str(present)

    def test_nothing_found(self, tmp_path):
        assert discover_socket([str(tmp_path / "missing.ctl")]) is None

    def test_default_search_list(self):
        assert config.SOCKET_SEARCH_PATHS[0] == BIRD2_SOCKET


class TestLogging:
    """Test logging setup."""

    def test_setup_logging_level(self):
        logger = setup_logging(level="DEBUG")

        assert logger.name == "birdsock"
        assert logger.level == logging.DEBUG
        assert not logger.propagate
        assert len(logger.handlers) == 1

    def test_file_logging(self, tmp_path):
        log_file = tmp_path / "logs" / "birdsock.log"
        logger = setup_logging(level="INFO", log_file=str(log_file), enable_file=True)

        get_logger("birdsock.session").info("connected")
        for handler in logger.handlers:
            handler.flush()

        text = log_file.read_text()
        assert "connected" in text
        assert "test_config" in text
        assert "test_file_logging" in text

    def test_configure_logging_quiet_by_default(self):
        configure_logging()

        assert logging.getLogger("birdsock").level == logging.WARNING

    def test_configure_logging_debug(self):
        configure_logging(debug=True)

        assert logging.getLogger("birdsock").level == logging.DEBUG
