"""Tests for connect_to_database."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from doclayer import CollectionConfig, connect_to_database
from doclayer.core.exceptions import ConfigurationError


@pytest.fixture
def motor_client():
    with patch("doclayer.core.connect.AsyncIOMotorClient") as client_cls, patch(
        "doclayer.core.connect.load_dotenv"
    ):
        client_cls.return_value = MagicMock()
        yield client_cls


class TestConnect:
    def test_explicit_arguments(self, motor_client):
        database = connect_to_database("mongodb://db:27017", "app")

        motor_client.assert_called_once_with("mongodb://db:27017", tz_aware=True)
        motor_client.return_value.__getitem__.assert_called_once_with("app")
        assert database is motor_client.return_value.__getitem__.return_value

    def test_environment_fallback(self, motor_client, monkeypatch):
        monkeypatch.setenv("DOCLAYER_MONGO_URI", "mongodb://env:27017")
        monkeypatch.setenv("DOCLAYER_DATABASE", "envdb")

        connect_to_database()

        motor_client.assert_called_once_with("mongodb://env:27017", tz_aware=True)
        motor_client.return_value.__getitem__.assert_called_once_with("envdb")

    def test_default_uri(self, motor_client, monkeypatch):
        monkeypatch.delenv("DOCLAYER_MONGO_URI", raising=False)
        connect_to_database(name="app")
        assert motor_client.call_args.args == ("mongodb://localhost:27017",)

    def test_client_options_forwarded(self, motor_client):
        connect_to_database("mongodb://db", "app", serverSelectionTimeoutMS=100)
        assert motor_client.call_args.kwargs["serverSelectionTimeoutMS"] == 100

    def test_missing_name_raises(self, motor_client, monkeypatch):
        monkeypatch.delenv("DOCLAYER_DATABASE", raising=False)
        with pytest.raises(ConfigurationError):
            connect_to_database("mongodb://db")
        motor_client.assert_not_called()

    def test_configures_logging(self, motor_client):
        with patch("doclayer.core.connect.configure_logging") as configure:
            connect_to_database("mongodb://db", "app", config=CollectionConfig(log_level="ERROR"))
        configure.assert_called_once_with("ERROR", None)
