"""
Unit tests for ConnectionManager.

Tests client options, connection verification, error handling, metrics
recording and scoped release.
"""

from unittest.mock import MagicMock, patch

import pytest
from pymongo.errors import (ConnectionFailure, OperationFailure,
                            ServerSelectionTimeoutError)

from cosmos_diag.config import DemoConfig
from cosmos_diag.database.connection import ConnectionManager
from cosmos_diag.exceptions import ConnectionLimitError, InitializationError
from cosmos_diag.observability.metrics import get_metrics_collector

MONGO_CLIENT = "cosmos_diag.database.connection.MongoClient"


class TestConnectionManagerConnect:
    """Test successful connection."""

    def test_connect_returns_primary_session(self, demo_config, fake_clients):
        with patch(MONGO_CLIENT, side_effect=fake_clients):
            manager = ConnectionManager(demo_config)
            session = manager.connect()

        assert session.owns_client is True
        assert session.database_name == "test-account"
        assert manager.connected is True
        assert fake_clients.store.commands == ["ping"]

    def test_client_options(self, demo_config, fake_clients):
        with patch(MONGO_CLIENT, side_effect=fake_clients) as mock_client_cls:
            ConnectionManager(demo_config).connect()

        kwargs = mock_client_cls.call_args.kwargs
        assert kwargs["host"] == "test-account.documents.azure.com"
        assert kwargs["port"] == 10255
        assert kwargs["username"] == "test-account"
        assert kwargs["password"] == "test-password"
        assert kwargs["authSource"] == "test-account"
        assert kwargs["tls"] is True
        assert kwargs["connectTimeoutMS"] == 60000
        assert kwargs["serverSelectionTimeoutMS"] == 60000
        assert kwargs["w"] == 1
        assert kwargs["retryWrites"] is False
        assert kwargs["maxPoolSize"] == 1

    def test_connect_twice_reuses_session(self, demo_config, fake_clients):
        with patch(MONGO_CLIENT, side_effect=fake_clients) as mock_client_cls:
            manager = ConnectionManager(demo_config)
            first = manager.connect()
            second = manager.connect()

        assert first is second
        assert mock_client_cls.call_count == 1

    def test_connect_records_metric(self, demo_config, fake_clients):
        with patch(MONGO_CLIENT, side_effect=fake_clients):
            ConnectionManager(demo_config).connect()

        metrics = get_metrics_collector().get_metrics("connection.connect")
        assert metrics["metrics"]["connection.connect"]["count"] == 1
        assert metrics["metrics"]["connection.connect"]["error_count"] == 0

    def test_session_property_before_connect(self, demo_config):
        with pytest.raises(RuntimeError):
            ConnectionManager(demo_config).session


class TestConnectionManagerErrorHandling:
    """Test error handling during connection."""

    @pytest.mark.parametrize(
        "error",
        [
            ConnectionFailure("refused"),
            ServerSelectionTimeoutError("timed out"),
            OperationFailure("Authentication failed.", code=18),
        ],
    )
    def test_connect_failure_raises_initialization_error(self, demo_config, error):
        mock_client = MagicMock()
        mock_client.admin.command.side_effect = error

        with patch(MONGO_CLIENT, return_value=mock_client):
            manager = ConnectionManager(demo_config)

            with pytest.raises(InitializationError) as exc_info:
                manager.connect()

        assert exc_info.value.address == "test-account.documents.azure.com:10255"
        assert exc_info.value.context["error_type"] == type(error).__name__
        assert exc_info.value.__cause__ is error
        assert manager.connected is False
        mock_client.close.assert_called_once()

    def test_failure_never_leaks_password(self, demo_config):
        mock_client = MagicMock()
        mock_client.admin.command.side_effect = ConnectionFailure("refused")

        with patch(MONGO_CLIENT, return_value=mock_client):
            with pytest.raises(InitializationError) as exc_info:
                ConnectionManager(demo_config).connect()

        assert "test-password" not in str(exc_info.value)

    def test_failure_records_failed_metric(self, demo_config):
        mock_client = MagicMock()
        mock_client.admin.command.side_effect = ServerSelectionTimeoutError("timed out")

        with patch(MONGO_CLIENT, return_value=mock_client):
            with pytest.raises(InitializationError):
                ConnectionManager(demo_config).connect()

        metrics = get_metrics_collector().get_metrics("connection.connect")
        assert metrics["metrics"]["connection.connect"]["error_count"] == 1


class TestConnectionManagerRelease:
    """Test scoped release of the connection."""

    def test_close_is_idempotent(self, demo_config, fake_clients):
        with patch(MONGO_CLIENT, side_effect=fake_clients):
            manager = ConnectionManager(demo_config)
            manager.connect()

        manager.close()
        manager.close()

        assert fake_clients.clients[0].closed is True
        assert manager.connected is False

    def test_context_manager_closes_on_error(self, demo_config, fake_clients):
        with patch(MONGO_CLIENT, side_effect=fake_clients):
            with pytest.raises(ValueError):
                with ConnectionManager(demo_config) as session:
                    assert session.closed is False
                    raise ValueError("boom")

        assert fake_clients.clients[0].closed is True
        assert session.closed is True

    def test_close_releases_open_clones(self, demo_config, fake_clients):
        with patch(MONGO_CLIENT, side_effect=fake_clients):
            with ConnectionManager(demo_config) as session:
                session.clone()

        assert [client.closed for client in fake_clients.clients] == [True, True]


class TestConnectionManagerClones:
    """Test connections reserved for cloned sessions."""

    def test_clone_gets_a_new_client_with_same_options(self, demo_config, fake_clients):
        with patch(MONGO_CLIENT, side_effect=fake_clients) as mock_client_cls:
            with ConnectionManager(demo_config) as session:
                cloned = session.clone()

                assert cloned.client is not session.client

        first, second = mock_client_cls.call_args_list
        assert first.kwargs == second.kwargs
        assert second.kwargs["maxPoolSize"] == 1

    def test_clone_limit_follows_max_pool_size(self, clean_env, fake_clients):
        config = DemoConfig(account_name="acct", password="pw", max_pool_size=1)

        with patch(MONGO_CLIENT, side_effect=fake_clients):
            with ConnectionManager(config) as session:
                with pytest.raises(ConnectionLimitError):
                    session.clone()
