"""Tests for master passphrase prompts and authorization."""

from unittest.mock import patch

import pytest

from passenger.auth import (
    authorize,
    get_master_passphrase,
    prompt_create_master_passphrase,
)
from passenger.errors import AuthorizationError


@pytest.fixture
def no_env_passphrase(monkeypatch):
    monkeypatch.delenv("PASSENGER_MASTER_PASSPHRASE", raising=False)


class TestGetMasterPassphrase:
    def test_environment_wins(self, monkeypatch):
        monkeypatch.setenv("PASSENGER_MASTER_PASSPHRASE", "from-env")
        with patch("passenger.auth.getpass.getpass") as getpass:
            assert get_master_passphrase() == "from-env"
        getpass.assert_not_called()

    def test_prompt(self, no_env_passphrase):
        with patch("passenger.auth.getpass.getpass", return_value="typed"):
            assert get_master_passphrase() == "typed"

    def test_confirmation_mismatch(self, no_env_passphrase):
        with patch("passenger.auth.getpass.getpass", side_effect=["one", "two"]):
            with pytest.raises(ValueError, match="do not match"):
                prompt_create_master_passphrase()

    def test_cancelled_prompt(self, no_env_passphrase, capsys):
        with patch("passenger.auth.getpass.getpass", side_effect=KeyboardInterrupt):
            with pytest.raises(KeyboardInterrupt):
                get_master_passphrase()
        assert "cancelled" in capsys.readouterr().err


class TestAuthorize:
    def test_correct_passphrase(self, store, master_passphrase, monkeypatch):
        monkeypatch.setenv("PASSENGER_MASTER_PASSPHRASE", master_passphrase)
        authorize(store)

    def test_wrong_passphrase_from_environment(self, store, monkeypatch):
        monkeypatch.setenv("PASSENGER_MASTER_PASSPHRASE", "wrong")
        with pytest.raises(AuthorizationError, match="could not be validated"):
            authorize(store)

    def test_prompt_allows_three_attempts(self, store, no_env_passphrase):
        with patch(
            "passenger.auth.getpass.getpass", side_effect=["a", "b", "c", "never asked"]
        ) as getpass:
            with pytest.raises(AuthorizationError):
                authorize(store)
        assert getpass.call_count == 3

    def test_unregistered(self, unregistered_store, monkeypatch):
        monkeypatch.setenv("PASSENGER_MASTER_PASSPHRASE", "anything")
        with pytest.raises(AuthorizationError, match="not registered"):
            authorize(unregistered_store)
