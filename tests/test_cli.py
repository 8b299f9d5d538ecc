"""Tests for the communityhub-sync command line tool."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from communityhub_sync.cli import app
from communityhub_sync.config import (
    ACCESS_TOKEN_OPTION,
    FIELD_MAPPING_OPTION,
    INSTANCE_URL_OPTION,
    SETTINGS_OPTION,
)
from communityhub_sync.helpers import create_account_sync

from conftest import INSTANCE_URL, complete_settings

runner = CliRunner()


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                SETTINGS_OPTION: complete_settings(
                    client_secret="a-long-client-secret"
                ),
                ACCESS_TOKEN_OPTION: "cached-token",
                INSTANCE_URL_OPTION: INSTANCE_URL,
                FIELD_MAPPING_OPTION: {"first_name": {"remote": "FirstName"}},
            }
        )
    )
    return path


@pytest.fixture
def users_file(tmp_path):
    path = tmp_path / "users.json"
    path.write_text(
        json.dumps({"1": {"remote_account_id": "001xx"}, "2": {}})
    )
    return path


def read(path):
    return json.loads(path.read_text())


class TestConfigCommand:
    """Tests for `communityhub-sync config`."""

    def test_secrets_masked(self, settings_file):
        result = runner.invoke(app, ["config", "-s", str(settings_file)])

        assert result.exit_code == 0
        assert "a-lo****cret" in result.output
        assert "a-long-client-secret" not in result.output
        assert "hunter2" not in result.output
        assert INSTANCE_URL in result.output


class TestTokenCommand:
    """Tests for `communityhub-sync token`."""

    def test_cached_token(self, settings_file):
        """Test the cached token is reported without a refresh."""
        result = runner.invoke(app, ["token", "-s", str(settings_file)])

        assert result.exit_code == 0
        assert "Instance URL: https://hub.example.com" in result.output

    def test_incomplete_settings(self, tmp_path):
        """Test a missing configuration exits with status 1."""
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({SETTINGS_OPTION: {"sync_enabled": True}}))

        result = runner.invoke(app, ["token", "-s", str(path)])

        assert result.exit_code == 1


class TestSyncCommand:
    """Tests for `communityhub-sync sync`."""

    def test_sync_user(self, settings_file, users_file, api, http_client):
        """Test a user is synced and the user file updated."""
        api.queue_api(200, {"Id": "001xx", "FirstName": "Ada"})

        with patch(
            "communityhub_sync.cli.create_account_sync",
            lambda store, users: create_account_sync(store, users, http_client),
        ):
            result = runner.invoke(
                app, ["sync", "1", "-s", str(settings_file), "-u", str(users_file)]
            )

        assert result.exit_code == 0
        assert "User 1 synced" in result.output
        assert read(users_file)["1"]["first_name"] == "Ada"

    def test_unresolvable_user(self, settings_file, users_file):
        """Test a user without account id or subject exits with status 1."""
        result = runner.invoke(
            app, ["sync", "2", "-s", str(settings_file), "-u", str(users_file)]
        )

        assert result.exit_code == 1

    def test_invalid_settings(self, tmp_path, users_file):
        """Test an invalid settings blob exits with status 1."""
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({SETTINGS_OPTION: {"timeout": ["bad"]}}))

        result = runner.invoke(
            app, ["sync", "1", "-s", str(path), "-u", str(users_file)]
        )

        assert result.exit_code == 1


class TestMappingCommands:
    """Tests for the mapping-* commands."""

    def test_show(self, settings_file):
        result = runner.invoke(app, ["mapping-show", "-s", str(settings_file)])

        assert result.exit_code == 0
        assert "first_name" in result.output
        assert "FirstName" in result.output

    def test_show_empty(self, tmp_path):
        result = runner.invoke(app, ["mapping-show", "-s", str(tmp_path / "s.json")])

        assert result.exit_code == 0
        assert "(no field mappings)" in result.output

    def test_set_adds_entry(self, settings_file):
        result = runner.invoke(
            app, ["mapping-set", "last_name", "LastName", "-s", str(settings_file)]
        )

        assert result.exit_code == 0
        assert read(settings_file)[FIELD_MAPPING_OPTION] == {
            "first_name": {"remote": "FirstName"},
            "last_name": {"remote": "LastName"},
        }

    def test_set_rejects_empty_remote(self, settings_file):
        result = runner.invoke(
            app, ["mapping-set", "last_name", " ", "-s", str(settings_file)]
        )

        assert result.exit_code == 1
        assert "last_name" not in read(settings_file)[FIELD_MAPPING_OPTION]

    def test_remove(self, settings_file):
        result = runner.invoke(
            app, ["mapping-remove", "first_name", "-s", str(settings_file)]
        )

        assert result.exit_code == 0
        assert read(settings_file)[FIELD_MAPPING_OPTION] == {}

    def test_remove_unknown(self, settings_file):
        result = runner.invoke(
            app, ["mapping-remove", "nope", "-s", str(settings_file)]
        )

        assert result.exit_code == 1
