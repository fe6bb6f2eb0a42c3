"""Tests for the Typer command-line interface.

Commands run through ``typer.testing.CliRunner`` against a vault in a
temporary directory; the secret and the master passphrase come from the
environment so no prompt is shown.
"""

import json
import os
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from passenger import __version__
from passenger.cli import app

SECRET = "cli-secret-key"
MASTER = "Cli-Master-Passphrase!"
PASSPHRASE = "Zq8#vLm2!pTr7&xW"

runner = CliRunner()


@pytest.fixture
def cli(temp_dir):
    """Run a command against the vault of 'alice' in a temporary directory."""

    def _invoke(*args, master=MASTER, secret=SECRET):
        env = {
            "PASSENGER_SECRET_KEY": secret,
            "PASSENGER_MASTER_PASSPHRASE": master,
        }
        return runner.invoke(
            app, ["--owner", "alice", "--vault-dir", temp_dir, *args], env=env
        )

    return _invoke


@pytest.fixture
def registered(cli):
    result = cli("register")
    assert result.exit_code == 0, result.output
    return cli


def create(cli, *extra, platform="GitHub", passphrase=PASSPHRASE):
    args = [
        "create",
        "--platform",
        platform,
        "--url",
        f"https://{platform.lower()}.com",
        "--identity",
        "octo@example.com",
        "--json",
    ]
    if passphrase is not None:
        args += ["--passphrase", passphrase]
    result = cli(*args, *extra)
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestGlobalOptions:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"passenger {__version__}" in result.output

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("register", "create", "fetch", "declare", "stats"):
            assert command in result.output


class TestRegister:
    def test_register_creates_vault_file(self, cli, temp_dir):
        result = cli("register")
        assert result.exit_code == 0
        assert "Registered" in result.output
        assert os.path.exists(os.path.join(temp_dir, "alice.bus"))

    def test_register_twice(self, registered):
        result = registered("register")
        assert result.exit_code == 1
        assert "already registered" in result.output

    def test_prompted_passphrases_must_match(self, temp_dir):
        with patch("passenger.auth.getpass.getpass", side_effect=["first", "second"]):
            result = runner.invoke(
                app,
                ["--owner", "alice", "--vault-dir", temp_dir, "register"],
                env={"PASSENGER_SECRET_KEY": SECRET, "PASSENGER_MASTER_PASSPHRASE": None},
            )
        assert result.exit_code == 1
        assert "do not match" in result.output

    def test_missing_secret(self, cli):
        result = cli("register", secret=None)
        assert result.exit_code == 1
        assert "secret key is not provided" in result.output


class TestAuthorization:
    def test_unregistered_owner(self, cli):
        result = cli("list")
        assert result.exit_code == 1
        assert "not registered" in result.output

    def test_wrong_master_passphrase(self, registered):
        result = registered("list", master="wrong")
        assert result.exit_code == 1
        assert "passphrase could not be validated" in result.output

    def test_prompt_retries(self, registered, temp_dir):
        with patch(
            "passenger.auth.getpass.getpass", side_effect=["wrong", "also wrong", MASTER]
        ):
            result = runner.invoke(
                app,
                ["--owner", "alice", "--vault-dir", temp_dir, "list", "--json"],
                env={"PASSENGER_SECRET_KEY": SECRET, "PASSENGER_MASTER_PASSPHRASE": None},
            )
        assert result.exit_code == 0, result.output

    def test_reset(self, registered):
        result = registered("reset", "--new", "Brand-New-Master!")
        assert result.exit_code == 0, result.output

        assert registered("list", master=MASTER).exit_code == 1
        assert registered("list", master="Brand-New-Master!").exit_code == 0


class TestEntries:
    def test_create_and_list(self, registered):
        created = create(registered)
        assert created["platform"] == "GitHub"
        assert "passphrase" not in created

        result = registered("list", "--json")
        assert result.exit_code == 0
        listed = json.loads(result.stdout)
        assert [e["id"] for e in listed] == [created["id"]]
        assert PASSPHRASE not in result.stdout

    def test_list_table(self, registered):
        create(registered)
        result = registered("list")
        assert result.exit_code == 0
        assert "Total: 1 entries" in result.output

    def test_list_alias(self, registered):
        create(registered)
        result = registered("ls", "--json")
        assert result.exit_code == 0
        assert len(json.loads(result.stdout)) == 1

    def test_fetch_counts_accesses(self, registered):
        created = create(registered)

        first = json.loads(registered("fetch", created["id"], "--json").stdout)
        second = json.loads(registered("fetch", created["id"], "--json").stdout)

        assert first["passphrase"] == PASSPHRASE
        assert first["totalAccesses"] == 1
        assert second["totalAccesses"] == 2
        assert second["createdAt"] == created["createdAt"]

    def test_fetch_hides_passphrase_by_default(self, registered):
        created = create(registered)
        result = registered("fetch", created["id"])
        assert result.exit_code == 0
        assert PASSPHRASE not in result.output

    def test_fetch_show_keeps_brackets(self, registered):
        created = create(registered, passphrase="Zq8[bold]Lm2!pTr7&xW")
        result = registered("fetch", created["id"], "--show")
        assert result.exit_code == 0, result.output
        assert "Zq8[bold]Lm2!pTr7&xW" in result.output

    def test_fetch_copy(self, registered):
        created = create(registered)
        with patch("passenger.generator.pyperclip.copy") as copy:
            result = registered("fetch", created["id"], "--copy")
        assert result.exit_code == 0
        copy.assert_called_once_with(PASSPHRASE)

    def test_fetch_unknown_id(self, registered):
        result = registered("fetch", "missing")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_query(self, registered):
        create(registered, platform="GitHub")
        create(registered, platform="Gitea", passphrase="Kd9$wQz4@hMn")
        create(registered, platform="AWS", passphrase="Nx5%tRb8#kWq3")

        result = registered("query", "Git", "--json")
        assert [e["platform"] for e in json.loads(result.stdout)] == ["GitHub", "Gitea"]

        result = registered("query", "nothing")
        assert result.exit_code == 0
        assert "No entries found" in result.output

    def test_create_breached_passphrase(self, registered):
        result = registered(
            "create",
            "--platform",
            "Weak",
            "--url",
            "https://weak.example",
            "--identity",
            "me",
            "--passphrase",
            "password",
        )
        assert result.exit_code == 1
        assert "brute-force" in result.output

    def test_create_missing_field(self, registered):
        result = registered("create", "--platform", "GitHub", "--passphrase", PASSPHRASE)
        assert result.exit_code == 1
        assert "missing field 'url'" in result.output

    def test_create_generated(self, registered):
        created = create(registered, "--generate", "--length", "24", passphrase=None)
        fetched = json.loads(registered("fetch", created["id"], "--json").stdout)
        assert len(fetched["passphrase"]) == 24

    def test_generate_and_passphrase_are_exclusive(self, registered):
        result = registered(
            "create", "--platform", "GitHub", "--passphrase", PASSPHRASE, "--generate"
        )
        assert result.exit_code == 1
        assert "--generate" in result.output

    def test_update_merges_with_stored_entry(self, registered):
        created = create(registered)

        result = registered("update", created["id"], "--platform", "GitLab", "--json")
        assert result.exit_code == 0, result.output

        fetched = json.loads(registered("fetch", created["id"], "--json").stdout)
        assert fetched["platform"] == "GitLab"
        assert fetched["url"] == "https://github.com"
        assert len(fetched["passphraseHistory"]) == 1

    def test_update_passphrase_appends_history(self, registered):
        created = create(registered)
        registered("update", created["id"], "--passphrase", "Kd9$wQz4@hMn")

        fetched = json.loads(registered("fetch", created["id"], "--json").stdout)
        assert [r["value"] for r in fetched["passphraseHistory"]] == [
            PASSPHRASE,
            "Kd9$wQz4@hMn",
        ]

    def test_delete(self, registered):
        created = create(registered)
        result = registered("delete", created["id"])
        assert result.exit_code == 0
        assert json.loads(registered("list", "--json").stdout) == []

    def test_delete_unknown_id(self, registered):
        result = registered("delete", "missing")
        assert result.exit_code == 0
        assert "nothing deleted" in result.output


class TestConstants:
    def test_constant_lifecycle(self, registered):
        assert registered("declare", "w", "w@example.com").exit_code == 0

        result = registered("remember", "w")
        assert result.stdout.strip() == "w@example.com"

        created = create(registered, "--identity", "_$w")
        assert created["identity"] == "w@example.com"

        assert registered("modify", "w", "w@example.com", "--rename", "work").exit_code == 0
        listed = json.loads(registered("constants", "--json").stdout)
        assert listed == [{"key": "work", "value": "w@example.com"}]

        assert registered("forget", "work").exit_code == 0
        assert json.loads(registered("constants", "--json").stdout) == []

    def test_declare_twice(self, registered):
        registered("declare", "w", "w@example.com")
        result = registered("declare", "w", "other@example.com")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_remember_missing(self, registered):
        result = registered("remember", "missing")
        assert result.exit_code == 1


class TestUtilities:
    def test_generate(self):
        result = runner.invoke(app, ["generate", "20"])
        assert result.exit_code == 0
        assert len(result.stdout.strip()) == 20

    def test_generate_default_length(self):
        result = runner.invoke(app, ["gen"])
        assert len(result.stdout.strip()) == 32

    def test_manipulate(self):
        result = runner.invoke(app, ["manipulate", "password"])
        assert result.exit_code == 0
        assert len(result.stdout.strip()) == len("password")

    def test_strength(self):
        result = runner.invoke(app, ["strength", "zqxw"])
        assert result.exit_code == 0
        assert "Good start" in result.output

    def test_stats(self, registered):
        create(registered, platform="GitHub")
        create(registered, platform="Gmail")

        result = registered("stats", "--json")
        assert result.exit_code == 0, result.output
        stats = json.loads(result.stdout)
        assert stats["totalCount"] == 2
        assert stats["percentageOfCommon"] == 100.0
        assert PASSPHRASE not in result.stdout


class TestBrowserFiles:
    def test_import(self, registered, temp_dir):
        path = os.path.join(temp_dir, "chrome.csv")
        with open(path, "w", encoding="utf-8") as f:
            f.write(
                "name,url,username,password,note\n"
                f"GitHub,https://github.com,octo,{PASSPHRASE},\n"
                "Weak,https://weak.example,me,password,\n"
            )

        result = registered("import", "chromium", path)
        assert result.exit_code == 0, result.output
        assert "Skipped row 2" in result.output
        assert "Imported 1" in result.output

        listed = json.loads(registered("list", "--json").stdout)
        assert [e["platform"] for e in listed] == ["GitHub"]

    def test_import_unknown_browser(self, registered, temp_dir):
        path = os.path.join(temp_dir, "export.csv")
        with open(path, "w", encoding="utf-8") as f:
            f.write("a,b\n")
        result = registered("import", "netscape", path)
        assert result.exit_code == 1

    def test_import_missing_file(self, registered, temp_dir):
        result = registered("import", "chromium", os.path.join(temp_dir, "none.csv"))
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_export(self, registered, temp_dir):
        create(registered)
        path = os.path.join(temp_dir, "export.csv")

        result = registered("export", path)
        assert result.exit_code == 0, result.output
        with open(path, encoding="utf-8") as f:
            content = f.read()
        assert content.startswith("name,url,username,password,note\n")
        assert PASSPHRASE in content

        result = registered("export", path)
        assert result.exit_code == 1
        assert registered("export", path, "--force").exit_code == 0
