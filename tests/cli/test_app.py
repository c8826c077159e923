"""
Tests for the adotasks command line.

Commands run end to end against a mocked requests session.
"""

import json
import logging
from unittest.mock import patch

import pytest
import requests

from adotasks.cli import ExitCode, create_parser, main


@pytest.fixture
def env(clean_env, tmp_path):
    """Complete configuration in the environment, run from an empty directory."""
    clean_env.chdir(tmp_path)
    clean_env.setenv("AZURE_DEVOPS_ORG", "org")
    clean_env.setenv("AZURE_DEVOPS_PROJECT", "proj")
    clean_env.setenv("AZURE_DEVOPS_PAT", "cli-token-1234")
    return clean_env


@pytest.fixture
def session(mock_session):
    with patch("adotasks.adapters.azure_devops.client.requests.Session", return_value=mock_session):
        yield mock_session


@pytest.fixture(autouse=True)
def reset_root_logger():
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()


# =============================================================================
# Parser
# =============================================================================


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args([])

    def test_list_options(self):
        args = create_parser().parse_args(["--output", "json", "list", "--query", "login", "--closed"])

        assert args.command == "list"
        assert args.query == "login"
        assert args.closed is True
        assert args.output == "json"

    def test_set_state_revision(self):
        args = create_parser().parse_args(["set-state", "42", "Resolved", "--revision", "7"])

        assert (args.id, args.state, args.revision) == ("42", "Resolved", 7)

    def test_invalid_log_format(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--log-format", "xml", "ping"])


# =============================================================================
# Commands
# =============================================================================


@pytest.mark.usefixtures("env")
class TestCommands:
    """End-to-end command tests."""

    def test_ping(self, session, capsys):
        assert main(["--no-color", "ping"]) == ExitCode.SUCCESS

        url = session.request.call_args[0][1]
        assert url == "https://dev.azure.com/org/_apis/projects?api-version=2.0"
        session.close.assert_called()

    def test_ping_unauthorized(self, session, make_response):
        session.request.return_value = make_response(401, text="")

        assert main(["ping"]) == ExitCode.CONNECTION_ERROR

    def test_list_json(self, session, make_response, make_work_item_json, capsys):
        session.request.side_effect = [
            make_response(200, {"workItems": [{"id": 1, "url": "u"}, {"id": 2, "url": "u"}]}),
            make_response(200, {"value": [make_work_item_json(1), make_work_item_json(2)]}),
        ]

        code = main(["--output", "json", "list", "--query", "login"])

        assert code == ExitCode.SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert [item["id"] for item in data["work_items"]] == ["1", "2"]
        assert data["work_items"][0]["issue_url"] == "https://dev.azure.com/org/proj/_workitems/edit/1"

    def test_list_closed_flag(self, session, make_response):
        session.request.return_value = make_response(200, {"workItems": []})

        main(["list", "--closed"])

        query = session.request.call_args[1]["json"]["query"]
        assert "[State] <> 'Closed'" not in query

    def test_show(self, session, make_response, make_work_item_json, capsys):
        session.request.return_value = make_response(200, make_work_item_json(42))

        assert main(["--no-color", "show", "42"]) == ExitCode.SUCCESS
        assert "42: Fix login" in capsys.readouterr().out

    def test_show_missing(self, session, make_response, capsys):
        session.request.return_value = make_response(404, text="")

        assert main(["show", "42"]) == ExitCode.NOT_FOUND
        assert "not found" in capsys.readouterr().err

    def test_states(self, session, make_response, make_work_item_json, bug_states_json, capsys):
        session.request.side_effect = [
            make_response(200, make_work_item_json(42, work_item_type="Bug")),
            make_response(200, bug_states_json),
        ]

        assert main(["--output", "json", "states", "42"]) == ExitCode.SUCCESS
        assert json.loads(capsys.readouterr().out) == {
            "states": ["Active", "Closed", "New", "Resolved"]
        }

    def test_states_blank_type(self, session, make_response, make_work_item_json, capsys):
        session.request.return_value = make_response(200, make_work_item_json(42, work_item_type=""))

        assert main(["--output", "json", "states", "42"]) == ExitCode.SUCCESS
        assert json.loads(capsys.readouterr().out) == {"states": []}
        assert session.request.call_count == 1

    def test_set_state_applied(self, session, make_response):
        session.request.return_value = make_response(200, {"id": 42})

        assert main(["set-state", "42", "Resolved", "--revision", "7"]) == ExitCode.SUCCESS

        body = session.request.call_args[1]["json"]
        assert body[0] == {"op": "test", "path": "/rev", "value": 7}

    def test_set_state_not_applied(self, session, make_response, capsys):
        session.request.return_value = make_response(404, text="")

        code = main(["--output", "json", "set-state", "42", "Resolved", "--revision", "7"])

        assert code == ExitCode.NOT_FOUND
        assert json.loads(capsys.readouterr().out)["applied"] is False

    def test_remote_failure(self, session, make_response, capsys):
        session.request.return_value = make_response(500, text="server exploded")

        assert main(["show", "42"]) == ExitCode.ERROR
        assert "500" in capsys.readouterr().err

    def test_transport_failure(self, session):
        session.request.side_effect = requests.exceptions.ConnectionError("refused")

        assert main(["list"]) == ExitCode.CONNECTION_ERROR

    def test_interrupt(self, session):
        session.request.side_effect = KeyboardInterrupt

        assert main(["list"]) == ExitCode.CANCELLED

    def test_team_override(self, session):
        main(["--team", "other-org", "ping"])

        assert session.request.call_args[0][1].startswith("https://dev.azure.com/other-org/")


# =============================================================================
# Configuration Errors
# =============================================================================


class TestConfigurationErrors:
    def test_missing_settings(self, clean_env, tmp_path, capsys):
        clean_env.chdir(tmp_path)

        with patch("adotasks.adapters.azure_devops.client.requests.Session") as session_cls:
            assert main(["list"]) == ExitCode.CONFIG_ERROR
            session_cls.assert_not_called()

        assert "AZURE_DEVOPS_PAT" in capsys.readouterr().err

    def test_missing_settings_json(self, clean_env, tmp_path, capsys):
        clean_env.chdir(tmp_path)

        assert main(["--output", "json", "list"]) == ExitCode.CONFIG_ERROR

        data = json.loads(capsys.readouterr().out)
        assert data["success"] is False
        assert len(data["errors"]) == 3

    def test_unwritable_log_file(self, env, tmp_path, capsys):
        log_file = tmp_path / "missing-dir" / "adotasks.log"

        with patch("adotasks.adapters.azure_devops.client.requests.Session") as session_cls:
            assert main(["--log-file", str(log_file), "ping"]) == ExitCode.CONFIG_ERROR
            session_cls.assert_not_called()

        assert "Cannot open log file" in capsys.readouterr().err

    def test_bad_config_file(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        config = tmp_path / "broken.yaml"
        config.write_text("azure_devops: [unclosed")

        assert main(["--config", str(config), "list"]) == ExitCode.CONFIG_ERROR

    def test_config_file(self, clean_env, tmp_path, session):
        clean_env.chdir(tmp_path)
        (tmp_path / ".adotasks.yaml").write_text(
            "azure_devops:\n  organization: file-org\n  project: file-proj\n  pat: file-token-1234\n"
        )

        assert main(["ping"]) == ExitCode.SUCCESS
        assert session.request.call_args[0][1].startswith("https://dev.azure.com/file-org/")
