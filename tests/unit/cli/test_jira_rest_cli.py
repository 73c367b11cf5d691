"""Unit tests for the jira-rest command line interface."""

import json

import pytest
from click.testing import CliRunner

from jira_rest.cli import cli

JIRA_URL = "https://jira.example.com"


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"url": JIRA_URL, "username": "alice", "password": "secret"})
    )
    path.chmod(0o600)
    return str(path)


class TestJiraRestCli:
    def test_request_prints_json(self, httpx_mock, config_file):
        httpx_mock.add_response(
            url=f"{JIRA_URL}/rest/api/2/serverInfo", json={"version": "9.4.0"}
        )

        result = CliRunner().invoke(
            cli, ["--config", config_file, "request", "GET", "rest/api/2/serverInfo"]
        )

        assert result.exit_code == 0
        assert "9.4.0" in result.output

    def test_request_failure_names_error_kind(self, httpx_mock, config_file):
        httpx_mock.add_response(url=f"{JIRA_URL}/rest/api/2/issue/X-9", status_code=404)

        result = CliRunner().invoke(
            cli, ["--config", config_file, "request", "GET", "rest/api/2/issue/X-9"]
        )

        assert result.exit_code == 1
        assert "resource_not_found" in result.output

    def test_get_with_body_is_rejected(self, httpx_mock, config_file):
        result = CliRunner().invoke(
            cli,
            ["--config", config_file, "request", "GET", "rest/api/2/x", "--body", "{}"],
        )

        assert result.exit_code == 1
        assert "local_contract_violation" in result.output
        assert httpx_mock.get_requests() == []

    def test_projects_table(self, httpx_mock, config_file):
        httpx_mock.add_response(
            url=f"{JIRA_URL}/rest/api/2/project?expand=lead,url",
            json=[{"id": "1", "key": "PROJ", "name": "Project"}],
        )

        result = CliRunner().invoke(cli, ["--config", config_file, "projects"])

        assert result.exit_code == 0
        assert "PROJ" in result.output

    def test_versions_table(self, httpx_mock, config_file):
        httpx_mock.add_response(
            url=f"{JIRA_URL}/rest/api/2/project/PROJ/versions",
            json=[{"id": "5", "name": "1.0", "released": True}],
        )

        result = CliRunner().invoke(cli, ["--config", config_file, "versions", "PROJ"])

        assert result.exit_code == 0
        assert "1.0" in result.output

    def test_download_writes_file(self, httpx_mock, config_file, tmp_path):
        httpx_mock.add_response(
            url=f"{JIRA_URL}/secure/attachment/1/a.bin", content=b"\x00\x01"
        )
        target = tmp_path / "a.bin"

        result = CliRunner().invoke(
            cli,
            [
                "--config",
                config_file,
                "download",
                "secure/attachment/1/a.bin",
                "-o",
                str(target),
            ],
        )

        assert result.exit_code == 0
        assert target.read_bytes() == b"\x00\x01"

    def test_string_timeout_exits_with_error(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"url": JIRA_URL, "timeout": "30"}))
        path.chmod(0o600)

        result = CliRunner().invoke(cli, ["--config", str(path), "projects"])

        assert result.exit_code == 1
        assert "integer" in result.output
        assert not isinstance(result.exception, TypeError)

    def test_invalid_config_exits_with_error(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"username": "alice"}))

        result = CliRunner().invoke(cli, ["--config", str(path), "projects"])

        assert result.exit_code == 1

    def test_oauth_request_token(self, httpx_mock):
        httpx_mock.add_response(
            method="POST",
            url=f"{JIRA_URL}/plugins/servlet/oauth/request-token",
            text="oauth_token=abc&oauth_token_secret=s1&oauth_callback_confirmed=true",
        )

        result = CliRunner().invoke(
            cli,
            [
                "oauth",
                "request-token",
                "--url",
                JIRA_URL,
                "--consumer-key",
                "key",
                "--consumer-secret",
                "secret",
            ],
        )

        assert result.exit_code == 0
        assert "oauth_token=abc" in result.output

    def test_oauth_access_token_mismatch_exits_with_error(self, httpx_mock):
        httpx_mock.add_response(
            method="POST",
            url=f"{JIRA_URL}/plugins/servlet/oauth/access-token",
            text="oauth_token=access&oauth_token_secret=other",
        )

        result = CliRunner().invoke(
            cli,
            [
                "oauth",
                "access-token",
                "--url",
                JIRA_URL,
                "--consumer-key",
                "key",
                "--consumer-secret",
                "secret",
                "--request-token",
                "abc",
                "--token-secret",
                "s1",
            ],
        )

        assert result.exit_code == 1
        assert "did not complete" in result.output
