"""Unit tests for direct execution against the Jira server."""

import httpx
import pytest

from jira_rest.config import ClientSettings
from jira_rest.remote.errors import (
    AuthenticationError,
    JiraClientError,
    MalformedResponseError,
    RequestFailedError,
    TransportError,
)
from jira_rest.remote.executors import DirectExecutor
from jira_rest.remote.request import HttpMethod, JiraRequest, RequestFile

JIRA_URL = "https://jira.example.com"


@pytest.mark.asyncio
class TestDirectExecutor:
    """Test request execution and response validation."""

    async def test_execute_returns_decoded_json(self, httpx_mock):
        httpx_mock.add_response(
            method="GET",
            url=f"{JIRA_URL}/rest/api/2/serverInfo",
            json={"version": "9.4.0"},
        )

        async with DirectExecutor(JIRA_URL) as executor:
            result = await executor.execute(
                JiraRequest.create("GET", "rest/api/2/serverInfo")
            )

        assert result == {"version": "9.4.0"}

    async def test_base_url_is_normalized(self):
        executor = DirectExecutor(f"{JIRA_URL}///")

        assert executor.url == f"{JIRA_URL}/"

    async def test_execute_sends_basic_auth_and_json_body(self, httpx_mock):
        httpx_mock.add_response(
            method="POST", url=f"{JIRA_URL}/rest/api/2/issue", json={"key": "X-1"}
        )

        async with DirectExecutor(
            JIRA_URL, auth=httpx.BasicAuth("alice", "secret")
        ) as executor:
            body = {"fields": {"summary": "x"}, "update": None}
            await executor.execute(JiraRequest.create("POST", "rest/api/2/issue", body))

        request = httpx_mock.get_request()
        assert request.headers["Authorization"].startswith("Basic ")
        assert request.headers["Content-Type"] == "application/json"
        assert request.content == b'{"fields": {"summary": "x"}}'

    async def test_string_body_is_sent_verbatim(self, httpx_mock):
        httpx_mock.add_response(method="PUT", url=f"{JIRA_URL}/rest/api/2/issue/X-1")

        async with DirectExecutor(JIRA_URL) as executor:
            result = await executor.execute(
                JiraRequest.create("PUT", "rest/api/2/issue/X-1", '{"a":null}')
            )

        assert result == {}
        assert httpx_mock.get_request().content == b'{"a":null}'

    async def test_search_is_sent_as_trace(self, httpx_mock):
        httpx_mock.add_response(method="TRACE", url=f"{JIRA_URL}/rest/api/2/x", json={})

        async with DirectExecutor(JIRA_URL) as executor:
            request = JiraRequest.create(HttpMethod.SEARCH, "rest/api/2/x")
            await executor.execute(request)

        assert httpx_mock.get_request().method == "TRACE"

    async def test_headers_params_and_files_are_sent(self, httpx_mock):
        httpx_mock.add_response(
            method="POST",
            url=f"{JIRA_URL}/rest/api/2/issue/X-1/attachments?notify=false",
            json=[{"id": "100"}],
        )

        request = JiraRequest(
            method=HttpMethod.POST,
            resource="rest/api/2/issue/X-1/attachments",
            files=[RequestFile("file", "log.txt", b"hello", "text/plain")],
            headers={"X-Atlassian-Token": "no-check"},
            params={"notify": "false"},
        )
        async with DirectExecutor(JIRA_URL) as executor:
            result = await executor.execute(request)

        sent = httpx_mock.get_request()
        assert result == [{"id": "100"}]
        assert sent.headers["X-Atlassian-Token"] == "no-check"
        assert sent.headers["Content-Type"].startswith("multipart/form-data")
        assert b"hello" in sent.read()

    async def test_nested_form_field_is_rejected_before_sending(self, httpx_mock):
        async with DirectExecutor(JIRA_URL) as executor:
            with pytest.raises(JiraClientError):
                await executor.execute(
                    JiraRequest(
                        method=HttpMethod.POST,
                        resource="rest/api/2/issue/X-1/attachments",
                        body={"meta": {"k": "v"}},
                        files=[RequestFile("file", "log.txt", b"hello")],
                    )
                )

        assert httpx_mock.get_requests() == []

    async def test_connection_error_is_transport_failure(self, httpx_mock):
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        async with DirectExecutor(JIRA_URL) as executor:
            with pytest.raises(TransportError) as exc_info:
                await executor.execute(JiraRequest.create("GET", "rest/api/2/x"))

        assert exc_info.value.reason.startswith("Cannot connect to server")

    async def test_timeout_is_transport_failure(self, httpx_mock):
        httpx_mock.add_exception(httpx.ReadTimeout("timed out"))

        async with DirectExecutor(JIRA_URL) as executor:
            with pytest.raises(TransportError) as exc_info:
                await executor.execute(JiraRequest.create("GET", "rest/api/2/x"))

        assert exc_info.value.reason.startswith("Request timed out")

    async def test_html_login_page_is_malformed(self, httpx_mock):
        httpx_mock.add_response(
            url=f"{JIRA_URL}/rest/api/2/x", text="<html>Log in</html>"
        )

        async with DirectExecutor(JIRA_URL) as executor:
            with pytest.raises(MalformedResponseError):
                await executor.execute(JiraRequest.create("GET", "rest/api/2/x"))

    async def test_download_returns_bytes_without_parsing(self, httpx_mock):
        httpx_mock.add_response(
            url=f"{JIRA_URL}/secure/attachment/10/a.png", content=b"\x89PNG\r\n"
        )

        async with DirectExecutor(JIRA_URL) as executor:
            data = await executor.download(f"{JIRA_URL}/secure/attachment/10/a.png")

        assert data == b"\x89PNG\r\n"

    async def test_download_failure_is_classified(self, httpx_mock):
        httpx_mock.add_response(
            url=f"{JIRA_URL}/secure/attachment/10/a.png", status_code=500
        )

        async with DirectExecutor(JIRA_URL) as executor:
            with pytest.raises(RequestFailedError):
                await executor.download("secure/attachment/10/a.png")

    async def test_trace_logs_serialized_body(self, httpx_mock, caplog):
        httpx_mock.add_response(method="POST", url=f"{JIRA_URL}/rest/api/2/x", json={})

        settings = ClientSettings(enable_request_trace=True)
        with caplog.at_level("INFO", logger="jira_rest.trace"):
            async with DirectExecutor(JIRA_URL, settings) as executor:
                await executor.execute(
                    JiraRequest.create("POST", "rest/api/2/x", {"name": "v1"})
                )

        messages = [r.getMessage() for r in caplog.records]
        assert '[POST] Request Data: {\n  "name": "v1"\n}' in messages


@pytest.mark.asyncio
class TestDirectExecutorAuthFallback:
    """Test the single retry with the fallback authenticator after a 401."""

    async def test_401_retries_once_with_fallback_auth(self, httpx_mock):
        url = f"{JIRA_URL}/rest/api/2/myself"
        httpx_mock.add_response(url=url, status_code=401)
        httpx_mock.add_response(url=url, json={"name": "alice"})

        async with DirectExecutor(
            JIRA_URL, fallback_auth=httpx.BasicAuth("alice", "secret")
        ) as executor:
            result = await executor.execute(
                JiraRequest.create("GET", "rest/api/2/myself")
            )

        first, second = httpx_mock.get_requests()
        assert result == {"name": "alice"}
        assert "Authorization" not in first.headers
        assert second.headers["Authorization"].startswith("Basic ")

    async def test_second_401_surfaces_authentication_failure(self, httpx_mock):
        url = f"{JIRA_URL}/rest/api/2/myself"
        httpx_mock.add_response(url=url, status_code=401)
        httpx_mock.add_response(url=url, status_code=401)

        async with DirectExecutor(
            JIRA_URL, fallback_auth=httpx.BasicAuth("alice", "wrong")
        ) as executor:
            with pytest.raises(AuthenticationError):
                await executor.execute(JiraRequest.create("GET", "rest/api/2/myself"))

        assert len(httpx_mock.get_requests()) == 2

    async def test_403_is_not_retried(self, httpx_mock):
        url = f"{JIRA_URL}/rest/api/2/myself"
        httpx_mock.add_response(url=url, status_code=403)

        async with DirectExecutor(
            JIRA_URL, fallback_auth=httpx.BasicAuth("alice", "secret")
        ) as executor:
            with pytest.raises(AuthenticationError):
                await executor.execute(JiraRequest.create("GET", "rest/api/2/myself"))

        assert len(httpx_mock.get_requests()) == 1

    async def test_fallback_auth_does_not_leak_into_later_calls(self, httpx_mock):
        url = f"{JIRA_URL}/rest/api/2/myself"
        httpx_mock.add_response(url=url, status_code=401)
        httpx_mock.add_response(url=url, json={})
        httpx_mock.add_response(url=f"{JIRA_URL}/rest/api/2/project", json=[])

        async with DirectExecutor(
            JIRA_URL, fallback_auth=httpx.BasicAuth("alice", "secret")
        ) as executor:
            await executor.execute(JiraRequest.create("GET", "rest/api/2/myself"))
            await executor.execute(JiraRequest.create("GET", "rest/api/2/project"))

        requests = httpx_mock.get_requests()
        assert len(requests) == 3
        assert "Authorization" not in requests[2].headers

    async def test_no_fallback_means_single_attempt(self, httpx_mock):
        httpx_mock.add_response(url=f"{JIRA_URL}/rest/api/2/myself", status_code=401)

        async with DirectExecutor(JIRA_URL) as executor:
            with pytest.raises(AuthenticationError):
                await executor.execute(JiraRequest.create("GET", "rest/api/2/myself"))

        assert len(httpx_mock.get_requests()) == 1
