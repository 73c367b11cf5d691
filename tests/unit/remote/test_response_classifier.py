"""Unit tests for response classification.

Covers the decision order: transport completion, then status thresholds,
then body decoding.
"""

import pytest

from jira_rest.config import ClientSettings
from jira_rest.remote.classifier import (
    RawResponse,
    ResponseStatus,
    ResponseValidator,
    classify_response,
)
from jira_rest.remote.errors import (
    AuthenticationError,
    ErrorKind,
    Failure,
    ResourceNotFoundError,
    ServerReportedError,
    Success,
    TransportError,
)
from jira_rest.remote.request import JiraRequest


class TestClassifyResponse:
    """Test classification of raw responses."""

    @pytest.mark.parametrize("body", ["", "   ", "\n\t "])
    def test_blank_body_decodes_to_empty_object(self, body):
        outcome = classify_response(RawResponse(status_code=200, content=body))

        assert outcome == Success({})

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_statuses_are_authentication_failures(self, status):
        outcome = classify_response(
            RawResponse(status_code=status, content='{"errorMessages": ["nope"]}')
        )

        assert isinstance(outcome, Failure)
        assert outcome.kind is ErrorKind.AUTHENTICATION_FAILED
        assert outcome.status_code == status

    def test_404_with_error_messages_is_not_found(self):
        outcome = classify_response(
            RawResponse(
                status_code=404,
                content='{"errorMessages": ["Project does not exist"]}',
            )
        )

        assert outcome.kind is ErrorKind.RESOURCE_NOT_FOUND

    def test_other_client_error_carries_status_and_body(self):
        outcome = classify_response(RawResponse(status_code=409, content="conflict"))

        assert outcome.kind is ErrorKind.REQUEST_FAILED
        assert outcome.status_code == 409
        assert outcome.content == "conflict"
        assert "409" in outcome.message

    def test_server_error_is_request_failure(self):
        outcome = classify_response(RawResponse(status_code=500, content=""))

        assert outcome.kind is ErrorKind.REQUEST_FAILED

    def test_error_messages_with_success_status_is_server_reported(self):
        outcome = classify_response(
            RawResponse(
                status_code=200,
                content='{"errorMessages": ["bad jql"], "errors": {"jql": "x"}}',
            )
        )

        assert outcome.kind is ErrorKind.SERVER_REPORTED_ERROR
        assert outcome.error_messages == ["bad jql"]
        assert outcome.errors == {"jql": "x"}

    def test_non_json_body_is_malformed(self):
        outcome = classify_response(
            RawResponse(status_code=200, content="<html>login</html>")
        )

        assert outcome.kind is ErrorKind.MALFORMED_RESPONSE

    def test_truncated_json_is_malformed(self):
        outcome = classify_response(RawResponse(status_code=200, content='{"id": '))

        assert outcome.kind is ErrorKind.MALFORMED_RESPONSE

    def test_json_array_is_decoded(self):
        outcome = classify_response(
            RawResponse(status_code=200, content='[{"id": "1"}, {"id": "2"}]')
        )

        assert outcome == Success([{"id": "1"}, {"id": "2"}])

    def test_transport_failure_wins_over_status(self):
        outcome = classify_response(
            RawResponse(
                status_code=0,
                response_status=ResponseStatus.TIMED_OUT,
                error_message="Request timed out: read timeout",
            )
        )

        assert outcome.kind is ErrorKind.TRANSPORT_FAILURE
        assert outcome.message == "Request timed out: read timeout"

    def test_error_message_on_completed_call_is_transport_failure(self):
        outcome = classify_response(
            RawResponse(status_code=200, content="{}", error_message="aborted")
        )

        assert outcome.kind is ErrorKind.TRANSPORT_FAILURE


class TestResponseValidator:
    """Test the raising API used by the execution strategies."""

    def test_validate_returns_decoded_value(self):
        validator = ResponseValidator(ClientSettings())
        request = JiraRequest.create("GET", "rest/api/2/serverInfo")

        value = validator.validate(
            request, request.resource, RawResponse(200, '{"version": "9.4.0"}')
        )

        assert value == {"version": "9.4.0"}

    def test_validate_raises_typed_errors(self):
        validator = ResponseValidator(ClientSettings())
        request = JiraRequest.create("GET", "rest/api/2/issue/X-1")

        with pytest.raises(ResourceNotFoundError) as exc_info:
            validator.validate(request, request.resource, RawResponse(404, "gone"))

        assert exc_info.value.kind is ErrorKind.RESOURCE_NOT_FOUND
        assert exc_info.value.status_code == 404
        assert exc_info.value.content == "gone"

    def test_validate_raises_server_reported_error_with_messages(self):
        validator = ResponseValidator(ClientSettings())
        request = JiraRequest.create("POST", "rest/api/2/issue", {"fields": {}})

        with pytest.raises(ServerReportedError) as exc_info:
            validator.validate(
                request,
                request.resource,
                RawResponse(200, '{"errorMessages": ["Field required"]}'),
            )

        assert exc_info.value.error_messages == ["Field required"]

    def test_validate_download_skips_json_parsing(self):
        validator = ResponseValidator(ClientSettings())

        data = validator.validate_download(
            "secure/attachment/1/a.bin",
            RawResponse(200, content="not json", raw_bytes=b"\x00\x01"),
        )

        assert data == b"\x00\x01"

    def test_validate_download_classifies_status(self):
        validator = ResponseValidator(ClientSettings())

        with pytest.raises(AuthenticationError):
            validator.validate_download("secure/attachment/1/a.bin", RawResponse(403))

    def test_validate_download_transport_failure(self):
        validator = ResponseValidator(ClientSettings())

        with pytest.raises(TransportError) as exc_info:
            validator.validate_download(
                "secure/attachment/1/a.bin",
                RawResponse(
                    0, response_status=ResponseStatus.ERROR, error_message="refused"
                ),
            )

        assert exc_info.value.reason == "refused"

    def test_trace_logs_request_and_response(self, caplog):
        validator = ResponseValidator(ClientSettings(enable_request_trace=True))
        request = JiraRequest.create("GET", "rest/api/2/myself")

        with caplog.at_level("INFO", logger="jira_rest.trace"):
            validator.trace_request("GET", request.resource)
            validator.validate(request, request.resource, RawResponse(200, "{}"))

        messages = [r.getMessage() for r in caplog.records]
        assert "[GET] Request Url: rest/api/2/myself" in messages
        assert any(m.startswith("[GET] Response for Url") for m in messages)

    def test_trace_disabled_logs_nothing(self, caplog):
        validator = ResponseValidator(ClientSettings())

        with caplog.at_level("INFO", logger="jira_rest.trace"):
            validator.trace_request("GET", "rest/api/2/myself", '{"a": 1}')

        assert caplog.records == []
