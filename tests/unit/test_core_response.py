import pytest
import requests

from okta_api_client.core.response import (
    ErrorEnvelope,
    NormalizedResponse,
    ResponseStatus,
    from_records,
    header_scalar,
    normalize_headers,
    parse_api_response,
)
from tests.conftest import make_response, next_link, self_link


class TestNormalizeHeaders:
    def test_single_value_collapses_to_scalar(self):
        headers = normalize_headers({"x-rate-limit-limit": ["600"], "content-type": ["application/json"]})
        assert headers == {"x-rate-limit-limit": "600", "content-type": "application/json"}

    def test_multiple_values_keep_order(self):
        links = [self_link("https://a/1"), next_link("https://a/2")]
        headers = normalize_headers({"link": links})
        assert headers["link"] == links

    def test_each_header_is_collapsed_independently(self):
        headers = normalize_headers({
            "link": ["one", "two"],
            "x-okta-request-id": ["req-1"],
        })
        assert headers == {"link": ["one", "two"], "x-okta-request-id": "req-1"}

    def test_scalar_values_pass_through_and_names_are_lowercased(self):
        assert normalize_headers({"X-Okta-Request-Id": "abc"}) == {"x-okta-request-id": "abc"}


class TestResponseStatus:
    def test_ok(self):
        status = ResponseStatus.from_code(200)
        assert (status.ok, status.successful, status.failed, status.client_error, status.server_error) == (
            True, True, False, False, False,
        )

    def test_not_found(self):
        status = ResponseStatus.from_code(404)
        assert status.ok is False
        assert status.failed is True
        assert status.clientError is True
        assert status.serverError is False

    def test_server_error(self):
        status = ResponseStatus.from_code(500)
        assert status.ok is False
        assert status.failed is True
        assert status.serverError is True
        assert status.clientError is False

    def test_as_dict_uses_okta_field_names(self):
        assert ResponseStatus.from_code(204).as_dict() == {
            "code": 204,
            "ok": True,
            "successful": True,
            "failed": False,
            "serverError": False,
            "clientError": False,
        }


class TestParseApiResponse:
    def test_parses_json_and_multi_valued_link_header(self):
        links = [self_link("https://a/1"), next_link("https://a/2")]
        raw = make_response(200, [{"id": "00u1"}], {"link": links, "x-rate-limit-remaining": "599"})

        response = parse_api_response(raw)

        assert response.data == [{"id": "00u1"}]
        assert response.headers["link"] == links
        assert response.headers["x-rate-limit-remaining"] == "599"
        assert response.status.code == 200

    def test_empty_body_is_none(self):
        response = parse_api_response(make_response(204))
        assert response.data is None
        assert response.status.ok is True

    def test_non_json_body_is_none(self):
        raw = make_response(502)
        raw._content = b"<html>Bad Gateway</html>"
        assert parse_api_response(raw).data is None

    def test_falls_back_to_requests_headers_without_raw(self):
        raw = requests.Response()
        raw.status_code = 200
        raw._content = b'{"id": "00o1"}'
        raw.headers["X-Okta-Request-Id"] = "req-9"

        response = parse_api_response(raw)
        assert response.request_id == "req-9"
        assert response.data == {"id": "00o1"}


def test_header_scalar_returns_last_repeated_value():
    assert header_scalar({"x-rate-limit-remaining": ["10", "9"]}, "x-rate-limit-remaining") == "9"
    assert header_scalar({}, "x-rate-limit-remaining") is None


def test_error_field_only_reads_dict_bodies():
    assert NormalizedResponse(data={"errorCode": "E0000007"}).error_field("errorCode") == "E0000007"
    assert NormalizedResponse(data=[{"errorCode": "x"}]).error_field("errorCode") is None


def test_responses_are_immutable():
    response = NormalizedResponse(data=[])
    with pytest.raises(Exception):
        response.data = [1]


def test_from_records_keeps_first_page_headers_and_status():
    first = NormalizedResponse(data=[1], headers={"x-okta-request-id": "r1"}, status=ResponseStatus.from_code(200))
    aggregate = from_records([1, 2, 3], first)
    assert aggregate.data == [1, 2, 3]
    assert aggregate.headers == first.headers
    assert aggregate.status == first.status

    failed = ResponseStatus.from_code(500)
    assert from_records([1], first, status=failed).status is failed


def test_error_envelope_from_transport_exception():
    exc = requests.exceptions.ConnectTimeout("timed out")
    envelope = ErrorEnvelope.from_exception(exc, "get", "/users")

    assert envelope.message == "timed out"
    assert envelope.uri == "users"
    assert envelope.method == "get"
    assert envelope.status.failed is True
    assert envelope.status.server_error is True
    assert envelope.status.client_error is False
    assert envelope.as_dict()["error"]["uri"] == "users"
