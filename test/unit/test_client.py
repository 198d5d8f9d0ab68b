from unittest.mock import MagicMock

import pytest
import requests

from solbolt.config import CompilerSettings
from solbolt.remote.client import RemoteServiceClient
from solbolt.utils.exceptions import ServiceError


def response(status_code=200, body=None, reason="OK"):
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = reason
    resp.url = "http://service.test/x"
    if body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(http):
    return RemoteServiceClient("http://service.test/", timeout=5, session=http)


def test_submit_compile_posts_source_and_settings(client, http):
    http.request.return_value = response(body={"task_id": "abc"})
    settings = CompilerSettings(optimize_runs=1)

    assert client.submit_compile("contract C {}", settings) == "abc"
    http.request.assert_called_once_with(
        "POST",
        "http://service.test/compile/",
        json={"content": "contract C {}", "settings": settings.to_dict()},
        timeout=5,
    )


def test_submit_symexec_includes_contract(client, http):
    http.request.return_value = response(body={"taskId": 7})
    assert client.submit_symexec("src", {"contracts": {}}, contract="C") == "7"
    payload = http.request.call_args.kwargs["json"]
    assert payload["contract"] == "C"
    assert payload["compiled"] == {"contracts": {}}
    assert payload["settings"]["strategy"] == "bfs"


def test_missing_task_id(client, http):
    http.request.return_value = response(body={})
    with pytest.raises(ServiceError):
        client.submit_compile("src")


def test_status_answers(client, http):
    http.request.return_value = response(body={"task_status": "SUCCESS", "task_result": {"success": True}})
    answer = client.compile_status("abc")
    assert answer.is_success and not answer.is_pending
    assert answer.result == {"success": True}
    assert http.request.call_args.args == ("GET", "http://service.test/compile/status/abc")

    http.request.return_value = response(body={"task_status": "PENDING"})
    assert client.symexec_status("abc").is_pending


def test_status_not_found(client, http):
    http.request.return_value = response(404, reason="Not Found")
    answer = client.symexec_status("gone")
    assert answer.not_found
    assert not answer.is_pending


def test_http_error_uses_first_line_of_message(client, http):
    http.request.return_value = response(500, body={"status": "solc crashed\ntraceback..."})
    with pytest.raises(ServiceError) as excinfo:
        client.submit_compile("src")
    assert excinfo.value.message == "HTTP 500: solc crashed"
    assert excinfo.value.status_code == 500


def test_connection_error(client, http):
    http.request.side_effect = requests.exceptions.ConnectionError("refused")
    with pytest.raises(ServiceError) as excinfo:
        client.compile_status("abc")
    assert "Connection failed" in excinfo.value.message


def test_timeout(client, http):
    http.request.side_effect = requests.exceptions.Timeout()
    with pytest.raises(ServiceError) as excinfo:
        client.compile_status("abc")
    assert "timed out after 5s" in excinfo.value.message
