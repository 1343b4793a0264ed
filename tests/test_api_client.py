import pytest
import requests

from jsmon import api_client
from jsmon.api_client import AUTH_HEADER, ApiContext, JsmonClient


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    """按顺序返回预设响应并记录请求"""

    def __init__(self, responses):
        self.headers = {}
        self.responses = list(responses)
        self.requests = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(api_client.time, "sleep", lambda seconds: None)


def make_client(*responses, max_retries=2):
    context = ApiContext(api_key="key-1", base_url="https://jsmon.example.test/api", max_retries=max_retries)
    session = FakeSession(responses)
    return JsmonClient(context, session=session), session


def test_context_from_config() -> None:
    context = ApiContext.from_config("k", {"base_url": "https://x.test/api/", "timeout": 3.0})
    assert context.api_key == "k"
    assert context.base_url == "https://x.test/api"
    assert context.timeout == 3.0
    assert context.max_retries == 2


def test_auth_header_is_sent() -> None:
    client, session = make_client(FakeResponse(payload={"ok": True}))
    assert session.headers[AUTH_HEADER] == "key-1"
    assert client.get_usage() == {"ok": True}
    method, url, kwargs = session.requests[0]
    assert (method, url) == ("GET", "https://jsmon.example.test/api/usage")
    assert kwargs["timeout"] == 30.0


def test_path_parameters_are_quoted() -> None:
    client, session = make_client(FakeResponse(payload={}))
    client.get_result_by_file_id("a/b c")
    assert session.requests[0][1] == "https://jsmon.example.test/api/getResultByFileId/a%2Fb%20c"


def test_domain_list_payload() -> None:
    client, session = make_client(FakeResponse(payload=[]))
    client.get_emails(["a.com", "b.com"])
    method, url, kwargs = session.requests[0]
    assert method == "POST"
    assert url.endswith("/getAllEmails")
    assert kwargs["json"] == {"domains": ["a.com", "b.com"]}


def test_upload_url_passes_headers() -> None:
    client, session = make_client(FakeResponse(payload={}))
    client.upload_url("https://x.test/app.js", ["A: 1", "B: 2"])
    assert session.requests[0][2]["json"] == {"url": "https://x.test/app.js", "customHeaders": ["A: 1", "B: 2"]}


def test_upload_missing_file_returns_none(tmp_path) -> None:
    client, session = make_client()
    assert client.upload_file(str(tmp_path / "missing.js")) is None
    assert session.requests == []


def test_upload_file_sends_multipart(tmp_path) -> None:
    path = tmp_path / "app.js"
    path.write_text("var a = 1;", encoding="utf-8")
    client, session = make_client(FakeResponse(payload={"fileId": "f1"}))

    assert client.upload_file(str(path), ["A: 1"]) == {"fileId": "f1"}
    kwargs = session.requests[0][2]
    assert kwargs["files"]["file"][0] == "app.js"
    assert kwargs["data"] == {"headers": ["A: 1"]}


def test_reverse_search_params() -> None:
    client, session = make_client(FakeResponse(payload=[]))
    client.reverse_search_results(("domain", "a=b"))
    assert session.requests[0][2]["params"] == {"field": "domain", "value": "a=b"}


def test_automation_data_params() -> None:
    client, session = make_client(FakeResponse(payload=[]))
    client.get_automation_data("example.com", 50)
    assert session.requests[0][2]["params"] == {"domain": "example.com", "size": 50}


def test_retries_on_server_error_then_succeeds() -> None:
    client, session = make_client(FakeResponse(503, text="busy"), FakeResponse(429), FakeResponse(payload={"ok": 1}))
    assert client.get_domains() == {"ok": 1}
    assert len(session.requests) == 3


def test_retries_on_connection_error() -> None:
    client, session = make_client(requests.exceptions.ConnectionError("down"), FakeResponse(payload={"ok": 1}))
    assert client.view_files() == {"ok": 1}
    assert len(session.requests) == 2


def test_gives_up_after_max_retries() -> None:
    client, session = make_client(*[FakeResponse(500)] * 2, max_retries=1)
    assert client.changed_urls() is None
    assert len(session.requests) == 2


def test_client_error_not_retried() -> None:
    client, session = make_client(FakeResponse(401, text="unauthorized"))
    assert client.get_scanner_data() is None
    assert len(session.requests) == 1


def test_non_json_body_returned_as_text() -> None:
    client, _ = make_client(FakeResponse(text="queued"))
    assert client.scan_file("f1") == "queued"


@pytest.mark.parametrize("settings, method, path, payload", [
    (("start", "slack", 3600, "URLs"), "POST", "/startCron",
     {"notificationChannel": "slack", "time": 3600, "type": "URLs"}),
    (("update", "", 60, ""), "PUT", "/updateCron", {"time": 60}),
    (("stop", "slack", 0, ""), "POST", "/stopCron", None),
])
def test_cron_modes(settings, method, path, payload) -> None:
    client, session = make_client(FakeResponse(payload={}))
    client.cron(settings)
    sent_method, url, kwargs = session.requests[0]
    assert sent_method == method
    assert url.endswith(path)
    assert kwargs["json"] == payload


def test_close_closes_session() -> None:
    client, session = make_client()
    client.close()
    assert session.closed


def test_upload_unreadable_file_returns_none(monkeypatch, tmp_path) -> None:
    path = tmp_path / "app.js"
    path.write_text("var a = 1;", encoding="utf-8")

    def denied(*args, **kwargs):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(api_client, "open", denied, raising=False)
    client, session = make_client()

    assert client.upload_file(str(path)) is None
    assert session.requests == []
