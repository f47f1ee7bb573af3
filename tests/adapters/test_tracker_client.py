"""Tests for the tracker API client and adapter."""

import base64
import json

import pytest
import requests
from unittest.mock import MagicMock, Mock

from patchtracker.adapters.tracker import TrackerAdapter, TrackerApiClient
from patchtracker.core.domain import PatchStatusRecord, RecordedSet, encode_patch
from patchtracker.core.exceptions import (
    AuthenticationError,
    FatalUsageError,
    NotFoundError,
    PermissionDeniedError,
    TransportError,
)
from patchtracker.core.ports.config_provider import TrackerConfig


BASE = "http://tracker.example.com:9292"
HASH_A = "a" * 40


def make_response(status=200, json_data=None, text=None):
    response = Mock()
    response.status_code = status
    response.ok = status < 400
    response.url = BASE
    if text is None:
        text = json.dumps(json_data) if json_data is not None else ""
    response.text = text
    response.content = text.encode("utf-8")
    if json_data is None and text and text != "null":
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def session():
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    session.request.return_value = make_response(json_data={})
    return session


@pytest.fixture
def client(session):
    return TrackerApiClient(BASE + "/", "jane@example.com", "secret", session=session)


def sent(session):
    """(method, url, kwargs) of the last request."""
    call = session.request.call_args
    return call.args[0], call.args[1], call.kwargs


class TestRequests:
    """Tests for authentication and error handling."""

    def test_base_url_trailing_slash(self, client):
        assert client.base_url == BASE
        assert client.url_for("set/1") == f"{BASE}/set/1"

    def test_absolute_urls_pass_through(self, client):
        assert client.url_for("https://other/patch/x") == "https://other/patch/x"

    def test_basic_auth_header(self, client):
        prepared = requests.Request("GET", BASE, auth=client.auth).prepare()

        expected = base64.b64encode(b"jane@example.com:secret").decode()
        assert prepared.headers["Authorization"] == f"Basic {expected}"

    def test_authenticated_by_default(self, client, session):
        client.get("set/1")

        _, _, kwargs = sent(session)
        assert kwargs["auth"] == ("jane@example.com", "secret")

    def test_accepts_json(self, client, session):
        assert session.headers["Accept"] == "application/json"

    @pytest.mark.parametrize("status,error", [
        (401, AuthenticationError),
        (403, PermissionDeniedError),
        (404, NotFoundError),
        (500, TransportError),
    ])
    def test_error_status(self, client, session, status, error):
        session.request.return_value = make_response(status=status, text="boom")

        with pytest.raises(error) as exc_info:
            client.get("set/1")

        assert exc_info.value.status_code == status
        assert exc_info.value.body == "boom"

    def test_connection_error(self, client, session):
        session.request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(TransportError) as exc_info:
            client.get("set/1")

        assert "Connection failed" in str(exc_info.value)
        assert exc_info.value.status_code is None

    def test_no_retry(self, client, session):
        session.request.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(TransportError):
            client.get("set/1")

        assert session.request.call_count == 1

    def test_invalid_json(self, client, session):
        session.request.return_value = make_response(text="<html>")

        with pytest.raises(TransportError):
            client.fetch_set("1")


class TestSetResources:
    """Tests for patch-set endpoints."""

    def test_create_set(self, client, session):
        session.request.return_value = make_response(json_data={"id": 5, "revision": 1})
        payload = [{"hashes": {"commit": HASH_A}}, {HASH_A: {"msg": "x", "full_message": "x"}}]

        data = client.create_set(payload)

        method, url, kwargs = sent(session)
        assert (method, url) == ("POST", f"{BASE}/set")
        assert kwargs["json"] == payload
        assert kwargs["headers"] == {"X-Obsoletes": "no"}
        assert data == {"id": 5, "revision": 1}

    def test_create_set_obsoleting(self, client, session):
        client.create_set([{}], obsoletes="4")

        _, _, kwargs = sent(session)
        assert kwargs["headers"] == {"X-Obsoletes": "4"}

    def test_fetch_set(self, client, session):
        session.request.return_value = make_response(json_data={"patches": [HASH_A]})

        assert client.fetch_set("9") == {"patches": [HASH_A]}
        assert sent(session)[:2] == ("GET", f"{BASE}/set/9")

    def test_list_sets_is_unauthenticated(self, client, session):
        session.request.return_value = make_response(json_data=[])

        client.list_sets()

        method, url, kwargs = sent(session)
        assert (method, url) == ("GET", f"{BASE}/set")
        assert "auth" not in kwargs
        assert kwargs["params"] is None

    def test_list_sets_status_filter(self, client, session):
        session.request.return_value = make_response(json_data=[])

        client.list_sets("nack")

        assert sent(session)[2]["params"] == {"filter": "status", "filter_value": "nack"}

    def test_list_sets_named_filter(self, client, session):
        session.request.return_value = make_response(json_data=[])

        client.list_sets("jane@example.com", "author")

        assert sent(session)[2]["params"] == {"filter": "author", "filter_value": "jane@example.com"}

    def test_list_sets_rejects_unnamed_filter(self, client, session):
        with pytest.raises(FatalUsageError):
            client.list_sets("jane@example.com")

        session.request.assert_not_called()

    def test_mark_obsolete(self, client, session):
        client.mark_obsolete("3")

        assert sent(session)[:2] == ("POST", f"{BASE}/patchset/3/obsolete")

    def test_act_on_set(self, client, session):
        client.act_on_set("42", "nack", "needs work")

        method, url, kwargs = sent(session)
        assert (method, url) == ("POST", f"{BASE}/set/42/nack")
        assert kwargs["json"] == {"message": "needs work"}


class TestPatchResources:
    """Tests for single patch endpoints."""

    def test_upload_patch_body(self, client, session):
        client.upload_patch_body(HASH_A, "diff text\n")

        method, url, kwargs = sent(session)
        assert (method, url) == ("POST", f"{BASE}/patch/{HASH_A}/body")
        filename, content, content_type = kwargs["files"]["diff"]
        assert filename == f"{HASH_A}.patch"
        assert content == b"diff text\n"
        assert kwargs["auth"] == ("jane@example.com", "secret")

    def test_upload_keeps_original_bytes(self, client, session):
        body = "+echo hi\r\n+/* caf\udce9 */\n"

        client.upload_patch_body(HASH_A, body)

        _, content, _ = sent(session)[2]["files"]["diff"]
        assert content == b"+echo hi\r\n+/* caf\xe9 */\n"

    def test_download_patch_body(self, client, session):
        session.request.return_value = make_response(text="From aaaa\n")

        assert client.download_patch_body(HASH_A) == "From aaaa\n"
        assert sent(session)[1] == f"{BASE}/patch/{HASH_A}/download"

    def test_download_keeps_original_bytes(self, client, session):
        response = make_response(text="")
        response.content = b"+echo hi\r\n+/* caf\xe9 */\n"
        session.request.return_value = response

        body = client.download_patch_body(HASH_A)

        assert body.startswith("+echo hi\r\n")
        assert encode_patch(body) == response.content

    def test_fetch_patch_status(self, client, session):
        record = {"commit": HASH_A, "status": "ack", "revision": 2, "message": "Fix"}
        session.request.return_value = make_response(json_data=record)

        assert client.fetch_patch_status(HASH_A) == record

    def test_fetch_patch_status_null(self, client, session):
        session.request.return_value = make_response(text="null")

        with pytest.raises(NotFoundError):
            client.fetch_patch_status(HASH_A)

    def test_post_action_on_tracking_url(self, client, session):
        url = f"http://elsewhere:9292/patch/{HASH_A}"

        client.post_action(url, "push", None)

        assert sent(session)[:2] == ("POST", f"{url}/push")

    def test_post_action_rejects_unknown_action(self, client, session):
        with pytest.raises(FatalUsageError):
            client.post_action(f"{BASE}/patch/{HASH_A}", "merge")

        session.request.assert_not_called()


class TestTrackerAdapter:
    """Tests for TrackerAdapter."""

    @pytest.fixture
    def api(self):
        return Mock(spec=TrackerApiClient, base_url=BASE)

    @pytest.fixture
    def adapter(self, api):
        return TrackerAdapter(TrackerConfig(url=BASE), client=api)

    def test_create_set(self, adapter, api):
        api.create_set.return_value = {"id": 12, "revision": 3}

        assert adapter.create_set([{}], obsoletes="11") == RecordedSet(id="12", revision="3")
        api.create_set.assert_called_once_with([{}], obsoletes="11")

    def test_create_set_without_id(self, adapter, api):
        api.create_set.return_value = {}

        with pytest.raises(TransportError):
            adapter.create_set([{}])

    def test_fetch_set(self, adapter, api):
        api.fetch_set.return_value = {"patches": [HASH_A], "status": "new"}

        patch_set = adapter.fetch_set("8")

        assert patch_set.id == "8"
        assert patch_set.patches == [HASH_A]

    def test_fetch_patch_status(self, adapter, api):
        api.fetch_patch_status.return_value = {"status": "nack", "revision": 1, "message": "Fix"}

        record = adapter.fetch_patch_status(HASH_A)

        assert record == PatchStatusRecord(commit=HASH_A, status="nack", revision="1", message="Fix")

    def test_list_sets(self, adapter, api):
        api.list_sets.return_value = [{"id": 1, "status": "new", "num_of_patches": 2}]

        sets = adapter.list_sets("new")

        assert sets[0].id == "1"
        api.list_sets.assert_called_once_with("new", None)

    def test_act_on_patch(self, adapter, api):
        adapter.act_on_patch("http://t/patch/x", "ack", "lgtm")

        api.post_action.assert_called_once_with("http://t/patch/x", "ack", "lgtm")

    def test_base_url(self, adapter):
        assert adapter.base_url == BASE
