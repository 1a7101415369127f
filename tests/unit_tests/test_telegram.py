"""Unit tests for the Telegram client with a mocked requests session."""
from unittest.mock import MagicMock

import pytest
import requests

from telefile_api.errors import ForwardFailed
from telefile_api.telegram import TelegramClient

from tests.consts import TEST_BOT_TOKEN, TEST_CHANNEL_ID


def make_response(status_code=200, payload=None, text=""):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def telegram(session):
    return TelegramClient(api_base="https://telegram.test/", timeout=5, session=session)


def test_send_document_posts_multipart(telegram, session):
    session.post.return_value = make_response(payload={
        "ok": True,
        "result": {"document": {"file_id": "BQACAgQ", "file_name": "a.txt"}},
    })

    ref = telegram.send_document(TEST_BOT_TOKEN, "a.txt", b"hello", "text/plain", chat_id=TEST_CHANNEL_ID)

    assert ref.external_file_id == "BQACAgQ"
    assert ref.external_file_name == "a.txt"
    args, kwargs = session.post.call_args
    assert args[0] == f"https://telegram.test/bot{TEST_BOT_TOKEN}/sendDocument"
    assert kwargs["data"] == {"chat_id": TEST_CHANNEL_ID}
    assert kwargs["files"] == {"document": ("a.txt", b"hello", "text/plain")}
    assert kwargs["timeout"] == 5


def test_send_document_without_channel_omits_chat_id(telegram, session):
    session.post.return_value = make_response(payload={"ok": True, "result": {"document": {"file_id": "x"}}})

    ref = telegram.send_document(TEST_BOT_TOKEN, "a.txt", b"hello")

    assert ref.external_file_name is None
    assert session.post.call_args.kwargs["data"] == {}


def test_non_success_status_raises(telegram, session):
    session.post.return_value = make_response(status_code=401, text='{"ok":false,"description":"Unauthorized"}')

    with pytest.raises(ForwardFailed) as exc_info:
        telegram.send_document(TEST_BOT_TOKEN, "a.txt", b"hello")
    assert exc_info.value.upstream_status == 401
    assert "Unauthorized" in exc_info.value.message


@pytest.mark.parametrize(
    "payload",
    [
        ValueError("not json"),
        ["ok"],
        {"ok": False},
        {"ok": True},
        {"ok": True, "result": {"message_id": 1}},
        {"ok": True, "result": {"document": {"file_name": "a.txt"}}},
    ],
)
def test_malformed_response_raises(telegram, session, payload):
    session.post.return_value = make_response(payload=payload)

    with pytest.raises(ForwardFailed) as exc_info:
        telegram.send_document(TEST_BOT_TOKEN, "a.txt", b"hello")
    assert "Malformed" in exc_info.value.message


def test_network_error_does_not_leak_token(telegram, session):
    session.post.side_effect = requests.ConnectionError(
        f"Max retries exceeded with url: /bot{TEST_BOT_TOKEN}/sendDocument"
    )

    with pytest.raises(ForwardFailed) as exc_info:
        telegram.send_document(TEST_BOT_TOKEN, "a.txt", b"hello")
    assert TEST_BOT_TOKEN not in str(exc_info.value)
    assert "ConnectionError" in str(exc_info.value)
