import json
from unittest.mock import Mock, PropertyMock
import pytest
import requests

from services.approval_sender import ApprovalSender
from services.schemas.inspector import DecisionRecord, Verdict


def _make_response(status_code=200, body=b'{"status":"ok"}'):
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = body
    resp._content_consumed = True
    return resp


@pytest.fixture
def session():
    s = Mock()
    s.send.return_value = _make_response()
    return s


@pytest.fixture
def sender(session):
    return ApprovalSender("recipient:8000", timeout=5.0, session=session)


@pytest.mark.parametrize("verdict, body", [
    (Verdict.REJECT, b'{"id":42,"approve":-1}'),
    (Verdict.APPROVE, b'{"id":42,"approve":1}'),
])
def test_send_posts_decision(sender, session, verdict, body):
    result = sender.send(DecisionRecord(id=42, approve=verdict))

    assert result == '{"status":"ok"}'
    session.send.assert_called_once()
    prepared = session.send.call_args[0][0]
    assert prepared.method == "POST"
    assert prepared.url == "http://recipient:8000/approval/"
    assert prepared.body == body
    assert json.loads(prepared.body) == {"id": 42, "approve": int(verdict)}
    assert prepared.headers["Content-Type"] == "application/json"
    assert session.send.call_args.kwargs["timeout"] == 5.0
    assert session.send.call_args.kwargs["stream"] is True


def test_error_status_body_is_still_logged_and_returned(sender, session):
    session.send.return_value = _make_response(500, b"internal error")
    assert sender.send(DecisionRecord(id=1, approve=Verdict.APPROVE)) == "internal error"


def test_send_failure_skips_body_read(sender, session):
    session.send.side_effect = requests.ConnectionError("refused")

    assert sender.send(DecisionRecord(id=1, approve=Verdict.APPROVE)) is None
    session.send.assert_called_once()


def test_body_read_failure_is_logged_and_response_closed(sender, session):
    resp = Mock()
    type(resp).content = PropertyMock(side_effect=requests.exceptions.ChunkedEncodingError("cut"))
    session.send.return_value = resp

    assert sender.send(DecisionRecord(id=1, approve=Verdict.REJECT)) is None
    resp.close.assert_called_once()


def test_request_construction_failure_does_not_send(session):
    sender = ApprovalSender("recipient:8000", session=session)
    sender.url = "http://"

    assert sender.send(DecisionRecord(id=1, approve=Verdict.APPROVE)) is None
    session.send.assert_not_called()


def test_default_timeout_is_unbounded(session):
    sender = ApprovalSender("recipient:8000", session=session)
    sender.send(DecisionRecord(id=1, approve=Verdict.APPROVE))
    assert session.send.call_args.kwargs["timeout"] is None


def test_close_closes_session(sender, session):
    sender.close()
    session.close.assert_called_once()
