import pytest
import requests

from mailcompose.core.config import CoreConfig
from mailcompose.core.errors import ConfigurationError, MailgunError, RecipientValidationError
from mailcompose.core.sending.mailgun import (
    EmailSendRequest,
    MailgunClient,
    client_from_config,
    delivery_status_from_events,
    parse_email_addresses,
)
from tests.helpers._fakes import FakeResponse, FakeSession

CONFIG = CoreConfig(mailgun_api_key="key-123", mailgun_domain="mg.example.com")


def _request(**overrides) -> EmailSendRequest:
    values = {"to": ["jane@example.com"], "subject": "Hello", "html": "<table></table>"}
    values.update(overrides)
    return EmailSendRequest(**values)


def test_send_email_posts_form_with_tags_and_variables() -> None:
    session = FakeSession(FakeResponse(payload={"id": "<msg-1>", "message": "Queued. Thank you."}))
    client = MailgunClient(CONFIG, session=session)

    response = client.send_email(
        _request(
            cc=["cc@example.com"],
            tags=["compose-app", "template-t1"],
            custom_variables={"sendId": "s1"},
        )
    )

    assert response.id == "<msg-1>"
    [call] = session.calls
    assert call["method"] == "POST"
    assert call["url"] == "https://api.mailgun.net/v3/mg.example.com/messages"
    assert call["auth"] == ("api", "key-123")
    form = call["data"]
    assert ("to", "jane@example.com") in form
    assert ("cc", "cc@example.com") in form
    assert ("from", "Compose <noreply@mg.example.com>") in form
    assert [value for key, value in form if key == "o:tag"] == ["compose-app", "template-t1"]
    assert ("v:sendId", "s1") in form
    assert ("o:tracking", "true") in form


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"to": []}, "At least one recipient is required"),
        ({"subject": "  "}, "Subject is required"),
        ({"html": ""}, "Email content is required"),
        ({"to": ["not-an-address"]}, "Invalid email address: not-an-address"),
        ({"bcc": ["x@y"]}, "Invalid BCC email address: x@y"),
    ],
)
def test_send_email_rejects_bad_requests_without_calling_api(overrides, message) -> None:
    session = FakeSession()
    client = MailgunClient(CONFIG, session=session)

    with pytest.raises(RecipientValidationError, match=message):
        client.send_email(_request(**overrides))
    assert session.calls == []


@pytest.mark.parametrize(
    ("status", "message"),
    [
        (401, "Invalid Mailgun API key"),
        (402, "Mailgun account payment required"),
        (404, "Mailgun domain not found"),
        (429, "Mailgun rate limit exceeded"),
        (503, "Mailgun server error"),
        (400, "Mailgun API error: 400 - 'to' parameter is missing"),
    ],
)
def test_send_email_maps_http_errors(status: int, message: str) -> None:
    session = FakeSession(FakeResponse(status, {"message": "'to' parameter is missing"}, reason="Bad"))
    client = MailgunClient(CONFIG, session=session)

    with pytest.raises(MailgunError) as excinfo:
        client.send_email(_request())

    assert str(excinfo.value) == message
    assert excinfo.value.status_code == status


def test_send_email_wraps_transport_errors() -> None:
    class BrokenSession(FakeSession):
        def post(self, url, **kwargs):
            raise requests.ConnectionError("connection refused")

    client = MailgunClient(CONFIG, session=BrokenSession())

    with pytest.raises(MailgunError, match="connection refused"):
        client.send_email(_request())


def test_get_delivery_status_reads_events() -> None:
    items = [
        {"event": "accepted", "timestamp": 1.0, "recipient": "jane@example.com"},
        {"event": "delivered", "timestamp": 2.0, "recipient": "jane@example.com"},
    ]
    session = FakeSession(FakeResponse(payload={"items": items}))
    client = MailgunClient(CONFIG, session=session)

    status = client.get_delivery_status("<msg-1>")

    assert status["status"] == "sent"
    assert [e["event"] for e in status["events"]] == ["accepted", "delivered"]
    assert session.calls[0]["params"] == {"message-id": "<msg-1>"}


@pytest.mark.parametrize(
    ("events", "expected"),
    [
        ([], "pending"),
        (["accepted"], "sent"),
        (["accepted", "failed"], "failed"),
        (["rejected"], "failed"),
        (["failed", "delivered"], "sent"),
        (["opened"], "pending"),
    ],
)
def test_delivery_status_from_events(events, expected) -> None:
    assert delivery_status_from_events([{"event": name} for name in events]) == expected


def test_validate_address_never_raises() -> None:
    client = MailgunClient(CONFIG, session=FakeSession(FakeResponse(payload=ValueError("bad json"))))

    assert client.validate_address("jane@example.com") == {
        "is_valid": False,
        "reason": "Validation failed",
        "suggestion": None,
    }


def test_validate_address_reports_service_result() -> None:
    payload = {"is_valid": False, "reason": "mailbox_does_not_exist", "did_you_mean": "jane@gmail.com"}
    client = MailgunClient(CONFIG, session=FakeSession(FakeResponse(payload=payload)))

    result = client.validate_address("jane@gmial.com")

    assert result == {"is_valid": False, "reason": "mailbox_does_not_exist", "suggestion": "jane@gmail.com"}


def test_get_stats_totals_and_failure_fallback() -> None:
    payload = {"stats": [{"accepted": {"total": 10}, "delivered": {"total": 9}, "opened": {"total": 4}}]}
    client = MailgunClient(CONFIG, session=FakeSession(FakeResponse(payload=payload), FakeResponse(500)))

    assert client.get_stats() == {"sent": 10, "delivered": 9, "failed": 0, "opened": 4, "clicked": 0}
    assert client.get_stats() == {"sent": 0, "delivered": 0, "failed": 0, "opened": 0, "clicked": 0}


def test_client_from_config_requires_key_and_domain() -> None:
    with pytest.raises(ConfigurationError, match="MAILGUN_API_KEY"):
        client_from_config(CoreConfig(mailgun_domain="mg.example.com"))
    with pytest.raises(ConfigurationError, match="MAILGUN_DOMAIN"):
        client_from_config(CoreConfig(mailgun_api_key="key"))
    assert isinstance(client_from_config(CONFIG, session=FakeSession()), MailgunClient)


def test_parse_email_addresses() -> None:
    assert parse_email_addresses("a@example.com; bad, b@example.org ,") == ["a@example.com", "b@example.org"]


@pytest.mark.parametrize("payload", [["bad"], "oops", ValueError("not json")])
def test_send_email_error_body_that_is_not_an_object_falls_back_to_reason(payload) -> None:
    client = MailgunClient(CONFIG, session=FakeSession(FakeResponse(400, payload, reason="Bad Request")))

    with pytest.raises(MailgunError) as excinfo:
        client.send_email(_request())

    assert str(excinfo.value) == "Mailgun API error: 400 - Bad Request"


@pytest.mark.parametrize("payload", [ValueError("not json"), ["queued"]])
def test_send_email_rejects_unreadable_success_body(payload) -> None:
    client = MailgunClient(CONFIG, session=FakeSession(FakeResponse(200, payload)))

    with pytest.raises(MailgunError, match="Invalid Mailgun response"):
        client.send_email(_request())


@pytest.mark.parametrize("payload", [ValueError("not json"), ["delivered"], {"items": "delivered"}])
def test_get_delivery_status_rejects_unreadable_body(payload) -> None:
    client = MailgunClient(CONFIG, session=FakeSession(FakeResponse(200, payload)))

    with pytest.raises(MailgunError, match="Invalid Mailgun response"):
        client.get_delivery_status("<msg-1>")


def test_validate_address_and_stats_tolerate_non_object_bodies() -> None:
    client = MailgunClient(CONFIG, session=FakeSession(FakeResponse(payload=["x"]), FakeResponse(payload={"stats": ["x"]})))

    assert client.validate_address("jane@example.com")["reason"] == "Validation failed"
    assert client.get_stats() == {"sent": 0, "delivered": 0, "failed": 0, "opened": 0, "clicked": 0}
