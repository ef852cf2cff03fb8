import pytest

from mailcompose.core.errors import (
    ConfigurationError,
    InvalidSendRequest,
    RecipientValidationError,
    SendFailedError,
    TemplateNotFoundError,
    TemplateValidationFailed,
)
from mailcompose.core.config import CoreConfig
from mailcompose.core.sending import MailgunClient, apply_customizations, send_template
from mailcompose.core.storage import EmailRecipients
from tests.helpers._fakes import FakeMailgun, FakeResponse, FakeSession
from tests.helpers._html_builders import build_email

RECIPIENTS = EmailRecipients(to=["jane@example.com"], cc=["boss@example.com"])


def _template(store, html: str | None = None):
    return store.create_template(
        "user-1",
        name="Welcome",
        subject="Hi",
        html=html or build_email('<p style="font-family: Arial;">Hello {{first_name}}, welcome to {{company}}</p>'),
    )


def test_send_marks_record_sent_and_tags_message(store) -> None:
    template = _template(store)
    mailgun = FakeMailgun()

    outcome = send_template(
        store,
        lambda: mailgun,
        user_id="user-1",
        template_id=template.id,
        recipients=RECIPIENTS,
        subject="  Welcome aboard  ",
        customizations={"first_name": "Jane", "company": "Acme"},
    )

    [request] = mailgun.sent
    assert "Hello Jane, welcome to Acme" in request.html
    assert request.subject == "Welcome aboard"
    assert request.cc == ["boss@example.com"]
    assert request.tags == ["compose-app", f"template-{template.id}", f"send-{outcome.send_id}"]
    assert request.custom_variables == {"sendId": outcome.send_id, "templateId": template.id, "userId": "user-1"}

    record = store.get_send(outcome.send_id, "user-1")
    assert record.status == "sent"
    assert record.mailgun_message_id == mailgun.message_id
    assert record.subject == "Welcome aboard"


def test_send_is_blocked_by_validation_errors(store) -> None:
    template = _template(store, html=build_email("<script>track()</script><form></form>"))
    mailgun = FakeMailgun()

    with pytest.raises(TemplateValidationFailed) as excinfo:
        send_template(
            store,
            lambda: mailgun,
            user_id="user-1",
            template_id=template.id,
            recipients=RECIPIENTS,
            subject="Hi",
        )

    assert excinfo.value.validation_errors == ["JavaScript is not supported in email clients"]
    assert mailgun.sent == []
    assert store.list_sends("user-1") == []


def test_warnings_alone_do_not_block_send(store) -> None:
    template = _template(store, html=build_email('<img src="x.png"><div>hi</div>'))

    outcome = send_template(
        store,
        FakeMailgun,
        user_id="user-1",
        template_id=template.id,
        recipients=RECIPIENTS,
        subject="Hi",
    )

    assert store.get_send(outcome.send_id, "user-1").status == "sent"


def test_mailgun_failure_marks_record_failed(store) -> None:
    template = _template(store)

    with pytest.raises(SendFailedError) as excinfo:
        send_template(
            store,
            lambda: FakeMailgun(fail_with="Invalid Mailgun API key"),
            user_id="user-1",
            template_id=template.id,
            recipients=RECIPIENTS,
            subject="Hi",
        )

    record = store.get_send(excinfo.value.send_id, "user-1")
    assert record.status == "failed"
    assert record.error_message == "Invalid Mailgun API key"


def test_missing_configuration_marks_record_failed(store) -> None:
    template = _template(store)

    def unconfigured():
        raise ConfigurationError("MAILGUN_API_KEY environment variable is required")

    with pytest.raises(SendFailedError, match="MAILGUN_API_KEY"):
        send_template(
            store,
            unconfigured,
            user_id="user-1",
            template_id=template.id,
            recipients=RECIPIENTS,
            subject="Hi",
        )
    assert [s.status for s in store.list_sends("user-1")] == ["failed"]


def test_unknown_or_foreign_template_is_not_found(store) -> None:
    template = _template(store)

    with pytest.raises(TemplateNotFoundError):
        send_template(
            store,
            FakeMailgun,
            user_id="intruder",
            template_id=template.id,
            recipients=RECIPIENTS,
            subject="Hi",
        )


@pytest.mark.parametrize(
    ("template_id", "recipients", "subject", "error"),
    [
        ("", RECIPIENTS, "Hi", InvalidSendRequest),
        ("t", None, "Hi", InvalidSendRequest),
        ("t", RECIPIENTS, " ", InvalidSendRequest),
        ("t", EmailRecipients(to=[]), "Hi", RecipientValidationError),
    ],
)
def test_request_shape_is_checked_first(store, template_id, recipients, subject, error) -> None:
    with pytest.raises(error):
        send_template(
            store,
            FakeMailgun,
            user_id="user-1",
            template_id=template_id,
            recipients=recipients,
            subject=subject,
        )


def test_apply_customizations_replaces_every_occurrence() -> None:
    html = "{{name}} / {{name}} / {{other}} / {{ name }}"

    assert apply_customizations(html, {"name": "Jo"}) == "Jo / Jo / {{other}} / {{ name }}"
    assert apply_customizations(html, None) == html


def test_apply_customizations_treats_keys_literally() -> None:
    assert apply_customizations("{{a.b}} {{axb}}", {"a.b": "1"}) == "1 {{axb}}"


def test_invalid_addresses_are_rejected_before_recording(store) -> None:
    template = _template(store)

    with pytest.raises(RecipientValidationError) as excinfo:
        send_template(
            store,
            FakeMailgun,
            user_id="user-1",
            template_id=template.id,
            recipients=EmailRecipients(to=["jane@example.com", "oops"], bcc=["x@y"]),
            subject="Hi",
        )

    assert excinfo.value.errors == ["Invalid email address: oops", "Invalid BCC email address: x@y"]
    assert store.list_sends("user-1") == []


@pytest.mark.parametrize("payload", [ValueError("not json"), ["queued"]])
def test_unreadable_mailgun_reply_marks_record_failed(store, payload) -> None:
    template = _template(store)
    config = CoreConfig(mailgun_api_key="key-test", mailgun_domain="mg.example.com")
    session = FakeSession(FakeResponse(200, payload))

    with pytest.raises(SendFailedError) as excinfo:
        send_template(
            store,
            lambda: MailgunClient(config, session=session),
            user_id="user-1",
            template_id=template.id,
            recipients=RECIPIENTS,
            subject="Hi",
        )

    record = store.get_send(excinfo.value.send_id, "user-1")
    assert record.status == "failed"
    assert record.error_message == "Invalid Mailgun response"


def test_mailgun_error_body_that_is_not_an_object_marks_record_failed(store) -> None:
    template = _template(store)
    config = CoreConfig(mailgun_api_key="key-test", mailgun_domain="mg.example.com")
    session = FakeSession(FakeResponse(400, ["bad"], reason="Bad Request"))

    with pytest.raises(SendFailedError):
        send_template(
            store,
            lambda: MailgunClient(config, session=session),
            user_id="user-1",
            template_id=template.id,
            recipients=RECIPIENTS,
            subject="Hi",
        )

    assert [s.status for s in store.list_sends("user-1")] == ["failed"]
