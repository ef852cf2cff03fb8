from mailcompose.core.validate import validate_html
from mailcompose.server.logging import validation_result_to_loggable
from tests.helpers._html_builders import build_email


def _sample_result():
    # One error (script) and two warnings (form, div without role).
    return validate_html(build_email("<script></script><form></form><div>x</div>"))


def test_low_verbosity_keeps_counts_only() -> None:
    loggable = validation_result_to_loggable(_sample_result(), verbosity="low")

    assert loggable == {"is_valid": False, "score": 75, "error_count": 1, "warning_count": 2}


def test_medium_verbosity_adds_error_messages() -> None:
    loggable = validation_result_to_loggable(_sample_result(), verbosity="medium")

    assert loggable["errors"] == ["JavaScript is not supported in email clients"]
    assert "warnings" not in loggable


def test_high_verbosity_adds_warning_messages() -> None:
    loggable = validation_result_to_loggable(_sample_result(), verbosity="high")

    assert loggable["warnings"] == [
        "Forms have limited support in email clients",
        "Consider using semantic HTML or ARIA roles",
    ]


def test_extrahigh_verbosity_is_full_result() -> None:
    result = _sample_result()

    assert validation_result_to_loggable(result, verbosity="extrahigh") == result.to_dict()


def test_unknown_verbosity_falls_back_to_medium() -> None:
    loggable = validation_result_to_loggable(_sample_result(), verbosity="chatty")

    assert "errors" in loggable
    assert "warnings" not in loggable


def test_long_messages_are_truncated() -> None:
    from mailcompose.core.validate import ValidationError, ValidationResult

    long_message = "x" * 500
    result = ValidationResult(
        is_valid=False,
        errors=[ValidationError(type="error", category="css", message=long_message)],
        warnings=[],
        score=85,
    )

    [message] = validation_result_to_loggable(result, verbosity="medium")["errors"]

    assert message == "x" * 160 + "... [truncated]"
