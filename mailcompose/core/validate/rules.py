"""Email-client compatibility rules.

Every rule is a substring/regex heuristic over the raw HTML text. Nothing here
parses the DOM, so a denylisted token inside unrelated text (an attribute
value, a comment) is still reported.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from ..constraints import MAX_WIDTH, WEB_SAFE_FONTS
from .report import ValidationError

Rule = Callable[[str], list[ValidationError]]

_WIDTH_RE = re.compile(r"""width\s*[=:]\s*["']?([0-9]+)(?:px)?["']?""", re.IGNORECASE)
_FONT_FAMILY_RE = re.compile(r"font-family\s*:\s*([^;]+)", re.IGNORECASE)
_IMG_RE = re.compile(r"<img[^>]*>", re.IGNORECASE)

_LAYOUT_SUGGESTION = "Use table-based layout and inline styles for better compatibility"

UNSUPPORTED_CSS: tuple[tuple[str, str], ...] = (
    ("position: fixed", "Fixed positioning is not supported"),
    ("position: absolute", "Absolute positioning has limited support"),
    ("float:", "Float property has inconsistent support"),
    ("display: flex", "Flexbox is not supported in most email clients"),
    ("display: grid", "CSS Grid is not supported in email clients"),
    ("transform:", "CSS transforms are not supported"),
    ("animation:", "CSS animations are not supported"),
    ("@media", "Media queries have limited support"),
    ("@keyframes", "CSS animations are not supported"),
)

TABLE_RESET_ATTRIBUTES: tuple[tuple[str, str], ...] = (
    ('cellpadding="0"', 'Add cellpadding="0" for consistent spacing across email clients'),
    ('cellspacing="0"', 'Add cellspacing="0" for consistent spacing across email clients'),
    ('border="0"', 'Add border="0" to remove default table borders'),
)


def _error(category: str, message: str, suggestion: str | None = None) -> ValidationError:
    return ValidationError(type="error", category=category, message=message, suggestion=suggestion)


def _warning(category: str, message: str, suggestion: str | None = None) -> ValidationError:
    return ValidationError(type="warning", category=category, message=message, suggestion=suggestion)


def check_structure(html: str) -> list[ValidationError]:
    findings: list[ValidationError] = []

    if "<table" not in html:
        findings.append(
            _error(
                "structure",
                "Email must use table-based layout for maximum email client compatibility",
                "Use <table> elements for layout instead of <div> elements",
            )
        )

    if "DOCTYPE html PUBLIC" not in html:
        findings.append(
            _warning(
                "structure",
                "Missing HTML 4.01 Transitional DOCTYPE",
                'Add DOCTYPE html PUBLIC "-//W3C//DTD HTML 4.01 Transitional//EN" for better compatibility',
            )
        )

    if "<html" not in html or "<body" not in html:
        findings.append(
            _warning(
                "structure",
                "Missing proper HTML document structure",
                "Include <html> and <body> tags with proper attributes",
            )
        )

    if "viewport" not in html:
        findings.append(
            _warning(
                "structure",
                "Missing viewport meta tag",
                'Add <meta name="viewport" content="width=device-width, initial-scale=1.0"/> for mobile support',
            )
        )

    if "<script" in html or "javascript:" in html:
        findings.append(
            _error(
                "structure",
                "JavaScript is not supported in email clients",
                "Remove all JavaScript code as it will be stripped by email clients",
            )
        )

    if "<form" in html:
        findings.append(
            _warning(
                "structure",
                "Forms have limited support in email clients",
                "Consider using links to external forms instead",
            )
        )

    return findings


def max_declared_width(html: str) -> str:
    """Largest ``width=``/``width:`` value in *html* as a digit string, or ``"0"``.

    Values are compared as digit strings so an arbitrarily long number never
    reaches ``int()`` and its digit limit.
    """
    widest = "0"
    for match in _WIDTH_RE.finditer(html):
        digits = match.group(1).lstrip("0") or "0"
        if (len(digits), digits) > (len(widest), widest):
            widest = digits
    return widest


def _exceeds_max_width(digits: str) -> bool:
    limit = str(MAX_WIDTH)
    return (len(digits), digits) > (len(limit), limit)


def check_css(html: str) -> list[ValidationError]:
    findings: list[ValidationError] = []

    if "<link" in html and "stylesheet" in html:
        findings.append(
            _error(
                "css",
                "External stylesheets are blocked by most email clients",
                "Use inline styles instead of external CSS files",
            )
        )

    if "<style>" in html:
        findings.append(
            _error(
                "css",
                "Style tags have limited support in email clients",
                "Move all CSS to inline style attributes",
            )
        )

    lowered = html.lower()
    for prop, message in UNSUPPORTED_CSS:
        if prop.lower() in lowered:
            findings.append(_warning("css", f'CSS property "{prop}" - {message}', _LAYOUT_SUGGESTION))

    max_width = max_declared_width(html)
    if _exceeds_max_width(max_width):
        findings.append(
            _error(
                "css",
                f"Maximum width exceeded: {max_width}px (limit: {MAX_WIDTH}px)",
                f"Use max-width: {MAX_WIDTH}px for email compatibility",
            )
        )

    for match in _FONT_FAMILY_RE.finditer(html):
        family = match.group(1).lower()
        if not any(font in family for font in WEB_SAFE_FONTS):
            findings.append(
                _warning(
                    "css",
                    "Non-web-safe font detected",
                    "Use web-safe fonts like Arial, Helvetica, or sans-serif with fallbacks",
                )
            )

    return findings


def check_images(html: str) -> list[ValidationError]:
    findings: list[ValidationError] = []

    # No tag can close past the last '>', so unterminated "<img" runs stay linear.
    closed = html[: html.rfind(">") + 1]
    for index, tag in enumerate(_IMG_RE.findall(closed), start=1):
        if "alt=" not in tag:
            findings.append(
                _warning(
                    "accessibility",
                    f"Image {index} is missing alt text",
                    "Add alt attribute for accessibility and when images are blocked",
                )
            )
        if "width=" not in tag:
            findings.append(
                _warning(
                    "images",
                    f"Image {index} is missing width attribute",
                    "Add width attribute for consistent rendering across email clients",
                )
            )
        if "height=" not in tag:
            findings.append(
                _warning(
                    "images",
                    f"Image {index} is missing height attribute",
                    "Add height attribute for consistent rendering across email clients",
                )
            )
        if "display: block" not in tag and "display:block" not in tag:
            findings.append(
                _warning(
                    "images",
                    f"Image {index} should use display: block",
                    'Add style="display: block;" to prevent spacing issues',
                )
            )

    return findings


def check_compatibility(html: str) -> list[ValidationError]:
    findings: list[ValidationError] = []

    if "<table" in html:
        for attribute, suggestion in TABLE_RESET_ATTRIBUTES:
            if attribute not in html:
                findings.append(_warning("compatibility", f"Tables should include {attribute}", suggestion))

    if "background-image:" in html:
        findings.append(
            _warning(
                "compatibility",
                "Background images have limited support in Outlook",
                "Consider using VML fallbacks for Outlook or avoid background images",
            )
        )

    return findings


def check_accessibility(html: str) -> list[ValidationError]:
    findings: list[ValidationError] = []

    # Document-wide: one role= anywhere satisfies every <div>.
    if "<div" in html and "role=" not in html:
        findings.append(
            _warning(
                "accessibility",
                "Consider using semantic HTML or ARIA roles",
                "Add role attributes or use semantic HTML elements for better accessibility",
            )
        )

    if "color:" in html and "background-color:" not in html:
        findings.append(
            _warning(
                "accessibility",
                "Ensure sufficient color contrast",
                "Test color combinations for accessibility compliance",
            )
        )

    return findings


RULES: tuple[Rule, ...] = (
    check_structure,
    check_css,
    check_images,
    check_compatibility,
    check_accessibility,
)


__all__ = [
    "RULES",
    "Rule",
    "TABLE_RESET_ATTRIBUTES",
    "UNSUPPORTED_CSS",
    "check_accessibility",
    "check_compatibility",
    "check_css",
    "check_images",
    "check_structure",
    "max_declared_width",
]
