"""Rendering constraints shared by email templates."""

MAX_WIDTH = 600
MAX_FILE_SIZE = 102400  # 100KB

ALLOWED_TAGS = (
    "table", "tr", "td", "div", "span", "p", "a", "img",
    "h1", "h2", "h3", "h4", "h5", "h6", "strong", "em", "br",
)

SUPPORTED_CSS_PROPERTIES = (
    "color",
    "background-color",
    "font-size",
    "font-family",
    "font-weight",
    "text-align",
    "padding",
    "margin",
    "border",
    "width",
    "height",
)

WEB_SAFE_FONTS = ("arial", "helvetica", "sans-serif")


__all__ = [
    "ALLOWED_TAGS",
    "MAX_FILE_SIZE",
    "MAX_WIDTH",
    "SUPPORTED_CSS_PROPERTIES",
    "WEB_SAFE_FONTS",
]
