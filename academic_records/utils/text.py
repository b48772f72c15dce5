"""Text utilities for normalizing user-supplied identifiers."""
import re


_WHITESPACE = re.compile(r"\s+")
_PHONE_FORMATTING = re.compile(r"[\s\-\(\)\.]")


def strip_whitespace(text: str) -> str:
    """Remove every whitespace character from ``text``.

    Examples:
        >>> strip_whitespace("090 123 4567")
        "0901234567"
        >>> strip_whitespace(None)
        ""
    """
    if text is None:
        return ""
    return _WHITESPACE.sub("", str(text))


def strip_phone_formatting(phone_number: str) -> str:
    """Drop the separators people type into phone numbers.

    Spaces, dashes, parentheses and dots are removed; everything else
    (including a leading ``+``) is kept so the result can be matched
    against a configured pattern.

    Examples:
        >>> strip_phone_formatting("+84 (90) 123-45.67")
        "+84901234567"
    """
    if phone_number is None:
        return ""
    return _PHONE_FORMATTING.sub("", str(phone_number))


def clean_optional(text):
    """Trim ``text``; blank strings become None."""
    if text is None:
        return None
    text = str(text).strip()
    return text or None
