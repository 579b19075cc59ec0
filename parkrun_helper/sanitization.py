"""Composable input normalizers applied before business logic sees request data."""

import html
import re
from functools import reduce
from typing import Callable, Optional

Normalizer = Callable[[str], str]

_TAG = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")


def strip_tags(value: str) -> str:
    return _TAG.sub("", value)


def escape_html(value: str) -> str:
    return html.escape(value, quote=True)


def collapse_whitespace(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip()


def normalize_email(value: str) -> str:
    return value.strip().lower()


def normalize_phone(value: str) -> str:
    """Keep digits and a single leading plus sign."""
    leading_plus = value.strip().startswith("+")
    digits = re.sub(r"\D", "", value)
    return f"+{digits}" if leading_plus else digits


def pipeline(*steps: Normalizer) -> Callable[[Optional[str]], Optional[str]]:
    """Compose normalizers left to right; ``None`` passes through untouched."""

    def run(value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return reduce(lambda acc, step: step(acc), steps, value)

    return run


sanitize_text = pipeline(strip_tags, collapse_whitespace, escape_html)
sanitize_identifier = pipeline(strip_tags, collapse_whitespace, str.upper)
sanitize_email = pipeline(strip_tags, normalize_email)
sanitize_phone = pipeline(strip_tags, normalize_phone)
