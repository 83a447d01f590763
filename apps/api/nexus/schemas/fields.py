"""Reusable request field types and their validation rules."""

from __future__ import annotations

import re
from typing import Annotated

from pydantic import AfterValidator, AnyUrl, Field, StringConstraints, TypeAdapter, ValidationError

LANGUAGE_PATTERN = r"^[a-z]{2}(-[A-Z]{2})?$"

_LANGUAGE_RE = re.compile(r"[a-z]{2}(-[A-Z]{2})?")
_URL_ADAPTER = TypeAdapter(AnyUrl)


def is_valid_language(value: object) -> bool:
    """ISO-639-1 code, optionally suffixed with an upper-case region (``en``, ``pt-BR``)."""
    return isinstance(value, str) and _LANGUAGE_RE.fullmatch(value) is not None


def is_absolute_url(value: object) -> bool:
    if not isinstance(value, str):
        return False
    try:
        url = _URL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return bool(url.scheme) and bool(url.host)


def _require_absolute_url(value: str) -> str:
    # The submitted text is kept as-is; AnyUrl would normalize it.
    if not is_absolute_url(value):
        raise ValueError("Must be a valid URL")
    return value


def _require_language(value: str) -> str:
    if not is_valid_language(value):
        raise ValueError("Invalid language format (e.g., en-US)")
    return value


AbsoluteUrl = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1), AfterValidator(_require_absolute_url)]
LanguageCode = Annotated[str, AfterValidator(_require_language)]
NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
EntityId = Annotated[int, Field(strict=True, ge=1)]
