"""
Field validators for crop records.

Wikipedia links are shown to members as clickable links, so besides
being well-formed http(s) URLs they must not carry anything that
could break out of an HTML attribute: whitespace, control characters,
backslash escapes, or markup tags.
"""

import re
import unicodedata

from django.core.exceptions import ValidationError
from django.core.validators import URLValidator


# Characters that never appear in a link we are willing to render
FORBIDDEN_URL_CHARACTERS = set('<>"\\`')

MARKUP_TAG_PATTERN = re.compile(r"<\s*/?\s*[a-zA-Z][^>]*>")

_http_url_validator = URLValidator(schemes=["http", "https"])


def validate_wikipedia_url(value):
    """
    Validate an en.wikipedia.org style link.

    Accepts http and https URLs, including UTF-8 paths such as
    ``https://en.wikipedia.org/wiki/Māori`` and their percent-encoded
    form. Rejects anything else that looks like an injection attempt,
    even when the rest of the URL is well-formed.

    Raises:
        ValidationError: if the value is not an acceptable URL
    """
    if value is None or value == "":
        return

    if MARKUP_TAG_PATTERN.search(value):
        raise ValidationError(
            "Wikipedia URL must not contain markup tags.",
            code="invalid_url_markup",
        )

    for char in value:
        if char in FORBIDDEN_URL_CHARACTERS or char.isspace():
            raise ValidationError(
                "Wikipedia URL contains an invalid character.",
                code="invalid_url_character",
            )
        if unicodedata.category(char) == "Cc":
            raise ValidationError(
                "Wikipedia URL must not contain control characters.",
                code="invalid_url_character",
            )

    try:
        _http_url_validator(value)
    except ValidationError:
        raise ValidationError(
            "Wikipedia URL must be a valid http or https URL.",
            code="invalid_url",
        )


def validate_not_blank(value):
    """
    Reject names made only of whitespace.

    Django's own blank check only catches the empty string.

    Raises:
        ValidationError: if the value strips to nothing
    """
    if value is not None and not value.strip():
        raise ValidationError("This field cannot be blank.", code="blank")
