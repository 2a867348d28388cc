"""Security helpers for request tracing and credential hygiene."""

import secrets
from typing import Final
from urllib.parse import quote, quote_plus

REDACTED: Final = "***"


def redact_secret(text: str, secret: str | None) -> str:
    """
    Remove every occurrence of a secret from a piece of text.

    Used before anything derived from an outbound request (exception messages,
    URLs) reaches a log record. URL-encoded forms of the secret are removed
    as well, since query-string keys appear percent-encoded.

    Args:
        text: Text that may contain the secret
        secret: Secret value to strip, or None

    Returns:
        Text with the secret replaced by a placeholder
    """
    if not secret:
        return text
    forms = {secret, quote(secret, safe=""), quote_plus(secret)}
    for form in sorted(forms, key=len, reverse=True):
        text = text.replace(form, REDACTED)
    return text


def generate_request_id() -> str:
    """
    Generate a unique request ID.

    Returns:
        A unique request ID
    """
    return f"req_{secrets.token_hex(16)}"
