"""User-facing error messages.

Converts an exception into a short message suitable for showing next to a
failed scan. Rate-limit and overload wording is shared with the upstream
extraction flows so the UI reports them consistently.
"""

from __future__ import annotations

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred. Please try again."
RATE_LIMIT_MESSAGE = "The AI service has reached its request limit. Please try again later."
BUSY_MESSAGE = "The AI service is currently busy. Please wait a moment and try again."


def friendly_error_message(error: BaseException | None) -> str:
    """Return a concise message for ``error``.

    Falls back to :data:`DEFAULT_ERROR_MESSAGE` when there is no error or it
    carries no message.
    """

    if error is None:
        return DEFAULT_ERROR_MESSAGE
    message = str(error).strip()
    if not message:
        return DEFAULT_ERROR_MESSAGE

    lowered = message.lower()
    if "429" in message or "too many requests" in lowered or "exceeded your current quota" in lowered:
        return RATE_LIMIT_MESSAGE
    if "503" in message or "overloaded" in lowered:
        return BUSY_MESSAGE
    return message


__all__ = [
    "BUSY_MESSAGE",
    "DEFAULT_ERROR_MESSAGE",
    "RATE_LIMIT_MESSAGE",
    "friendly_error_message",
]
