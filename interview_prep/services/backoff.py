# =============================================================================
# Backoff Calculator — Retry Delay From a Rate-Limit Message
# =============================================================================
#
# Gemini's 429 responses embed a hint such as:
#   "Quota exceeded ... Please retry in 2.520375s."
#
# We wait the hinted time plus a one-second buffer. When the hint is
# missing or unreadable we wait a flat 30 seconds.
#
# Pure function, never raises.
# =============================================================================

from __future__ import annotations

import re

RETRY_HINT_PATTERN = re.compile(r"retry in ([0-9.]+)s")

# Added on top of the upstream hint
RETRY_BUFFER_MS = 1000

# Used when the message carries no usable hint
DEFAULT_RETRY_DELAY_MS = 30_000


def parse_retry_delay(message: str | None) -> int:
    """
    Compute how long to wait before retrying a rate-limited call.

    Args:
        message: The upstream error message (may be None).

    Returns:
        Delay in milliseconds: hint × 1000 + 1000, or 30 000 when no
        hint can be parsed.

    Examples:
        >>> parse_retry_delay("Please retry in 2.5s.")
        3500
        >>> parse_retry_delay("no hint here")
        30000
    """
    if not message:
        return DEFAULT_RETRY_DELAY_MS

    match = RETRY_HINT_PATTERN.search(message)
    if match is None:
        return DEFAULT_RETRY_DELAY_MS

    try:
        seconds = float(match.group(1))
    except ValueError:
        # e.g. "retry in 1.2.3s"
        return DEFAULT_RETRY_DELAY_MS

    return int(seconds * 1000) + RETRY_BUFFER_MS
