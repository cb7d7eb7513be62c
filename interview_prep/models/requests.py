# =============================================================================
# API Request Types
# =============================================================================
#
# The generation endpoints take multipart form fields (a CV upload plus
# labels), so there is no JSON request body model. This module holds the
# enumerations those form fields are parsed into.
# =============================================================================

from __future__ import annotations

from enum import Enum


class QuestionType(str, Enum):
    """Kind of interview questions to generate."""

    PROGRAMMING = "Programming"
    THEORETICAL = "Theoretical"
    MIXED = "Mixed"

    @classmethod
    def from_label(cls, label: str | None) -> QuestionType:
        """
        Parse a client-supplied label, ignoring case.

        Unknown or missing labels fall back to MIXED.
        """
        if label:
            for member in cls:
                if member.value.lower() == label.strip().lower():
                    return member
        return cls.MIXED
