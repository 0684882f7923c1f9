"""
Path parameter extraction for the JSON API.
"""

from __future__ import annotations

import re

from ..exceptions import InvalidIdentifierError

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

# Primary keys are BIGINT columns.
MIN_IDENTIFIER = -(2**63)
MAX_IDENTIFIER = 2**63 - 1


def parse_identifier(raw: str) -> int:
    """
    Parse a numeric ``id`` path segment.

    Accepts an optional sign followed by ASCII digits and nothing else:
    no surrounding whitespace, no digit-group underscores. Values outside
    the signed 64-bit range are rejected.

    Raises:
        InvalidIdentifierError: If the segment is not a valid integer
    """
    if not _INTEGER_PATTERN.fullmatch(raw):
        raise InvalidIdentifierError(
            f'parsing "{raw}": invalid syntax',
            context={"value": raw},
        )

    value = int(raw)
    if not MIN_IDENTIFIER <= value <= MAX_IDENTIFIER:
        raise InvalidIdentifierError(
            f'parsing "{raw}": value out of range',
            context={"value": raw},
        )
    return value


__all__ = ["MAX_IDENTIFIER", "MIN_IDENTIFIER", "parse_identifier"]
