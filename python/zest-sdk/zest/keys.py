"""Helpers for legacy ``testName###key`` namespaced keys.

Malformed keys are reported as diagnostics and treated as absent; they
never raise.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

DELIMITER = "###"


def join_test_key(test_name: str, key: str) -> str:
    """Join a test name and key, e.g. ``("AAA", "VVV") -> "AAA###VVV"``."""
    return f"{test_name}{DELIMITER}{key}"


def split_test_key(test_name_plus_key: str, source: str) -> tuple[str, str] | None:
    """Split ``"testName###key"`` into ``(test_name, key)``.

    Args:
        test_name_plus_key: The joined key.
        source: Name of the calling function, used in the diagnostic.

    Returns:
        The pair, or ``None`` when the delimiter is missing or the key is empty.
    """
    parts = test_name_plus_key.split(DELIMITER)
    if len(parts) >= 2 and parts[1]:
        return parts[0], parts[1]
    logger.error(
        "%s expected first param to have '%s', i.e. 'testName%skey'. Got: '%s'",
        source,
        DELIMITER,
        DELIMITER,
        test_name_plus_key,
    )
    return None
