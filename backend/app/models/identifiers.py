"""Store-assigned identifiers and the syntactic check used before querying."""

import re
import uuid

ID_LENGTH = 36

_ID_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)


def new_id() -> str:
    """Return a fresh identifier in canonical hyphenated UUID form."""
    return str(uuid.uuid4())


def is_valid_id(value: object) -> bool:
    """Return True if *value* is a well-formed identifier string.

    Only the 36-character hyphenated form is accepted. Never raises.
    """
    if not isinstance(value, str):
        return False
    return _ID_PATTERN.fullmatch(value) is not None
