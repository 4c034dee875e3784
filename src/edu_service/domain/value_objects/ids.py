from __future__ import annotations

import secrets
import time
from typing import NewType

RecordId = NewType("RecordId", str)
MessageId = NewType("MessageId", str)

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits)) or "0"


def new_record_id() -> RecordId:
    """Random prefix plus a base36 millisecond suffix, e.g. ``k3j9x0a1blxq2v4d``."""
    prefix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return RecordId(prefix + _base36(time.time_ns() // 1_000_000))


def new_message_id() -> MessageId:
    return MessageId("".join(secrets.choice(_ALPHABET) for _ in range(9)))
