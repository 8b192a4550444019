"""
Reference numbers: prefix + base-36 millisecond timestamp + 4 random base-36 characters.
"""

import secrets
import string
from datetime import datetime

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must not be negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_reference_number(prefix: str, now: datetime, random_length: int = 4) -> str:
    timestamp = to_base36(int(now.timestamp() * 1000))
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(random_length))
    return f"{prefix}{timestamp}{suffix}".upper()
