"""
Request ID helpers.
"""
import secrets
import time

_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"


def new_request_id() -> str:
    """Millisecond timestamp (base32, 10 chars) followed by 16 random chars."""
    millis = int(time.time() * 1000)
    stamp = []
    for _ in range(10):
        millis, rem = divmod(millis, 32)
        stamp.append(_ALPHABET[rem])
    rand = "".join(secrets.choice(_ALPHABET) for _ in range(16))
    return "".join(reversed(stamp)) + rand


def request_id(header_value: str | None = None) -> str:
    """Reuse an incoming X-Request-ID when present, otherwise mint one."""
    if header_value and header_value.strip():
        return header_value.strip()
    return new_request_id()
