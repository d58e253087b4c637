import hmac
import secrets


def new_session_token() -> str:
    """Opaque, url-safe token identifying one server-side login session."""
    return secrets.token_urlsafe(32)


def keys_match(supplied: str, expected: str) -> bool:
    """Exact, case-sensitive comparison in constant time."""
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))
