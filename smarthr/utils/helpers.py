import re
import secrets
import time
from datetime import datetime, date, timezone

UUID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$', re.IGNORECASE
)


def utcnow():
    # Naive UTC, which is what the DateTime columns store
    return datetime.now(timezone.utc).replace(tzinfo=None)


def today():
    return date.today()


def is_uuid(value):
    return bool(value) and UUID_PATTERN.match(value) is not None


def split_path(path):
    """
    Break the part of the URL after the resource name into
    ``(target_id, segments)``. ``target_id`` is the trailing segment when it
    is UUID-shaped, otherwise None (a collection request).
    """
    segments = [segment for segment in (path or '').split('/') if segment]
    target_id = segments[-1] if segments and is_uuid(segments[-1]) else None
    return target_id, segments


def generate_transaction_id():
    return f"TXN-{int(time.time() * 1000)}"


def generate_temporary_password():
    return secrets.token_urlsafe(9)


def generate_reset_token():
    return secrets.token_hex(16)


def full_name(user):
    if not user:
        return ''
    return f"{user.get('first_name') or ''} {user.get('last_name') or ''}".strip()
