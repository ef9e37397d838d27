from functools import wraps

from flask_login import current_user

from smarthr.errors import Forbidden, Unauthorized


def role_required(*roles):
    """Only let signed-in users whose role is one of ``roles`` through."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                raise Unauthorized()
            if roles and current_user.role not in roles:
                raise Forbidden()
            return f(*args, **kwargs)
        return decorated_function
    return decorator
