from functools import wraps
from flask_jwt_extended import verify_jwt_in_request
from fieldjobs.errors import Forbidden
from fieldjobs.services.policy import has_permissions, current_actor


def require_permissions(*codes: str):
    """Verify the bearer token and that its ``perms`` claim covers every code.

    The resolved caller is passed to the view as the ``actor`` keyword.
    """
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if not has_permissions(*codes):
                raise Forbidden(f"Missing permission: {', '.join(codes)}")
            kwargs['actor'] = current_actor()
            return fn(*args, **kwargs)
        return wrapper
    return outer
