# Overview: Request and role decorators for API routes.

from functools import wraps
from flask import jsonify, g, session

from .extensions import db
from .models import User
from .permissions import has_role


def _is_authenticated() -> bool:
    return getattr(g, "current_user", None) is not None


def require_auth(f):
    """
    Require a signed-in user.

    The Flask session cookie carries only the user id; it is set by the QR
    login route (or the identity provider callback). Sets g.current_user.

    SECURITY: Returns 401 if there is no session or the user no longer exists.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user_id = session.get("user_id")
        if not user_id:
            return jsonify({"error": "Authentication required"}), 401

        user = db.session.get(User, user_id)
        if user is None:
            session.pop("user_id", None)
            return jsonify({"error": "Authentication required"}), 401

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """
    Require one of roles. Must be applied below @require_auth.

    Returns 403 with the roles that would have been accepted.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            if not has_role(g.current_user, *roles):
                label = " or ".join(r.capitalize() for r in roles)
                return jsonify({
                    "error": f"{label} access required",
                    "required_roles": list(roles),
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
