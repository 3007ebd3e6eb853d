from functools import wraps
from flask import g, jsonify
from flask_jwt_extended import get_jwt_identity

from mindflow.extensions import db
from mindflow.models import User


def get_current_user():
    """The authenticated User for this request (set by require_role)"""
    user_id = get_jwt_identity()
    if user_id is None:
        return None
    user = getattr(g, 'current_user', None)
    # g can outlive a request when an app context is already pushed
    if user is None or str(user.id) != str(user_id):
        try:
            user = db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None
        g.current_user = user
    return user


def require_role(*roles):
    """
    Decorator to require specific roles
    Usage: @require_role('patient', 'doctor')
    Must be used together with @jwt_required() on the route.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                user = get_current_user()
            except (TypeError, ValueError):
                user = None

            if not user or not user.is_active:
                return jsonify({
                    'success': False,
                    'message': 'Authentication required'
                }), 401

            if user.role.value not in roles:
                return jsonify({
                    'success': False,
                    'message': f'Permission denied. Required roles: {", ".join(roles)}'
                }), 403

            return f(*args, **kwargs)
        return decorated_function
    return decorator
