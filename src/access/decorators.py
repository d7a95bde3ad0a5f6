from functools import wraps

from flask import jsonify, session

from .roles import default_route, has_permission


def _unauthenticated():
    return jsonify({'success': False, 'message': 'Authentication required', 'redirect': '/login'}), 401


def _forbidden(role):
    return jsonify({
        'success': False,
        'message': 'You do not have access to this resource',
        'redirect': default_route(role),
    }), 403


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not session.get('token') or not session.get('user'):
            return _unauthenticated()
        return f(*args, **kwargs)
    return decorated_function


def roles_required(*roles):
    """Allow only the listed roles; others are pointed at their own landing page"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = session.get('user')
            if not session.get('token') or not user:
                return _unauthenticated()
            if user.get('role') not in roles:
                return _forbidden(user.get('role'))
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def permission_required(permission):
    """Role permissions plus whatever the backend granted the user"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = session.get('user')
            if not session.get('token') or not user:
                return _unauthenticated()
            if not has_permission(user.get('role'), permission, user.get('permissions')):
                return _forbidden(user.get('role'))
            return f(*args, **kwargs)
        return decorated_function
    return decorator
