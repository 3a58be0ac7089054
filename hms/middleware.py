# /hms/middleware.py
from flask import current_app, g, redirect, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from hms.route_access import SIGN_IN_ROLE, is_allowed
from hms.utils.decorators import current_role

_AUTH_PAGES = ('/', '/sign-in', '/sign-up')


def resolve_role():
    """Role of the caller: the token's role, ``patient`` when signed in without one,
    ``sign-in`` when anonymous or when the session token is unusable."""
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError) as e:
        current_app.logger.debug(f"Ignoring unusable session token on {request.path}: {e}")
        return None, SIGN_IN_ROLE

    user_id = get_jwt_identity()
    if not user_id:
        return None, SIGN_IN_ROLE
    return user_id, current_role()


def register_route_guard(app):
    @app.before_request
    def guard_routes():
        path = request.path
        if request.endpoint == 'static' or path.startswith('/api/') or path == '/api':
            return None

        user_id, role = resolve_role()
        g.user_id, g.role = user_id, role

        if user_id and path in _AUTH_PAGES:
            return redirect(f'/{role}')

        if not is_allowed(path, role):
            return redirect(f'/{role}')

        return None
