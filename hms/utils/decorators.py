from functools import wraps
from flask import request, current_app, jsonify, make_response
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request
from sqlalchemy.exc import SQLAlchemyError
from hms.extensions import db
from hms.models.system_models import AuditLog


def current_user_id():
    """Identity provider user id of the verified session token."""
    return get_jwt_identity()


def current_role():
    """Role from the session token's metadata claim. Signed-in users without one are patients."""
    metadata = get_jwt().get('metadata') or {}
    role = metadata.get('role')
    return role.lower() if role else 'patient'


def _write_audit_entry(user_id, action, resource, resource_id, success, details):
    log_entry = AuditLog(
        user_id=str(user_id) if user_id is not None else None,
        action=action,
        resource=resource,
        resource_id=resource_id,
        ip_address=request.remote_addr,
        user_agent=(request.headers.get('User-Agent') or '')[:255],
        success=success,
        details=details
    )
    try:
        db.session.add(log_entry)
        db.session.commit()
    except SQLAlchemyError as db_error:
        current_app.audit_logger.error(f"Failed to log audit entry due to DB error: {db_error}")
        db.session.rollback()


def audit_log(action, resource):
    """Logs user actions for HIPAA compliance."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user_id = None
            try:
                user_id = get_jwt_identity()
            except RuntimeError:
                # No verified session token on this request
                pass

            # Path parameters identify the resource (appointment id, record id, ...)
            resource_id = next((str(v) for v in kwargs.values()), None)

            try:
                raw_response = f(*args, **kwargs)
            except Exception as e:
                db.session.rollback()
                details = f"An error occurred: {str(e)}"
                _write_audit_entry(user_id, action, resource, resource_id, False, details)
                current_app.audit_logger.error(
                    f"Action='{action}', Resource='{resource}', UserID='{user_id}', Success='False', Details='{details}'"
                )
                raise

            # Use make_response to handle both Response objects and tuples.
            response = make_response(raw_response)
            success = response.status_code < 400
            details = f"Request successful. Status: {response.status_code}" if success \
                else f"Request failed. Status: {response.status_code}"

            _write_audit_entry(user_id, action, resource, resource_id, success, details)
            current_app.audit_logger.info(
                f"Action='{action}', Resource='{resource}', UserID='{user_id}', Success='{success}', Details='{details}'"
            )
            return response

        return decorated_function
    return decorator


def require_role(*roles):
    """Checks that the session token's role is one of ``roles``."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            if current_role() not in roles:
                return jsonify({'error': 'Permission denied'}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator
