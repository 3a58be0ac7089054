# /hms/utils/error_handlers.py
from flask import jsonify, current_app
from pydantic import ValidationError
from hms.extensions import db, jwt
from hms.utils.exceptions import ServiceError


def _validation_details(error):
    return [
        {'field': '.'.join(str(part) for part in err['loc']), 'message': err['msg']}
        for err in error.errors()
    ]


def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def service_error(error):
        return jsonify({'error': error.message}), error.status_code

    @app.errorhandler(ValidationError)
    def validation_error(error):
        return jsonify({
            'error': 'Please provide all required info',
            'details': _validation_details(error)
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(429)
    def rate_limited(error):
        return jsonify({'error': 'Too many requests'}), 429

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        current_app.audit_logger.error(f"Internal server error: {str(error)}")
        return jsonify({'error': 'Internal server error'}), 500


def register_jwt_handlers():
    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({'error': 'Unauthorized'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({'error': f'Invalid session token: {reason}'}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({'error': 'Session token has expired'}), 401
