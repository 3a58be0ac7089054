# /hms/api/controllers/auth_controller.py
from flask import jsonify

from hms.services import auth as auth_service
from hms.utils.decorators import current_role, current_user_id


def sync_user():
    """Creates the local profile row for the signed-in provider account."""
    message = auth_service.sync_user_with_database(current_user_id())
    return jsonify({'success': True, 'message': message}), 200


def get_current_user_details():
    user_id = current_user_id()
    role = current_role()
    profile = auth_service.find_profile(user_id, role)

    if profile is None:
        profile_data = None
    elif role == 'doctor':
        profile_data = profile.to_dict(include_schedule=True)
    else:
        profile_data = profile.to_dict()

    return jsonify({
        'id': user_id,
        'role': role,
        'profile': profile_data,
    }), 200
