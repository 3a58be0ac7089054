# /hms/api/controllers/profile_controller.py
from flask import request, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from hms.extensions import db
from hms.services.auth import find_profile
from hms.utils.cloudinary_util import cloudinary_manager
from hms.utils.decorators import current_role, current_user_id

_FILE_KEYS = ('file', 'image', 'picture', 'profile_picture')


def upload_profile_picture():
    """Upload a profile picture for the signed-in doctor, patient or staff member."""
    user_id, role = current_user_id(), current_role()
    profile = find_profile(user_id, role)
    if profile is None:
        return jsonify({'error': 'Profile not found'}), 404

    file = next((request.files[key] for key in _FILE_KEYS if key in request.files), None)
    if file is None or file.filename == '':
        return jsonify({'error': 'No file provided'}), 400

    upload_result = cloudinary_manager.upload_profile_picture(file, user_id, role)
    if not upload_result['success']:
        return jsonify({'error': upload_result['error']}), 400

    old_public_id = profile.img_public_id
    profile.img = upload_result['url']
    profile.img_public_id = upload_result['public_id']
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Database error saving profile picture: {str(e)}")
        cloudinary_manager.delete_profile_picture(upload_result['public_id'])
        return jsonify({'error': 'Failed to update profile picture'}), 500

    if old_public_id:
        cloudinary_manager.delete_profile_picture(old_public_id)

    return jsonify({
        'message': 'Profile picture uploaded successfully',
        'img': profile.img
    }), 200


def delete_profile_picture():
    profile = find_profile(current_user_id(), current_role())
    if profile is None:
        return jsonify({'error': 'Profile not found'}), 404

    if not profile.img:
        return jsonify({'message': 'No profile picture to delete'}), 200

    if profile.img_public_id:
        delete_result = cloudinary_manager.delete_profile_picture(profile.img_public_id)
        if not delete_result['success']:
            return jsonify({'error': 'Failed to delete image from cloud storage'}), 500

    profile.img = None
    profile.img_public_id = None
    db.session.commit()
    return jsonify({'message': 'Profile picture deleted successfully'}), 200
