# /hms/utils/cloudinary_util.py
import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
import os
from flask import current_app
from werkzeug.utils import secure_filename
import uuid

ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif'}
MAX_IMAGE_BYTES = 5 * 1024 * 1024


class CloudinaryManager:
    """Utility class for profile image uploads to Cloudinary."""

    def __init__(self, app=None):
        if app:
            self.init_app(app)

    def init_app(self, app):
        """Initialize Cloudinary with app config."""
        cloudinary.config(
            cloud_name=app.config.get('CLOUDINARY_CLOUD_NAME'),
            api_key=app.config.get('CLOUDINARY_API_KEY'),
            api_secret=app.config.get('CLOUDINARY_API_SECRET'),
            secure=True
        )

    def upload_profile_picture(self, file, user_id, user_type):
        """
        Upload a profile picture.

        Returns:
            dict: 'success' plus 'url' and 'public_id', or 'error'
        """
        if not file or file.filename == '':
            return {'success': False, 'error': 'No file provided'}

        if not self._is_allowed_file(file.filename):
            return {'success': False, 'error': 'File type not allowed'}

        if not self._is_valid_file_size(file):
            return {'success': False, 'error': 'File size exceeds 5MB limit'}

        secure_name = secure_filename(f"{user_type}_{user_id}_{uuid.uuid4().hex}")
        try:
            upload_result = cloudinary.uploader.upload(
                file,
                public_id=secure_name,
                folder="profile_pictures",
                transformation=[
                    {'width': 500, 'height': 500, 'crop': 'fill'},
                    {'quality': 'auto'},
                    {'format': 'auto'}
                ]
            )
        except cloudinary.exceptions.Error as e:
            current_app.logger.error(f"Cloudinary upload error: {str(e)}")
            return {'success': False, 'error': 'Failed to upload image'}

        return {
            'success': True,
            'url': upload_result.get('secure_url'),
            'public_id': upload_result.get('public_id')
        }

    def delete_profile_picture(self, public_id):
        """Delete a profile picture by its Cloudinary public ID."""
        try:
            result = cloudinary.uploader.destroy(public_id)
        except cloudinary.exceptions.Error as e:
            current_app.logger.error(f"Cloudinary delete error: {str(e)}")
            return {'success': False, 'error': 'Failed to delete image'}
        return {'success': result.get('result') in ('ok', 'not found')}

    def _is_allowed_file(self, filename):
        return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_IMAGE_EXTENSIONS

    def _is_valid_file_size(self, file):
        file.seek(0, os.SEEK_END)
        file_size = file.tell()
        file.seek(0)
        return file_size <= MAX_IMAGE_BYTES


cloudinary_manager = CloudinaryManager()
