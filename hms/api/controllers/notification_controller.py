# /hms/api/controllers/notification_controller.py
from flask import jsonify

from hms.services import notifications
from hms.utils.decorators import current_user_id


def list_notifications():
    return jsonify({'success': True, **notifications.list_notifications(current_user_id())}), 200


def mark_notification_read(notification_id):
    notification = notifications.mark_read(current_user_id(), notification_id)
    return jsonify({'success': True, 'data': notification.to_dict()}), 200


def mark_all_notifications_read():
    updated = notifications.mark_all_read(current_user_id())
    return jsonify({'success': True, 'updated': updated}), 200
