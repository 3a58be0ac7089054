# /hms/services/notifications.py
from hms.extensions import db
from hms.models.system_models import Notification
from hms.utils.exceptions import NotFoundError


def notify(user_id, type, title, message):
    """Queues a notification on the current session; the caller commits."""
    notification = Notification(user_id=user_id, type=type, title=title, message=message)
    db.session.add(notification)
    return notification


def list_notifications(user_id, limit=50):
    items = (
        Notification.query
        .filter_by(user_id=user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )
    unread = Notification.query.filter_by(user_id=user_id, is_read=False).count()
    return {'data': [n.to_dict() for n in items], 'unread_count': unread}


def mark_read(user_id, notification_id):
    notification = Notification.query.filter_by(id=notification_id, user_id=user_id).first()
    if not notification:
        raise NotFoundError('Notification not found')
    notification.is_read = True
    db.session.commit()
    return notification


def mark_all_read(user_id):
    updated = (
        Notification.query
        .filter_by(user_id=user_id, is_read=False)
        .update({'is_read': True}, synchronize_session=False)
    )
    db.session.commit()
    return updated
