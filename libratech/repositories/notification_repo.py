from libratech.models.notification_log import NotificationLog
from libratech.extensions import db

class NotificationRepo:
    @staticmethod
    def already_sent(transaction_id: int, notif_type: str = "overdue") -> bool:
        return NotificationLog.query.filter_by(
            transaction_id=transaction_id, type=notif_type
        ).first() is not None

    @staticmethod
    def list_for_transaction(transaction_id: int):
        return NotificationLog.query.filter_by(transaction_id=transaction_id).order_by(NotificationLog.id.asc()).all()

    @staticmethod
    def add(entry: NotificationLog):
        # commit dışarıda, job sonunda tek seferde
        db.session.add(entry)
        return entry
