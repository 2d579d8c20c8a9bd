# libratech/tasks/overdue_check.py
from datetime import datetime, timedelta
from flask import current_app

from libratech.extensions import db
from libratech.repositories.book_repo import BookRepo
from libratech.repositories.notification_repo import NotificationRepo
from libratech.repositories.student_repo import StudentRepo
from libratech.repositories.transaction_repo import TransactionRepo
from libratech.services.mail_service import MailService


def _notify(rows, notif_type: str) -> int:
    sent = 0
    for tx in rows:
        # aynı işlem için aynı tip hatırlatma bir kez
        if NotificationRepo.already_sent(tx.id, notif_type):
            continue

        # tenant: işlemin kendi öğretmeni
        student = StudentRepo.get(tx.teacher_id, tx.student_id)
        book = BookRepo.get(tx.teacher_id, tx.book_id)
        if MailService.send_loan_reminder(tx, student, book, notif_type):
            sent += 1
    return sent


def run_overdue_check(now: datetime | None = None) -> dict:
    """
    Açık işlemleri kontrol eder (app context içinde çağrılmalı).
    - overdue: due_date geçmiş
    - due_soon: due_date DUE_SOON_DAYS gün içinde
    Hata olursa rollback yapılır ve loglanır, yukarı fırlatılmaz.
    """
    now = now or datetime.utcnow()
    due_soon_limit = now + timedelta(days=current_app.config.get("DUE_SOON_DAYS", 1))

    try:
        overdue_rows = TransactionRepo.find_open_due_before(now)
        due_soon_rows = TransactionRepo.find_open_due_between(now, due_soon_limit)

        stats = {
            "overdue": len(overdue_rows),
            "due_soon": len(due_soon_rows),
            "mail_overdue_sent": _notify(overdue_rows, "overdue"),
            "mail_due_soon_sent": _notify(due_soon_rows, "due_soon"),
        }

        # tek commit
        db.session.commit()

        current_app.logger.info(
            f"[overdue_check] overdue={stats['overdue']} due_soon={stats['due_soon']} "
            f"mail_overdue_sent={stats['mail_overdue_sent']} mail_due_soon_sent={stats['mail_due_soon_sent']}"
        )
        return stats

    except Exception as e:
        db.session.rollback()
        current_app.logger.exception(f"[overdue_check] Hata: {e}")
        return {"error": str(e)}
