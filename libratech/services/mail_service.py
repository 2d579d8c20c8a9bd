# libratech/services/mail_service.py
from __future__ import annotations

from datetime import datetime
from flask import current_app
from flask_mail import Message

from libratech.extensions import mail
from libratech.models.notification_log import NotificationLog
from libratech.repositories.notification_repo import NotificationRepo


class MailService:
    @staticmethod
    def send_email(to_email: str, subject: str, body: str) -> tuple[bool, str | None]:
        """
        return: (success, error_text)
        """
        try:
            msg = Message(subject=subject, recipients=[to_email], body=body)
            mail.send(msg)
            return True, None
        except Exception as e:
            current_app.logger.warning(f"[mail] Mail gönderilemedi: {e}")
            return False, str(e)

    @staticmethod
    def log_notification(
        transaction_id: int,
        notif_type: str,
        to_email: str | None,
        message: str,
        success: bool,
        error: str | None = None,
    ) -> NotificationLog:
        # commit yok: job sonunda tek commit
        row = NotificationLog(
            transaction_id=transaction_id,
            type=notif_type,
            email=to_email,
            message=message,
            success=bool(success),
            error_message=error,
            sent_at=datetime.utcnow(),
        )
        return NotificationRepo.add(row)

    @staticmethod
    def _bodies(notif_type: str, student_name: str, book_title: str, due_date) -> tuple[str, str]:
        if notif_type == "overdue":
            subject = "Kütüphane: Geciken kitap iadesi"
            body = (
                f"Merhaba {student_name},\n\n"
                f"'{book_title}' kitabının teslim tarihi geçti.\n"
                f"Teslim tarihi: {due_date:%d.%m.%Y}\n\n"
                f"Lütfen en kısa sürede iade ediniz.\n"
            )
        else:
            subject = "Kütüphane: Teslim tarihi yaklaşıyor"
            body = (
                f"Merhaba {student_name},\n\n"
                f"'{book_title}' kitabının teslim tarihi yaklaşıyor.\n"
                f"Teslim tarihi: {due_date:%d.%m.%Y}\n\n"
                f"İade etmeyi unutmayınız.\n"
            )
        return subject, body

    @staticmethod
    def send_loan_reminder(tx, student, book, notif_type: str) -> bool:
        """
        Öğrenciye hatırlatma maili yollar ve loglar.
        notif_type: overdue / due_soon
        """
        student_name = getattr(student, "name", None) or "Öğrenci"
        book_title = getattr(book, "title", None) or "Kitap"
        to_email = getattr(student, "email", None)

        if not to_email:
            MailService.log_notification(
                transaction_id=tx.id,
                notif_type=notif_type,
                to_email=None,
                message="Öğrenci e-postası bulunamadı",
                success=False,
                error="missing_email",
            )
            return False

        subject, body = MailService._bodies(notif_type, student_name, book_title, tx.due_date)
        ok, err = MailService.send_email(to_email, subject, body)

        MailService.log_notification(
            transaction_id=tx.id,
            notif_type=notif_type,
            to_email=to_email,
            message="Mail gönderildi" if ok else "Mail gönderilemedi",
            success=ok,
            error=err,
        )
        return ok
