from datetime import datetime, timedelta
from typing import Callable, Optional

from flask import current_app

from libratech.models.book import BookStatus
from libratech.repositories.circulation_store import CirculationStore
from libratech.services.results import (
    BookNotFound,
    BookUnavailable,
    DuplicateReadWarning,
    HistoryEntryRemoved,
    Issued,
    IssueResult,
    NoActiveLoan,
    RemoveFromHistoryResult,
    Returned,
    ReturnResult,
    StudentNotFound,
    Validation,
    Verdict,
)


class CirculationService:
    """
    Ödünç verme / iade karar mantığı.

    Servis çağrılar arasında durum tutmaz; her karar öncesi kitap ve öğrenci
    mağazadan yeniden okunur. Tenant, store üzerinden açıkça verilir.
    """

    def __init__(self, store: CirculationStore, clock: Optional[Callable[[], datetime]] = None,
                 max_loan_days: Optional[int] = None):
        self.store = store
        self.clock = clock or datetime.utcnow
        self.max_loan_days = max_loan_days

    @classmethod
    def for_teacher(cls, teacher_id: int):
        return cls(
            CirculationStore(teacher_id),
            max_loan_days=current_app.config.get("MAX_LOAN_DAYS"),
        )

    def check_loan_days(self, loan_days: int) -> None:
        if loan_days is None or int(loan_days) <= 0:
            raise ValueError("Ödünç süresi pozitif olmalı")
        if self.max_loan_days and int(loan_days) > self.max_loan_days:
            raise ValueError(f"Ödünç süresi en fazla {self.max_loan_days} gün olabilir")

    def issue_book(self, book_token: str, student_token: str, loan_days: int) -> IssueResult:
        self.check_loan_days(loan_days)
        # hata olursa okumalar dahil oturum geri alınır
        try:
            return self._issue(book_token, student_token, int(loan_days))
        except Exception:
            self.store.rollback()
            raise

    def _issue(self, book_token: str, student_token: str, loan_days: int) -> IssueResult:
        book = self.store.find_book_by_token(book_token)
        if not book:
            return BookNotFound()

        student = self.store.find_student_by_token(student_token)
        if not student:
            return StudentNotFound()

        if book.status != BookStatus.AVAILABLE.value:
            return BookUnavailable()

        warning = None
        if self.store.history_contains(student.id, book.id):
            warning = DuplicateReadWarning(
                f'Dikkat! {student.name} isimli öğrenci "{book.title}" kitabını daha önce okumuş.'
            )

        now = self.clock()
        due = now + timedelta(days=loan_days)

        # okuma ile yazma arasında başka bir terminal kitabı vermiş olabilir
        if not self.store.mark_book_borrowed(book.id):
            self.store.rollback()
            current_app.logger.warning(
                f"[circulation] issue lost race teacher={self.store.teacher_id} isbn={book_token}"
            )
            return BookUnavailable()

        tx = self.store.create_transaction(book.id, student.id, now, due)
        self.store.append_to_history(student.id, book.id)

        # tek commit: durum + işlem + geçmiş birlikte yazılır
        self.store.commit()

        current_app.logger.info(
            f"[circulation] issued teacher={self.store.teacher_id} isbn={book_token} "
            f"student={student_token} tx={tx.id} due={due.date()}"
        )
        return Issued(
            transaction_id=tx.id,
            book_id=book.id,
            student_id=student.id,
            issue_date=now,
            due_date=due,
            warning=warning,
        )

    def return_book(self, book_token: str) -> ReturnResult:
        try:
            return self._return(book_token)
        except Exception:
            self.store.rollback()
            raise

    def _return(self, book_token: str) -> ReturnResult:
        book = self.store.find_book_by_token(book_token)
        if not book:
            return BookNotFound("Kitap bulunamadı.")

        tx = self.store.find_open_transaction_for_book(book.id)
        if not tx:
            return NoActiveLoan()

        now = self.clock()
        if not self.store.mark_transaction_returned(tx.id, now):
            self.store.rollback()
            return NoActiveLoan()

        self.store.set_book_status(book.id, BookStatus.AVAILABLE)
        self.store.commit()

        current_app.logger.info(
            f"[circulation] returned teacher={self.store.teacher_id} isbn={book_token} tx={tx.id}"
        )
        return Returned(transaction_id=tx.id, book_id=book.id, return_date=now)

    def validate_book_for_student(self, book_token: str, student_token: Optional[str] = None) -> Validation:
        """Tarama sırasında ön kontrol. Hiçbir şey yazmaz; sonuç sadece tavsiyedir."""
        try:
            book = self.store.find_book_by_token(book_token)
            if not book:
                return Validation(Verdict.NOT_FOUND)

            if book.status != BookStatus.AVAILABLE.value:
                return Validation(Verdict.NOT_AVAILABLE)

            if student_token:
                student = self.store.find_student_by_token(student_token)
                if student and self.store.history_contains(student.id, book.id):
                    return Validation(Verdict.ALREADY_READ)

            return Validation(Verdict.VALID)
        except Exception:
            self.store.rollback()
            raise

    def remove_book_from_history(self, student_id: int, book_id: int) -> RemoveFromHistoryResult:
        student = self.store.get_student(student_id)
        if not student:
            return StudentNotFound("Öğrenci bulunamadı.")

        try:
            removed = self.store.remove_from_history(student.id, book_id)
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise

        return HistoryEntryRemoved(student_id=student.id, book_id=book_id, removed=removed)
