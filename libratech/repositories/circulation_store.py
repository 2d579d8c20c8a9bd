from datetime import datetime

from libratech.extensions import db
from libratech.models.book import BookStatus
from libratech.models.loan_transaction import LoanTransaction
from libratech.repositories.book_repo import BookRepo
from libratech.repositories.student_repo import StudentRepo
from libratech.repositories.transaction_repo import TransactionRepo


class CirculationStore:
    """
    Tek bir öğretmenin (tenant) kitap/öğrenci/işlem verisine erişim.

    Tüm okumalar ve yazmalar teacher_id ile filtrelenir; başka bir öğretmenin
    kaydı hiçbir koşulda dönmez. Yazma metodları commit etmez, commit/rollback
    çağıran servisin sorumluluğundadır.
    """

    def __init__(self, teacher_id: int):
        self.teacher_id = int(teacher_id)

    # --- okuma
    def find_book_by_token(self, token: str):
        return BookRepo.get_by_isbn(self.teacher_id, token)

    def find_student_by_token(self, token: str):
        return StudentRepo.get_by_number(self.teacher_id, token)

    def get_student(self, student_id: int):
        return StudentRepo.get(self.teacher_id, student_id)

    def history_contains(self, student_id: int, book_id: int) -> bool:
        return StudentRepo.history_contains(student_id, book_id)

    def find_open_transaction_for_book(self, book_id: int):
        return TransactionRepo.first_open_for_book(self.teacher_id, book_id)

    # --- yazma
    def mark_book_borrowed(self, book_id: int) -> bool:
        # yalnızca AVAILABLE ise BORROWED yap
        return BookRepo.compare_and_set_status(
            self.teacher_id, book_id, BookStatus.AVAILABLE, BookStatus.BORROWED
        )

    def set_book_status(self, book_id: int, status: BookStatus) -> None:
        book = BookRepo.get(self.teacher_id, book_id)
        if book:
            book.status = status.value

    def create_transaction(self, book_id: int, student_id: int, issue_date: datetime, due_date: datetime):
        tx = LoanTransaction(
            teacher_id=self.teacher_id,
            book_id=book_id,
            student_id=student_id,
            issue_date=issue_date,
            due_date=due_date,
            is_returned=False,
        )
        TransactionRepo.add(tx)
        db.session.flush()
        return tx

    def mark_transaction_returned(self, transaction_id: int, return_date: datetime) -> bool:
        # yalnızca açık işlem kapatılır
        return TransactionRepo.mark_returned_if_open(self.teacher_id, transaction_id, return_date)

    def append_to_history(self, student_id: int, book_id: int) -> None:
        StudentRepo.add_history_entry(student_id, book_id)

    def remove_from_history(self, student_id: int, book_id: int) -> bool:
        return StudentRepo.remove_one_history_entry(student_id, book_id)

    # --- işlem sınırı
    def commit(self) -> None:
        db.session.commit()

    def rollback(self) -> None:
        db.session.rollback()
