from datetime import datetime
from sqlalchemy import update
from libratech.models.loan_transaction import LoanTransaction
from libratech.extensions import db

class TransactionRepo:
    @staticmethod
    def get(teacher_id: int, transaction_id: int):
        return LoanTransaction.query.filter_by(teacher_id=teacher_id, id=transaction_id).first()

    @staticmethod
    def list_all(teacher_id: int):
        return (
            LoanTransaction.query
            .filter_by(teacher_id=teacher_id)
            .order_by(LoanTransaction.id.desc())
            .all()
        )

    @staticmethod
    def list_open(teacher_id: int):
        return (
            LoanTransaction.query
            .filter_by(teacher_id=teacher_id, is_returned=False)
            .order_by(LoanTransaction.due_date.asc())
            .all()
        )

    @staticmethod
    def list_by_student(teacher_id: int, student_id: int):
        return (
            LoanTransaction.query
            .filter_by(teacher_id=teacher_id, student_id=student_id)
            .order_by(LoanTransaction.issue_date.desc())
            .all()
        )

    @staticmethod
    def first_open_for_book(teacher_id: int, book_id: int):
        return (
            LoanTransaction.query
            .filter_by(teacher_id=teacher_id, book_id=book_id, is_returned=False)
            .order_by(LoanTransaction.id.asc())
            .first()
        )

    @staticmethod
    def count_open_for_book(teacher_id: int, book_id: int) -> int:
        return LoanTransaction.query.filter_by(teacher_id=teacher_id, book_id=book_id, is_returned=False).count()

    @staticmethod
    def count_open_for_student(teacher_id: int, student_id: int) -> int:
        return LoanTransaction.query.filter_by(
            teacher_id=teacher_id, student_id=student_id, is_returned=False
        ).count()

    @staticmethod
    def add(tx: LoanTransaction):
        db.session.add(tx)
        return tx

    @staticmethod
    def find_open_due_before(limit: datetime):
        # tüm öğretmenler: scheduler için
        return LoanTransaction.query.filter(
            LoanTransaction.is_returned.is_(False),
            LoanTransaction.due_date < limit
        ).all()

    @staticmethod
    def find_open_due_between(start: datetime, end: datetime):
        return LoanTransaction.query.filter(
            LoanTransaction.is_returned.is_(False),
            LoanTransaction.due_date >= start,
            LoanTransaction.due_date <= end
        ).all()

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def mark_returned_if_open(teacher_id: int, transaction_id: int, return_date: datetime) -> bool:
        # tek UPDATE: aynı işlemi iki kez kapatmayı engeller, commit etmez
        result = db.session.execute(
            update(LoanTransaction)
            .where(
                LoanTransaction.id == transaction_id,
                LoanTransaction.teacher_id == teacher_id,
                LoanTransaction.is_returned == False,  # noqa: E712
            )
            .values(is_returned=True, return_date=return_date)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1
