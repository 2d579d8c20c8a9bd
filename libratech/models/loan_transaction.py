from datetime import datetime

from libratech.extensions import db


class LoanTransaction(db.Model):
    __tablename__ = "transactions"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey("teachers.id"), nullable=False, index=True)

    # defter kayıtları silinmez; kitap/öğrenci silinse de referans kalır
    book_id = db.Column(db.Integer, nullable=False, index=True)
    student_id = db.Column(db.Integer, nullable=False, index=True)

    issue_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    due_date = db.Column(db.DateTime, nullable=False)
    return_date = db.Column(db.DateTime, nullable=True)

    is_returned = db.Column(db.Boolean, nullable=False, default=False, index=True)

    def is_overdue(self, now: datetime | None = None) -> bool:
        now = now or datetime.utcnow()
        return not self.is_returned and now > self.due_date

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "book_id": self.book_id,
            "student_id": self.student_id,
            "issue_date": self.issue_date.isoformat() if self.issue_date else None,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "return_date": self.return_date.isoformat() if self.return_date else None,
            "is_returned": bool(self.is_returned),
        }
