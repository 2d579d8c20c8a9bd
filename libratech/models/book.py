from datetime import datetime
from enum import Enum

from libratech.extensions import db


class BookStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    BORROWED = "BORROWED"
    LOST = "LOST"


class Book(db.Model):
    __tablename__ = "books"
    __table_args__ = (
        db.UniqueConstraint("teacher_id", "isbn", name="uq_books_teacher_isbn"),
        # silinen id tekrar verilmez; geçmiş ve defter kayıtları eski id ile kalır
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey("teachers.id"), nullable=False, index=True)

    # QR kodu olarak basılan değer
    isbn = db.Column(db.String(64), nullable=False, index=True)

    title = db.Column(db.String(200), nullable=False, index=True)
    author = db.Column(db.String(200), nullable=False, index=True)
    category = db.Column(db.String(100), nullable=True)

    status = db.Column(db.String(20), nullable=False, default=BookStatus.AVAILABLE.value)

    added_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "isbn": self.isbn,
            "title": self.title,
            "author": self.author,
            "category": self.category,
            "status": self.status,
            "added_date": self.added_date.isoformat() if self.added_date else None,
        }
