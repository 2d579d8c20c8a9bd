from datetime import datetime

from libratech.extensions import db


class Student(db.Model):
    __tablename__ = "students"
    __table_args__ = (
        db.UniqueConstraint("teacher_id", "student_number", name="uq_students_teacher_number"),
        # silinen id tekrar verilmez; geçmiş ve defter kayıtları eski id ile kalır
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey("teachers.id"), nullable=False, index=True)

    # Öğrenci kartındaki QR değeri
    student_number = db.Column(db.String(64), nullable=False, index=True)

    name = db.Column(db.String(200), nullable=False, index=True)
    grade = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(255), nullable=True)

    history_entries = db.relationship(
        "ReadingHistoryEntry",
        backref="student",
        order_by="ReadingHistoryEntry.id",
        cascade="all, delete-orphan",
    )

    @property
    def reading_history(self) -> list[int]:
        return [e.book_id for e in self.history_entries]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "student_number": self.student_number,
            "name": self.name,
            "grade": self.grade,
            "email": self.email,
            "reading_history": self.reading_history,
        }


class ReadingHistoryEntry(db.Model):
    __tablename__ = "reading_history"

    # id sırası = okuma sırası; aynı kitap birden çok kez yer alabilir
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("students.id"), nullable=False, index=True)

    # kitap silinse bile geçmiş kaydı kalır, bu yüzden FK yok
    book_id = db.Column(db.Integer, nullable=False, index=True)

    added_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
