from sqlalchemy import or_

from libratech.models.student import Student, ReadingHistoryEntry
from libratech.extensions import db

class StudentRepo:
    @staticmethod
    def list_all(teacher_id: int):
        return Student.query.filter_by(teacher_id=teacher_id).order_by(Student.name.asc()).all()

    @staticmethod
    def search(teacher_id: int, text: str):
        pattern = f"%{text.strip()}%"
        return (
            Student.query
            .filter(Student.teacher_id == teacher_id)
            .filter(or_(Student.name.ilike(pattern), Student.student_number.ilike(pattern)))
            .order_by(Student.name.asc())
            .all()
        )

    @staticmethod
    def get(teacher_id: int, student_id: int):
        return Student.query.filter_by(teacher_id=teacher_id, id=student_id).first()

    @staticmethod
    def get_by_number(teacher_id: int, student_number: str):
        return Student.query.filter_by(teacher_id=teacher_id, student_number=student_number).first()

    @staticmethod
    def get_many(teacher_id: int, student_ids):
        ids = set(student_ids)
        if not ids:
            return {}
        rows = Student.query.filter(Student.teacher_id == teacher_id, Student.id.in_(ids)).all()
        return {s.id: s for s in rows}

    @staticmethod
    def create(student: Student):
        db.session.add(student)
        db.session.commit()
        return student

    @staticmethod
    def update():
        db.session.commit()

    @staticmethod
    def delete(student: Student):
        db.session.delete(student)
        db.session.commit()

    # okuma geçmişi
    @staticmethod
    def history_contains(student_id: int, book_id: int) -> bool:
        return ReadingHistoryEntry.query.filter_by(student_id=student_id, book_id=book_id).first() is not None

    @staticmethod
    def add_history_entry(student_id: int, book_id: int) -> ReadingHistoryEntry:
        entry = ReadingHistoryEntry(student_id=student_id, book_id=book_id)
        db.session.add(entry)
        return entry

    @staticmethod
    def remove_one_history_entry(student_id: int, book_id: int) -> bool:
        # en son eklenen kayıt silinir
        entry = (
            ReadingHistoryEntry.query
            .filter_by(student_id=student_id, book_id=book_id)
            .order_by(ReadingHistoryEntry.id.desc())
            .first()
        )
        if not entry:
            return False
        db.session.delete(entry)
        return True
