from sqlalchemy import or_, update

from libratech.models.book import Book, BookStatus
from libratech.extensions import db

class BookRepo:
    @staticmethod
    def list_all(teacher_id: int):
        return Book.query.filter_by(teacher_id=teacher_id).order_by(Book.id.desc()).all()

    @staticmethod
    def search(teacher_id: int, text: str):
        pattern = f"%{text.strip()}%"
        return (
            Book.query
            .filter(Book.teacher_id == teacher_id)
            .filter(or_(
                Book.title.ilike(pattern),
                Book.author.ilike(pattern),
                Book.isbn.ilike(pattern),
                Book.category.ilike(pattern),
            ))
            .order_by(Book.id.desc())
            .all()
        )

    @staticmethod
    def get(teacher_id: int, book_id: int):
        return Book.query.filter_by(teacher_id=teacher_id, id=book_id).first()

    @staticmethod
    def get_by_isbn(teacher_id: int, isbn: str):
        return Book.query.filter_by(teacher_id=teacher_id, isbn=isbn).first()

    @staticmethod
    def get_many(teacher_id: int, book_ids):
        ids = set(book_ids)
        if not ids:
            return {}
        rows = Book.query.filter(Book.teacher_id == teacher_id, Book.id.in_(ids)).all()
        return {b.id: b for b in rows}

    @staticmethod
    def compare_and_set_status(teacher_id: int, book_id: int, expected: BookStatus, new: BookStatus) -> bool:
        """
        Tek UPDATE ile koşullu durum değişimi. Commit etmez.
        return: satır değiştiyse True
        """
        result = db.session.execute(
            update(Book)
            .where(
                Book.id == book_id,
                Book.teacher_id == teacher_id,
                Book.status == expected.value,
            )
            .values(status=new.value)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1

    @staticmethod
    def create(book: Book):
        db.session.add(book)
        db.session.commit()
        return book

    @staticmethod
    def update():
        db.session.commit()

    @staticmethod
    def delete(book: Book):
        db.session.delete(book)
        db.session.commit()
