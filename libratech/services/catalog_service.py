from flask import current_app

from libratech.models.book import Book, BookStatus
from libratech.models.student import Student
from libratech.repositories.book_repo import BookRepo
from libratech.repositories.student_repo import StudentRepo
from libratech.repositories.transaction_repo import TransactionRepo
from libratech.utils.payload import text


def _required(data: dict, *keys):
    values = {}
    for k in keys:
        v = text(data, k)
        if not v:
            raise KeyError(k)
        values[k] = v
    return values


class CatalogService:
    BOOK_FIELDS = ("title", "author", "isbn", "category")
    STUDENT_FIELDS = ("name", "student_number", "grade", "email")

    # --- kitaplar
    @staticmethod
    def list_books(teacher_id: int, q: str | None = None):
        if q and q.strip():
            return BookRepo.search(teacher_id, q)
        return BookRepo.list_all(teacher_id)

    @staticmethod
    def get_book(teacher_id: int, book_id: int):
        book = BookRepo.get(teacher_id, book_id)
        if not book:
            raise ValueError("Kitap bulunamadı")
        return book

    @staticmethod
    def add_book(teacher_id: int, data: dict):
        values = _required(data, "title", "author", "isbn")

        if BookRepo.get_by_isbn(teacher_id, values["isbn"]):
            raise ValueError("Bu ISBN numarasına sahip bir kitap zaten var.")

        book = Book(
            teacher_id=teacher_id,
            title=values["title"],
            author=values["author"],
            isbn=values["isbn"],
            category=text(data, "category") or None,
            status=BookStatus.AVAILABLE.value,  # yeni kitap her zaman rafta
        )
        return BookRepo.create(book)

    @staticmethod
    def update_book(teacher_id: int, book_id: int, data: dict):
        book = CatalogService.get_book(teacher_id, book_id)

        if "isbn" in data:
            isbn = text(data, "isbn")
            if not isbn:
                raise ValueError("isbn boş olamaz")
            other = BookRepo.get_by_isbn(teacher_id, isbn)
            if other and other.id != book.id:
                raise ValueError("Bu ISBN numarasına sahip bir kitap zaten var.")
            book.isbn = isbn

        for k in ("title", "author"):
            if k in data and data[k] is not None:
                value = str(data[k]).strip()
                if not value:
                    raise ValueError(f"{k} boş olamaz")
                setattr(book, k, value)

        if "category" in data:
            book.category = text(data, "category") or None

        BookRepo.update()
        return book

    @staticmethod
    def mark_book_lost(teacher_id: int, book_id: int):
        book = CatalogService.get_book(teacher_id, book_id)
        if book.status == BookStatus.BORROWED.value:
            raise ValueError("Bu kitap aktif ödünçte. Önce iade alınmalı.")
        book.status = BookStatus.LOST.value
        BookRepo.update()
        return book

    @staticmethod
    def mark_book_found(teacher_id: int, book_id: int):
        book = CatalogService.get_book(teacher_id, book_id)
        if book.status != BookStatus.LOST.value:
            raise ValueError("Kitap kayıp olarak işaretli değil")
        book.status = BookStatus.AVAILABLE.value
        BookRepo.update()
        return book

    @staticmethod
    def delete_book(teacher_id: int, book_id: int):
        book = CatalogService.get_book(teacher_id, book_id)
        if TransactionRepo.count_open_for_book(teacher_id, book.id) > 0:
            raise ValueError("Bu kitap aktif ödünçte. Önce iadeler tamamlanmalı.")
        BookRepo.delete(book)
        current_app.logger.info(f"[catalog] book deleted teacher={teacher_id} id={book_id}")

    # --- öğrenciler
    @staticmethod
    def list_students(teacher_id: int, q: str | None = None):
        if q and q.strip():
            return StudentRepo.search(teacher_id, q)
        return StudentRepo.list_all(teacher_id)

    @staticmethod
    def get_student(teacher_id: int, student_id: int):
        student = StudentRepo.get(teacher_id, student_id)
        if not student:
            raise ValueError("Öğrenci bulunamadı.")
        return student

    @staticmethod
    def add_student(teacher_id: int, data: dict):
        values = _required(data, "name", "student_number", "grade")

        if StudentRepo.get_by_number(teacher_id, values["student_number"]):
            raise ValueError("Bu numaraya sahip bir öğrenci zaten kayıtlı.")

        student = Student(
            teacher_id=teacher_id,
            name=values["name"],
            student_number=values["student_number"],
            grade=values["grade"],
            email=text(data, "email") or None,
        )
        return StudentRepo.create(student)

    @staticmethod
    def update_student(teacher_id: int, student_id: int, data: dict):
        student = CatalogService.get_student(teacher_id, student_id)

        if "student_number" in data:
            number = text(data, "student_number")
            if not number:
                raise ValueError("student_number boş olamaz")
            other = StudentRepo.get_by_number(teacher_id, number)
            if other and other.id != student.id:
                raise ValueError("Bu numaraya sahip bir öğrenci zaten kayıtlı.")
            student.student_number = number

        for k in ("name", "grade"):
            if k in data and data[k] is not None:
                value = str(data[k]).strip()
                if not value:
                    raise ValueError(f"{k} boş olamaz")
                setattr(student, k, value)

        if "email" in data:
            student.email = text(data, "email") or None

        StudentRepo.update()
        return student

    @staticmethod
    def delete_student(teacher_id: int, student_id: int):
        student = CatalogService.get_student(teacher_id, student_id)
        if TransactionRepo.count_open_for_student(teacher_id, student.id) > 0:
            raise ValueError("Öğrencinin iade etmediği kitaplar var. Önce iadeler tamamlanmalı.")
        # okuma geçmişi öğrenciyle birlikte silinir, işlem kayıtları kalır
        StudentRepo.delete(student)
        current_app.logger.info(f"[catalog] student deleted teacher={teacher_id} id={student_id}")

    @staticmethod
    def student_history(teacher_id: int, student_id: int) -> list[dict]:
        """Okuma geçmişi, okunma sırasıyla. Silinmiş kitaplar 'Bilinmeyen Kitap' olarak görünür."""
        student = CatalogService.get_student(teacher_id, student_id)
        history = student.reading_history
        books = BookRepo.get_many(teacher_id, history)

        rows = []
        for book_id in history:
            book = books.get(book_id)
            rows.append({
                "book_id": book_id,
                "title": book.title if book else "Bilinmeyen Kitap",
                "author": book.author if book else None,
                "category": book.category if book else None,
            })
        return rows
