from collections import Counter
from datetime import datetime

from libratech.extensions import db
from libratech.models.book import Book
from libratech.models.loan_transaction import LoanTransaction
from libratech.models.student import Student
from libratech.models.teacher import Teacher
from libratech.repositories.book_repo import BookRepo
from libratech.repositories.student_repo import StudentRepo
from libratech.repositories.teacher_repo import TeacherRepo
from libratech.repositories.transaction_repo import TransactionRepo


def _days_kept(issue_date: datetime, now: datetime) -> int:
    # başladığı gün de sayılır
    seconds = abs((now - issue_date).total_seconds())
    return max(1, int(-(-seconds // 86400)))


class ReportService:
    @staticmethod
    def active_loans(teacher_id: int, now: datetime | None = None) -> list[dict]:
        """Açık işlemler, kitap ve öğrenci bilgisiyle. Referansı kopmuş işlemler atlanır."""
        now = now or datetime.utcnow()
        txs = TransactionRepo.list_open(teacher_id)
        books = BookRepo.get_many(teacher_id, [t.book_id for t in txs])
        students = StudentRepo.get_many(teacher_id, [t.student_id for t in txs])

        rows = []
        for t in txs:
            book = books.get(t.book_id)
            student = students.get(t.student_id)
            if not book or not student:
                continue
            rows.append({
                **t.to_dict(),
                "book": {"id": book.id, "title": book.title, "isbn": book.isbn},
                "student": {"id": student.id, "name": student.name, "student_number": student.student_number,
                            "grade": student.grade},
                "days_kept": _days_kept(t.issue_date, now),
                "is_overdue": t.is_overdue(now),
            })
        return rows

    @staticmethod
    def dashboard(teacher_id: int, now: datetime | None = None) -> dict:
        loans = ReportService.active_loans(teacher_id, now)
        overdue = sum(1 for x in loans if x["is_overdue"])
        return {
            "active_count": len(loans),
            "overdue_count": overdue,
            "on_time_count": len(loans) - overdue,
            "loans": loans,
        }

    @staticmethod
    def reading_stats(teacher_id: int) -> dict:
        students = StudentRepo.list_all(teacher_id)
        books = {b.id: b for b in BookRepo.list_all(teacher_id)}

        read_counts = Counter()
        for s in students:
            read_counts.update(s.reading_history)

        total_read = sum(read_counts.values())

        top_reader = None
        if students:
            # eşitlikte listede önce gelen kalır
            best = max(students, key=lambda s: len(s.history_entries))
            top_reader = {"id": best.id, "name": best.name, "count": len(best.history_entries)}

        most_read = None
        if read_counts:
            book_id, count = read_counts.most_common(1)[0]
            book = books.get(book_id)
            most_read = {"id": book_id, "title": book.title if book else "Bilinmeyen Kitap", "count": count}

        categories = Counter()
        for book_id, count in read_counts.items():
            book = books.get(book_id)
            categories[(book.category if book and book.category else "Diğer")] += count

        return {
            "total_books_read": total_read,
            "top_reader": top_reader,
            "most_read_book": most_read,
            "category_histogram": dict(categories.most_common()),
            "grades": sorted({s.grade for s in students}),
        }

    @staticmethod
    def admin_stats() -> dict:
        return {
            "teachers": Teacher.query.count(),
            "books": Book.query.count(),
            "students": Student.query.count(),
            "active_loans": LoanTransaction.query.filter(LoanTransaction.is_returned.is_(False)).count(),
            "teacher_list": [
                {"id": t.id, "name": t.name, "email": t.email, "role": t.role}
                for t in TeacherRepo.list_all()
            ],
        }


class ParentViewService:
    """Veli görünümü: giriş gerektirmez, yalnızca okuma yapar."""

    @staticmethod
    def _teacher(teacher_id: int):
        teacher = db.session.get(Teacher, teacher_id)
        if not teacher:
            raise ValueError("Geçersiz Bağlantı")
        return teacher

    @staticmethod
    def search(teacher_id: int, term: str | None) -> dict:
        teacher = ParentViewService._teacher(teacher_id)
        term = (term or "").strip().lower()
        students = StudentRepo.list_all(teacher_id)

        if term:
            if term.isdigit():
                matched = [s for s in students if s.student_number == term]
            else:
                matched = [s for s in students if s.name.strip().lower() == term]
        elif not teacher.parent_view_private:
            matched = students
        else:
            matched = []

        matched.sort(key=lambda s: len(s.history_entries), reverse=True)
        return {
            "private": bool(teacher.parent_view_private),
            "students": [
                {"id": s.id, "name": s.name, "grade": s.grade, "books_read": len(s.history_entries)}
                for s in matched
            ],
        }

    @staticmethod
    def student_detail(teacher_id: int, student_id: int) -> dict:
        ParentViewService._teacher(teacher_id)
        student = StudentRepo.get(teacher_id, student_id)
        if not student:
            raise ValueError("Öğrenci bulunamadı.")

        history = student.reading_history
        txs = TransactionRepo.list_by_student(teacher_id, student.id)
        books = BookRepo.get_many(teacher_id, history + [t.book_id for t in txs])

        def title(book_id):
            book = books.get(book_id)
            return book.title if book else "Bilinmeyen Kitap"

        return {
            "id": student.id,
            "name": student.name,
            "grade": student.grade,
            "books_read": len(history),
            "history": [{"book_id": b, "title": title(b)} for b in history],
            "current_loans": [
                {"book_id": t.book_id, "title": title(t.book_id), "due_date": t.due_date.isoformat(),
                 "is_overdue": t.is_overdue()}
                for t in txs if not t.is_returned
            ],
        }
