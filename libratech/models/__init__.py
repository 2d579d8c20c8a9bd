from libratech.models.teacher import Teacher
from libratech.models.book import Book, BookStatus
from libratech.models.student import Student, ReadingHistoryEntry
from libratech.models.loan_transaction import LoanTransaction
from libratech.models.notification_log import NotificationLog

__all__ = [
    "Teacher",
    "Book",
    "BookStatus",
    "Student",
    "ReadingHistoryEntry",
    "LoanTransaction",
    "NotificationLog",
]
