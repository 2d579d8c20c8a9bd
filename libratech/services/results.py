"""
Dolaşım (ödünç/iade) işlemlerinin sonuç tipleri.

Her işlem kapalı bir sonuç kümesi döner; iş kuralı ihlalleri exception olarak
fırlatılmaz, aşağıdaki sınıflardan biri olarak döner:

- issue_book  -> Issued | BookNotFound | StudentNotFound | BookUnavailable
- return_book -> Returned | BookNotFound | NoActiveLoan
- remove_book_from_history -> HistoryEntryRemoved | StudentNotFound
- validate_book_for_student -> Validation (Verdict)

SystemFailure sadece toplu işlem raporunda, beklenmeyen hatalar için kullanılır.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class Failure:
    message: str

    success = False

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        return {"success": False, "code": self.code, "message": self.message}


@dataclass(frozen=True)
class BookNotFound(Failure):
    message: str = "Bu ISBN/QR kodu ile kitap bulunamadı."


@dataclass(frozen=True)
class StudentNotFound(Failure):
    message: str = "Bu numara/QR ile öğrenci bulunamadı."


@dataclass(frozen=True)
class BookUnavailable(Failure):
    message: str = "Kitap şu anda başkasında ödünçte."


@dataclass(frozen=True)
class NoActiveLoan(Failure):
    message: str = "Bu kitap şu anda ödünçte görünmüyor."


@dataclass(frozen=True)
class SystemFailure(Failure):
    message: str = "Sistem hatası"


@dataclass(frozen=True)
class DuplicateReadWarning:
    message: str


@dataclass(frozen=True)
class Issued:
    transaction_id: int
    book_id: int
    student_id: int
    issue_date: datetime
    due_date: datetime
    warning: Optional[DuplicateReadWarning] = None
    message: str = "Kitap başarıyla ödünç verildi."

    success = True

    def to_dict(self) -> dict:
        return {
            "success": True,
            "message": self.message,
            "warning": self.warning.message if self.warning else None,
            "data": {
                "transaction_id": self.transaction_id,
                "book_id": self.book_id,
                "student_id": self.student_id,
                "issue_date": self.issue_date.isoformat(),
                "due_date": self.due_date.isoformat(),
            },
        }


@dataclass(frozen=True)
class Returned:
    transaction_id: int
    book_id: int
    return_date: datetime
    message: str = "Kitap envantere başarıyla iade edildi."

    success = True

    def to_dict(self) -> dict:
        return {
            "success": True,
            "message": self.message,
            "data": {
                "transaction_id": self.transaction_id,
                "book_id": self.book_id,
                "return_date": self.return_date.isoformat(),
            },
        }


@dataclass(frozen=True)
class HistoryEntryRemoved:
    student_id: int
    book_id: int
    removed: bool
    message: str = "Kitap geçmişten silindi."

    success = True

    def to_dict(self) -> dict:
        return {"success": True, "message": self.message, "removed": self.removed}


class Verdict(str, Enum):
    VALID = "VALID"
    NOT_FOUND = "NOT_FOUND"
    NOT_AVAILABLE = "NOT_AVAILABLE"
    ALREADY_READ = "ALREADY_READ"


_VERDICT_MESSAGES = {
    Verdict.VALID: "Uygun",
    Verdict.NOT_FOUND: "Kitap bulunamadı.",
    Verdict.NOT_AVAILABLE: "Kitap şu anda ödünçte.",
    Verdict.ALREADY_READ: "Bu öğrenci bu kitabı daha önce okumuş!",
}


@dataclass(frozen=True)
class Validation:
    verdict: Verdict

    @property
    def success(self) -> bool:
        return self.verdict is Verdict.VALID

    @property
    def message(self) -> str:
        return _VERDICT_MESSAGES[self.verdict]

    def to_dict(self) -> dict:
        return {"success": self.success, "type": self.verdict.value, "message": self.message}


IssueResult = Union[Issued, BookNotFound, StudentNotFound, BookUnavailable]
ReturnResult = Union[Returned, BookNotFound, NoActiveLoan]
RemoveFromHistoryResult = Union[HistoryEntryRemoved, StudentNotFound]
