"""
Toplu tarama oturumu (QR ile çoklu ödünç / iade).

Kamera sürekli kod okur ve her okumayı oturuma iletir. Oturum ekranla ilgili
hiçbir şey bilmez; olayları (okuma, tamamla, iptal, sıfırla) sırayla işler:

    ödünç: AWAITING_STUDENT -> AWAITING_BOOKS -> COMMITTING -> DONE
    iade:  AWAITING_BOOKS -> COMMITTING -> DONE

Tamamlanana kadar mağazaya hiçbir yazma yapılmaz, bu yüzden iptal her zaman
temizdir. COMMITTING başladıktan sonra iptal edilemez; kuyruktaki tüm kitaplar
sırayla işlenir ve bir kitaptaki hata diğerlerini durdurmaz.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Union

from flask import current_app

from libratech.extensions import db
from libratech.services.results import SystemFailure


class ScanMode(str, Enum):
    ISSUE = "ISSUE"
    RETURN = "RETURN"


class ScanState(str, Enum):
    AWAITING_STUDENT = "AWAITING_STUDENT"
    AWAITING_BOOKS = "AWAITING_BOOKS"
    COMMITTING = "COMMITTING"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


class ScanSessionError(ValueError):
    pass


# --- olaylar
@dataclass(frozen=True)
class TokenScanned:
    token: str


@dataclass(frozen=True)
class CompleteRequested:
    pass


@dataclass(frozen=True)
class CancelRequested:
    pass


@dataclass(frozen=True)
class ResetRequested:
    pass


ScanEvent = Union[TokenScanned, CompleteRequested, CancelRequested, ResetRequested]


@dataclass(frozen=True)
class ScanFeedback:
    token: str
    accepted: bool
    message: str

    def to_dict(self) -> dict:
        return {"token": self.token, "accepted": self.accepted, "message": self.message}


@dataclass
class BatchReport:
    mode: ScanMode
    successes: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.successes)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def total(self) -> int:
        return self.success_count + self.failure_count

    @property
    def is_clean(self) -> bool:
        return not self.failures

    @property
    def summary(self) -> str:
        if self.is_clean:
            verb = "ödünç verildi" if self.mode is ScanMode.ISSUE else "iade alındı"
            return f"Toplam {self.success_count} kitap başarıyla {verb}."
        return f"{self.success_count} kitap başarılı, {self.failure_count} kitapta hata oluştu."

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "successes": list(self.successes),
            "failures": list(self.failures),
            "warnings": list(self.warnings),
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "is_clean": self.is_clean,
            "summary": self.summary,
        }


def run_batch(engine, mode: ScanMode, book_tokens, student_token: Optional[str] = None,
              loan_days: int = 14) -> BatchReport:
    """
    Kitapları sırayla işler. Her kitabın sonucu rapora yazılır; beklenmeyen
    hata o kitabın hatası olarak kaydedilir ve döngü devam eder.
    """
    report = BatchReport(mode=mode)

    for token in book_tokens:
        try:
            if mode is ScanMode.ISSUE:
                result = engine.issue_book(token, student_token, loan_days)
            else:
                result = engine.return_book(token)
        except Exception as e:
            db.session.rollback()
            current_app.logger.exception(f"[scan] batch item failed token={token}: {e}")
            result = SystemFailure()

        if result.success:
            report.successes.append(f"{token}: {result.message}")
            warning = getattr(result, "warning", None)
            if warning:
                report.warnings.append(f"{token}: {warning.message}")
        else:
            report.failures.append(f"{token}: {result.message}")

    current_app.logger.info(
        f"[scan] batch done mode={mode.value} ok={report.success_count} failed={report.failure_count}"
    )
    return report


class ScanSession:
    def __init__(self, mode: ScanMode, engine, loan_days: int = 14, debounce_seconds: float = 1.0,
                 clock: Optional[Callable[[], float]] = None):
        self.mode = ScanMode(mode)
        self.engine = engine
        self.loan_days = loan_days
        self.debounce_seconds = debounce_seconds
        self.clock = clock or time.monotonic

        self.state = ScanState.AWAITING_STUDENT if self.mode is ScanMode.ISSUE else ScanState.AWAITING_BOOKS
        self.student_token: Optional[str] = None
        self.book_tokens: List[str] = []
        self.report: Optional[BatchReport] = None

        self._last_scan_at: Optional[float] = None
        self.last_activity = self.clock()
        self._lock = threading.RLock()

    # --- yardımcılar
    @property
    def is_collecting(self) -> bool:
        return self.state in (ScanState.AWAITING_STUDENT, ScanState.AWAITING_BOOKS)

    @property
    def can_complete(self) -> bool:
        if self.state is not ScanState.AWAITING_BOOKS or not self.book_tokens:
            return False
        return self.mode is ScanMode.RETURN or bool(self.student_token)

    def _debounced(self) -> bool:
        now = self.clock()
        if self._last_scan_at is not None and now - self._last_scan_at < self.debounce_seconds:
            return True
        # pencere hemen kilitlenir, okuma reddedilse bile
        self._last_scan_at = now
        return False

    # --- olay işleme
    def dispatch(self, event: ScanEvent):
        if isinstance(event, TokenScanned):
            return self.scan(event.token)
        if isinstance(event, CompleteRequested):
            return self.complete()
        if isinstance(event, CancelRequested):
            return self.cancel()
        if isinstance(event, ResetRequested):
            return self.reset()
        raise ScanSessionError(f"Bilinmeyen olay: {event!r}")

    def scan(self, token: str) -> Optional[ScanFeedback]:
        """
        Bir okuma işler. Yok sayılan okumalarda (debounce, listede zaten var,
        toplama durumunda değil, boş kod) None döner.
        """
        token = str(token if token is not None else "").strip()
        if not token:
            return None

        with self._lock:
            self.last_activity = self.clock()
            if not self.is_collecting:
                return None
            if self._debounced():
                return None

            if self.state is ScanState.AWAITING_STUDENT:
                self.student_token = token
                self.state = ScanState.AWAITING_BOOKS
                return ScanFeedback(token, True, "Öğrenci Tanımlandı")

            if token in self.book_tokens:
                return None

            if self.mode is ScanMode.ISSUE:
                try:
                    validation = self.engine.validate_book_for_student(token, self.student_token)
                except Exception as e:
                    db.session.rollback()
                    current_app.logger.exception(f"[scan] validation failed token={token}: {e}")
                    return ScanFeedback(token, False, "Hata oluştu.")
                if not validation.success:
                    return ScanFeedback(token, False, validation.message)
                self.book_tokens.append(token)
                return ScanFeedback(token, True, "Ödünç Listesine Eklendi")

            self.book_tokens.append(token)
            return ScanFeedback(token, True, "İade Listesine Eklendi")

    def reset(self) -> None:
        with self._lock:
            self.last_activity = self.clock()
            if not self.is_collecting:
                raise ScanSessionError("Oturum sıfırlanamaz")
            self.student_token = None
            self.book_tokens = []
            self.state = ScanState.AWAITING_STUDENT if self.mode is ScanMode.ISSUE else ScanState.AWAITING_BOOKS

    def cancel(self) -> None:
        with self._lock:
            if not self.is_collecting:
                raise ScanSessionError("İşlem başladıktan sonra iptal edilemez")
            self.state = ScanState.CANCELLED

    def complete(self) -> BatchReport:
        with self._lock:
            if not self.can_complete:
                if self.mode is ScanMode.ISSUE and not self.student_token:
                    raise ScanSessionError("Önce öğrenci kartını okutun")
                raise ScanSessionError("Tamamlanacak kitap yok")
            self.state = ScanState.COMMITTING

        # COMMITTING: yeni okumalar yok sayılır, kitaplar sırayla işlenir
        self.report = run_batch(
            self.engine,
            self.mode,
            list(self.book_tokens),
            student_token=self.student_token,
            loan_days=self.loan_days,
        )
        self.state = ScanState.DONE
        return self.report

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "state": self.state.value,
            "student_token": self.student_token,
            "book_tokens": list(self.book_tokens),
            "can_complete": self.can_complete,
            "report": self.report.to_dict() if self.report else None,
        }
