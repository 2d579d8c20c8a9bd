import pytest

from libratech.extensions import db
from libratech.models import Book, BookStatus, LoanTransaction
from libratech.repositories.circulation_store import CirculationStore
from libratech.services.circulation_service import CirculationService
from libratech.services.results import BookUnavailable, Issued, Returned, Validation, Verdict
from libratech.services.scan_session import (
    CancelRequested,
    CompleteRequested,
    ResetRequested,
    ScanMode,
    ScanSession,
    ScanSessionError,
    ScanState,
    TokenScanned,
    run_batch,
)

from conftest import NOW


class Clock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

    def advance(self, seconds=1.5):
        self.now += seconds


class RecordingEngine:
    """Mağazasız sahte motor; çağrıları kaydeder."""

    def __init__(self, unavailable=(), broken=(), invalid=()):
        self.unavailable = set(unavailable)
        self.broken = set(broken)
        self.invalid = set(invalid)
        self.calls = []

    def validate_book_for_student(self, token, student_token=None):
        self.calls.append(("validate", token, student_token))
        return Validation(Verdict.NOT_AVAILABLE if token in self.invalid else Verdict.VALID)

    def issue_book(self, token, student_token, loan_days):
        self.calls.append(("issue", token, student_token, loan_days))
        if token in self.broken:
            raise RuntimeError("store down")
        if token in self.unavailable:
            return BookUnavailable()
        return Issued(transaction_id=1, book_id=1, student_id=1, issue_date=None, due_date=None)

    def return_book(self, token):
        self.calls.append(("return", token))
        if token in self.broken:
            raise RuntimeError("store down")
        return Returned(transaction_id=1, book_id=1, return_date=None)


@pytest.fixture
def clock():
    return Clock()


def _issue_session(engine, clock, **kw):
    return ScanSession(ScanMode.ISSUE, engine, loan_days=14, debounce_seconds=1.0, clock=clock, **kw)


def test_issue_session_captures_student_then_books(app, clock):
    engine = RecordingEngine()
    session = _issue_session(engine, clock)
    assert session.state is ScanState.AWAITING_STUDENT

    fb = session.scan("101")
    assert fb.accepted and fb.message == "Öğrenci Tanımlandı"
    assert session.state is ScanState.AWAITING_BOOKS
    assert session.student_token == "101"
    # öğrenci okutulurken mağazaya gidilmez
    assert engine.calls == []

    clock.advance()
    fb = session.scan("978-000")
    assert fb.accepted and fb.message == "Ödünç Listesine Eklendi"
    assert engine.calls == [("validate", "978-000", "101")]
    assert session.book_tokens == ["978-000"]


def test_scans_inside_debounce_window_are_ignored(app, clock):
    engine = RecordingEngine()
    session = _issue_session(engine, clock)
    session.scan("101")

    clock.advance(0.4)
    assert session.scan("101") is None
    clock.advance(0.4)
    assert session.scan("978-000") is None
    assert session.book_tokens == []
    assert engine.calls == []

    clock.advance(1.0)
    assert session.scan("978-000").accepted
    assert len(engine.calls) == 1


def test_duplicate_book_in_batch_is_silently_ignored(app, clock):
    engine = RecordingEngine()
    session = _issue_session(engine, clock)
    session.scan("101")
    clock.advance()
    session.scan("978-000")
    clock.advance()

    assert session.scan("978-000") is None
    assert session.book_tokens == ["978-000"]
    assert engine.calls.count(("validate", "978-000", "101")) == 1


def test_rejected_book_is_not_added(app, clock):
    session = _issue_session(RecordingEngine(invalid={"978-out"}), clock)
    session.scan("101")
    clock.advance()

    fb = session.scan("978-out")

    assert fb.accepted is False
    assert fb.message == "Kitap şu anda ödünçte."
    assert session.book_tokens == []
    assert session.state is ScanState.AWAITING_BOOKS


def test_empty_token_is_ignored(app, clock):
    session = _issue_session(RecordingEngine(), clock)
    assert session.scan("   ") is None
    assert session.state is ScanState.AWAITING_STUDENT


def test_return_session_skips_validation(app, clock):
    engine = RecordingEngine()
    session = ScanSession(ScanMode.RETURN, engine, clock=clock)
    assert session.state is ScanState.AWAITING_BOOKS

    fb = session.scan("978-000")
    assert fb.message == "İade Listesine Eklendi"
    assert engine.calls == []

    report = session.complete()
    assert engine.calls == [("return", "978-000")]
    assert report.is_clean
    assert report.summary == "Toplam 1 kitap başarıyla iade alındı."
    assert session.state is ScanState.DONE


def test_batch_keeps_going_after_failures(app, clock):
    engine = RecordingEngine(unavailable={"b2"}, broken={"b4"})
    session = _issue_session(engine, clock)
    for token in ["101", "b1", "b2", "b3", "b4", "b5"]:
        session.scan(token)
        clock.advance()

    report = session.complete()

    issued = [c[1] for c in engine.calls if c[0] == "issue"]
    assert issued == ["b1", "b2", "b3", "b4", "b5"]
    assert report.success_count == 3
    assert report.failure_count == 2
    assert report.successes == [
        "b1: Kitap başarıyla ödünç verildi.",
        "b3: Kitap başarıyla ödünç verildi.",
        "b5: Kitap başarıyla ödünç verildi.",
    ]
    assert report.failures == ["b2: Kitap şu anda başkasında ödünçte.", "b4: Sistem hatası"]
    assert not report.is_clean
    assert report.summary == "3 kitap başarılı, 2 kitapta hata oluştu."


def test_complete_requires_student_and_books(app, clock):
    session = _issue_session(RecordingEngine(), clock)
    with pytest.raises(ScanSessionError):
        session.complete()

    session.scan("101")
    assert session.can_complete is False
    with pytest.raises(ScanSessionError):
        session.complete()

    empty_return = ScanSession(ScanMode.RETURN, RecordingEngine(), clock=clock)
    with pytest.raises(ScanSessionError):
        empty_return.complete()


def test_cancel_is_a_no_op_for_the_store(app, clock):
    engine = RecordingEngine()
    session = _issue_session(engine, clock)
    session.scan("101")
    clock.advance()
    session.scan("978-000")

    session.cancel()

    assert session.state is ScanState.CANCELLED
    assert [c for c in engine.calls if c[0] != "validate"] == []
    clock.advance()
    assert session.scan("978-111") is None
    with pytest.raises(ScanSessionError):
        session.complete()


def test_finished_session_cannot_be_cancelled_or_fed(app, clock):
    session = ScanSession(ScanMode.RETURN, RecordingEngine(), clock=clock)
    session.scan("978-000")
    session.complete()

    clock.advance()
    assert session.scan("978-111") is None
    with pytest.raises(ScanSessionError):
        session.cancel()


def test_reset_returns_to_student_step(app, clock):
    session = _issue_session(RecordingEngine(), clock)
    session.scan("101")
    clock.advance()
    session.scan("978-000")

    session.reset()

    assert session.state is ScanState.AWAITING_STUDENT
    assert session.student_token is None
    assert session.book_tokens == []


def test_dispatch_drives_the_state_machine(app, clock):
    engine = RecordingEngine()
    session = _issue_session(engine, clock)
    events = [TokenScanned("101"), TokenScanned("b1"), TokenScanned("b2")]
    for event in events:
        session.dispatch(event)
        clock.advance()

    session.dispatch(ResetRequested())
    assert session.book_tokens == []

    for event in events:
        session.dispatch(event)
        clock.advance()
    report = session.dispatch(CompleteRequested())
    assert report.success_count == 2

    other = _issue_session(engine, clock)
    other.dispatch(CancelRequested())
    assert other.state is ScanState.CANCELLED


def test_batch_against_real_store_reports_unavailable_book(app, engine, make_book, make_student):
    make_book("b1")
    make_book("b2", status=BookStatus.BORROWED)
    make_book("b3")
    make_student("101")

    report = run_batch(engine, ScanMode.ISSUE, ["b1", "b2", "b3"], student_token="101", loan_days=14)

    assert report.success_count == 2
    assert report.failure_count == 1
    assert report.failures == ["b2: Kitap şu anda başkasında ödünçte."]
    assert not report.is_clean
    assert LoanTransaction.query.count() == 2


def test_batch_collects_duplicate_read_warnings(app, engine, make_book, make_student):
    make_book("b1")
    make_student("101")
    engine.issue_book("b1", "101", 14)
    engine.return_book("b1")

    report = run_batch(engine, ScanMode.ISSUE, ["b1"], student_token="101", loan_days=14)

    assert report.is_clean
    assert len(report.warnings) == 1
    assert report.warnings[0].startswith("b1: Dikkat!")


class BrokenFlushStore(CirculationStore):
    """İlk kitap okumasında oturuma çakışan bir kayıt ekler; autoflush patlar."""

    def __init__(self, teacher_id):
        super().__init__(teacher_id)
        self.armed = True

    def find_book_by_token(self, token):
        if self.armed:
            self.armed = False
            db.session.add(Book(teacher_id=self.teacher_id, isbn=token, title="Kopya", author="Yazar"))
        return super().find_book_by_token(token)


def test_read_failure_does_not_poison_rest_of_batch(app, teacher, make_book, make_student):
    for isbn in ("978-A", "978-B", "978-C"):
        make_book(isbn)
    make_student("101")
    engine = CirculationService(BrokenFlushStore(teacher.id), clock=lambda: NOW)

    report = run_batch(engine, ScanMode.ISSUE, ["978-A", "978-B", "978-C"], student_token="101", loan_days=14)

    assert report.failures == ["978-A: Sistem hatası"]
    assert report.success_count == 2
    assert LoanTransaction.query.count() == 2
    assert Book.query.count() == 3


def test_validation_failure_does_not_poison_next_scan(app, teacher, clock, make_book, make_student):
    make_book("978-A")
    make_book("978-B")
    make_student("101")
    engine = CirculationService(BrokenFlushStore(teacher.id), clock=lambda: NOW)
    session = _issue_session(engine, clock)

    session.scan("101")
    clock.advance()
    first = session.scan("978-A")
    clock.advance()
    second = session.scan("978-B")

    assert first.accepted is False
    assert first.message == "Hata oluştu."
    assert second.accepted is True
    assert session.book_tokens == ["978-B"]
