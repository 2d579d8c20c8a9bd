from datetime import timedelta

import pytest

from libratech.extensions import db
from libratech.models import LoanTransaction
from libratech.services.report_service import ParentViewService, ReportService

from conftest import NOW


@pytest.fixture
def library(engine, make_book, make_student):
    make_book("b1", title="Simyacı", category="Roman")
    make_book("b2", title="Nutuk", category="Tarih")
    make_book("b3", title="Dede Korkut", category="Roman")
    make_student("101", name="Ali Yılmaz", grade="4-A")
    make_student("102", name="Elif Demir", grade="4-B")

    engine.issue_book("b1", "101", 14)
    engine.return_book("b1")
    engine.issue_book("b1", "102", 14)
    engine.issue_book("b2", "101", 7)
    engine.return_book("b2")
    engine.issue_book("b3", "101", 30)
    return engine


def test_reading_stats(teacher, library):
    stats = ReportService.reading_stats(teacher.id)

    assert stats["total_books_read"] == 4
    assert stats["top_reader"]["name"] == "Ali Yılmaz"
    assert stats["top_reader"]["count"] == 3
    assert stats["most_read_book"]["title"] == "Simyacı"
    assert stats["category_histogram"] == {"Roman": 3, "Tarih": 1}
    assert stats["grades"] == ["4-A", "4-B"]


def test_dashboard_counts_overdue(teacher, library):
    later = NOW + timedelta(days=20)

    board = ReportService.dashboard(teacher.id, now=later)

    assert board["active_count"] == 2
    assert board["overdue_count"] == 1
    assert board["on_time_count"] == 1
    overdue = [x for x in board["loans"] if x["is_overdue"]]
    assert overdue[0]["book"]["isbn"] == "b1"
    assert overdue[0]["days_kept"] == 20


def test_admin_stats(teacher, library):
    stats = ReportService.admin_stats()
    assert stats["teachers"] == 1
    assert stats["books"] == 3
    assert stats["active_loans"] == LoanTransaction.query.filter_by(is_returned=False).count()


def test_parent_search_private_by_default(teacher, library):
    assert ParentViewService.search(teacher.id, "")["students"] == []

    by_number = ParentViewService.search(teacher.id, "102")["students"]
    assert [s["name"] for s in by_number] == ["Elif Demir"]

    by_name = ParentViewService.search(teacher.id, "  ali yılmaz ")["students"]
    assert [s["books_read"] for s in by_name] == [3]

    # kısmi isim eşleşmez
    assert ParentViewService.search(teacher.id, "ali")["students"] == []


def test_parent_search_lists_all_when_public(teacher, library):
    teacher.parent_view_private = False
    db.session.commit()

    students = ParentViewService.search(teacher.id, None)["students"]

    assert [s["name"] for s in students] == ["Ali Yılmaz", "Elif Demir"]


def test_parent_student_detail(teacher, library):
    ali = ParentViewService.search(teacher.id, "101")["students"][0]

    detail = ParentViewService.student_detail(teacher.id, ali["id"])

    assert [h["title"] for h in detail["history"]] == ["Simyacı", "Nutuk", "Dede Korkut"]
    assert [c["title"] for c in detail["current_loans"]] == ["Dede Korkut"]


def test_parent_view_unknown_teacher(app):
    with pytest.raises(ValueError):
        ParentViewService.search(999, "101")
