from datetime import datetime

import pytest
from werkzeug.security import generate_password_hash

from libratech import create_app
from libratech.config import TestConfig
from libratech.extensions import db
from libratech.models import Book, BookStatus, Student, Teacher
from libratech.repositories.circulation_store import CirculationStore
from libratech.services.circulation_service import CirculationService

NOW = datetime(2026, 3, 2, 9, 30)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def make_teacher(app):
    def _make(email="ogretmen@okul.test", name="Ayşe Öğretmen", role="teacher", password="sifre123"):
        t = Teacher(name=name, email=email, password_hash=generate_password_hash(password), role=role)
        db.session.add(t)
        db.session.commit()
        return t
    return _make


@pytest.fixture
def teacher(make_teacher):
    return make_teacher()


@pytest.fixture
def make_book(teacher):
    def _make(isbn, title=None, category=None, status=BookStatus.AVAILABLE, teacher_id=None):
        b = Book(
            teacher_id=teacher_id or teacher.id,
            isbn=isbn,
            title=title or f"Kitap {isbn}",
            author="Yazar",
            category=category,
            status=status.value,
        )
        db.session.add(b)
        db.session.commit()
        return b
    return _make


@pytest.fixture
def make_student(teacher):
    def _make(number, name=None, grade="4-A", email=None, teacher_id=None):
        s = Student(
            teacher_id=teacher_id or teacher.id,
            student_number=number,
            name=name or f"Öğrenci {number}",
            grade=grade,
            email=email,
        )
        db.session.add(s)
        db.session.commit()
        return s
    return _make


@pytest.fixture
def store(teacher):
    return CirculationStore(teacher.id)


@pytest.fixture
def engine(store):
    return CirculationService(store, clock=lambda: NOW)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(client, teacher):
    resp = client.post("/auth/login", json={"email": teacher.email, "password": "sifre123"})
    token = resp.get_json()["access_token"]
    return {"Authorization": f"Bearer {token}"}
