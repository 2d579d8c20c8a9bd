from libratech.models.teacher import Teacher
from libratech.extensions import db

class TeacherRepo:
    @staticmethod
    def get_by_email(email: str):
        return Teacher.query.filter_by(email=email).first()

    @staticmethod
    def get_by_id(teacher_id: int):
        return db.session.get(Teacher, teacher_id)

    @staticmethod
    def list_all():
        return Teacher.query.order_by(Teacher.id.asc()).all()

    @staticmethod
    def create(teacher: Teacher):
        db.session.add(teacher)
        db.session.commit()
        return teacher

    @staticmethod
    def update():
        db.session.commit()
