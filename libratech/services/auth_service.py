from werkzeug.security import generate_password_hash, check_password_hash
from flask_jwt_extended import create_access_token
from libratech.models.teacher import Teacher
from libratech.repositories.teacher_repo import TeacherRepo

class AuthService:
    @staticmethod
    def register(name: str, email: str, password: str, role: str = "teacher"):
        if TeacherRepo.get_by_email(email):
            raise ValueError("Bu e-posta ile kayıtlı bir hesap zaten var")

        teacher = Teacher(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role
        )
        TeacherRepo.create(teacher)
        return teacher

    @staticmethod
    def login(email: str, password: str):
        teacher = TeacherRepo.get_by_email(email)
        if not teacher or not check_password_hash(teacher.password_hash, password):
            raise ValueError("Hatalı e-posta veya şifre")

        # identity = tenant; servisler teacher_id'yi parametre olarak alır
        token = create_access_token(
            identity=str(teacher.id),
            additional_claims={"role": teacher.role, "name": teacher.name}
        )
        return token, teacher

    @staticmethod
    def set_parent_view_private(teacher_id: int, private: bool):
        teacher = TeacherRepo.get_by_id(teacher_id)
        if not teacher:
            raise ValueError("Öğretmen bulunamadı")
        teacher.parent_view_private = bool(private)
        TeacherRepo.update()
        return teacher
