from flask import Blueprint, request, jsonify
from flask_jwt_extended import get_jwt
from libratech.services.auth_service import AuthService
from libratech.repositories.teacher_repo import TeacherRepo
from libratech.utils.decorators import tenant_required
from libratech.utils.payload import text

auth_bp = Blueprint("auth", __name__)

@auth_bp.post("/register", endpoint="auth_register")
def register():
    data = request.get_json(silent=True) or {}

    name = text(data, "name")
    email = text(data, "email").lower()
    password = text(data, "password")

    if not name or not email or not password:
        return jsonify({"success": False, "message": "name/email/password zorunlu"}), 400

    try:
        teacher = AuthService.register(
            name=name,
            email=email,
            password=password,
            role="teacher"  # dışarıdan role alma
        )
        return jsonify({"success": True, "id": teacher.id, "name": teacher.name, "role": teacher.role}), 201
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400


@auth_bp.post("/login", endpoint="auth_login")
def login():
    data = request.get_json(silent=True) or {}
    try:
        token, teacher = AuthService.login(
            text(data, "email").lower(),
            text(data, "password")
        )
        return jsonify({
            "success": True,
            "access_token": token,
            "user": {"id": teacher.id, "name": teacher.name, "role": teacher.role}
        })
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 401


@auth_bp.get("/me", endpoint="auth_me")
@tenant_required
def me(teacher_id: int):
    teacher = TeacherRepo.get_by_id(teacher_id)
    if not teacher:
        return jsonify({"success": False, "message": "Öğretmen bulunamadı"}), 404

    return jsonify({
        "success": True,
        "user": {
            "id": teacher.id,
            "name": teacher.name,
            "email": teacher.email,
            "role": get_jwt().get("role", teacher.role),
            "parent_view_private": bool(teacher.parent_view_private),
        }
    })


@auth_bp.put("/settings", endpoint="auth_settings")
@tenant_required
def update_settings(teacher_id: int):
    data = request.get_json(silent=True) or {}
    if "parent_view_private" not in data:
        return jsonify({"success": False, "message": "parent_view_private zorunlu"}), 400
    try:
        teacher = AuthService.set_parent_view_private(teacher_id, bool(data["parent_view_private"]))
        return jsonify({"success": True, "parent_view_private": bool(teacher.parent_view_private)})
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 404
