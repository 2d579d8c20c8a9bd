# libratech/controllers/student_controller.py

from flask import Blueprint, request, jsonify
from libratech.services.catalog_service import CatalogService
from libratech.services.circulation_service import CirculationService
from libratech.utils.decorators import tenant_required

student_bp = Blueprint("students", __name__)


@student_bp.get("/")
@tenant_required
def list_students(teacher_id: int):
    students = CatalogService.list_students(teacher_id, request.args.get("q"))
    return jsonify({"success": True, "data": [s.to_dict() for s in students]})


@student_bp.get("/<int:student_id>")
@tenant_required
def get_student(teacher_id: int, student_id: int):
    try:
        s = CatalogService.get_student(teacher_id, student_id)
        return jsonify({"success": True, "data": s.to_dict()})
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 404


@student_bp.post("/")
@tenant_required
def create_student(teacher_id: int):
    data = request.get_json(silent=True) or {}
    try:
        s = CatalogService.add_student(teacher_id, data)
        return jsonify({"success": True, "message": "Öğrenci başarıyla eklendi.", "id": s.id}), 201
    except KeyError:
        return jsonify({"success": False, "message": "name, student_number ve grade zorunlu"}), 400
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400


@student_bp.put("/<int:student_id>")
@tenant_required
def update_student(teacher_id: int, student_id: int):
    data = request.get_json(silent=True) or {}
    try:
        s = CatalogService.update_student(teacher_id, student_id, data)
        return jsonify({"success": True, "data": s.to_dict()})
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400


@student_bp.delete("/<int:student_id>")
@tenant_required
def delete_student(teacher_id: int, student_id: int):
    try:
        CatalogService.delete_student(teacher_id, student_id)
        return jsonify({"success": True})
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400


@student_bp.get("/<int:student_id>/history")
@tenant_required
def student_history(teacher_id: int, student_id: int):
    try:
        rows = CatalogService.student_history(teacher_id, student_id)
        return jsonify({"success": True, "data": rows})
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 404


@student_bp.delete("/<int:student_id>/history/<int:book_id>")
@tenant_required
def remove_from_history(teacher_id: int, student_id: int, book_id: int):
    result = CirculationService.for_teacher(teacher_id).remove_book_from_history(student_id, book_id)
    return jsonify(result.to_dict()), (200 if result.success else 404)
