from flask import Blueprint, request, jsonify
from libratech.services.report_service import ParentViewService

parent_bp = Blueprint("parent", __name__)

# giriş gerektirmez; öğretmen bağlantıdaki id ile seçilir


@parent_bp.get("/<int:teacher_id>/students")
def search_students(teacher_id: int):
    try:
        data = ParentViewService.search(teacher_id, request.args.get("q"))
        return jsonify({"success": True, "data": data})
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 404


@parent_bp.get("/<int:teacher_id>/students/<int:student_id>")
def student_detail(teacher_id: int, student_id: int):
    try:
        data = ParentViewService.student_detail(teacher_id, student_id)
        return jsonify({"success": True, "data": data})
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 404
