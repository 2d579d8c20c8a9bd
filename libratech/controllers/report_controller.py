from flask import Blueprint, jsonify
from libratech.services.report_service import ReportService
from libratech.tasks.overdue_check import run_overdue_check
from libratech.utils.decorators import role_required, tenant_required

report_bp = Blueprint("reports", __name__)


@report_bp.get("/dashboard")
@tenant_required
def dashboard(teacher_id: int):
    return jsonify({"success": True, "data": ReportService.dashboard(teacher_id)})


@report_bp.get("/stats")
@tenant_required
def stats(teacher_id: int):
    return jsonify({"success": True, "data": ReportService.reading_stats(teacher_id)})


@report_bp.get("/admin")
@role_required("admin")
def admin_stats():
    return jsonify({"success": True, "data": ReportService.admin_stats()})


@report_bp.post("/admin/run-overdue-check")
@role_required("admin")
def run_overdue_check_now():
    result = run_overdue_check()
    if "error" in result:
        return jsonify({"success": False, "message": result["error"]}), 500
    return jsonify({"success": True, "message": "Gecikme kontrolü çalıştırıldı", "data": result})
