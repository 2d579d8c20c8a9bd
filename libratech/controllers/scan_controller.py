# libratech/controllers/scan_controller.py

from flask import Blueprint, current_app, request, jsonify
from libratech.services.scan_session import ScanSessionError
from libratech.utils.decorators import tenant_required

scan_bp = Blueprint("scan_sessions", __name__)


def _registry():
    return current_app.extensions["scan_registry"]


def _json_error(message, code=400):
    return jsonify({"success": False, "message": message}), code


@scan_bp.post("/")
@tenant_required
def open_session(teacher_id: int):
    data = request.get_json(silent=True) or {}
    try:
        session_id, session = _registry().create(teacher_id, data.get("mode", ""), data.get("days"))
    except (TypeError, ValueError) as e:
        return _json_error(str(e), 400)
    return jsonify({"success": True, "id": session_id, "data": session.to_dict()}), 201


@scan_bp.get("/<session_id>")
@tenant_required
def get_session(teacher_id: int, session_id: str):
    try:
        session = _registry().get(teacher_id, session_id)
    except ScanSessionError as e:
        return _json_error(str(e), 404)
    return jsonify({"success": True, "data": session.to_dict()})


@scan_bp.post("/<session_id>/scan")
@tenant_required
def scan(teacher_id: int, session_id: str):
    data = request.get_json(silent=True) or {}
    try:
        session = _registry().get(teacher_id, session_id)
    except ScanSessionError as e:
        return _json_error(str(e), 404)

    feedback = session.scan(data.get("token") or "")
    return jsonify({
        "success": True,
        "ignored": feedback is None,
        "feedback": feedback.to_dict() if feedback else None,
        "data": session.to_dict(),
    })


@scan_bp.post("/<session_id>/reset")
@tenant_required
def reset(teacher_id: int, session_id: str):
    try:
        session = _registry().get(teacher_id, session_id)
        session.reset()
    except ScanSessionError as e:
        return _json_error(str(e), 400)
    return jsonify({"success": True, "data": session.to_dict()})


@scan_bp.post("/<session_id>/complete")
@tenant_required
def complete(teacher_id: int, session_id: str):
    try:
        session = _registry().get(teacher_id, session_id)
        report = session.complete()
    except ScanSessionError as e:
        return _json_error(str(e), 400)
    return jsonify({"success": report.is_clean, "message": report.summary, "data": report.to_dict()})


@scan_bp.delete("/<session_id>")
@tenant_required
def cancel(teacher_id: int, session_id: str):
    try:
        session = _registry().get(teacher_id, session_id)
        session.cancel()
        _registry().discard(teacher_id, session_id)
    except ScanSessionError as e:
        return _json_error(str(e), 400)
    return jsonify({"success": True, "message": "Tarama iptal edildi"})
