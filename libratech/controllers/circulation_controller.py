# libratech/controllers/circulation_controller.py

from flask import Blueprint, current_app, request, jsonify
from libratech.services.circulation_service import CirculationService
from libratech.services.scan_session import ScanMode, run_batch
from libratech.utils.decorators import tenant_required
from libratech.utils.payload import text

circulation_bp = Blueprint("circulation", __name__)


def _token(data: dict, key: str) -> str:
    value = text(data, key)
    if not value:
        raise KeyError(key)
    return value


def _loan_days(data: dict) -> int:
    try:
        return int(data.get("days", current_app.config["DEFAULT_LOAN_DAYS"]))
    except (TypeError, ValueError):
        raise ValueError("days sayı olmalı")


@circulation_bp.get("/presets")
@tenant_required
def loan_presets(teacher_id: int):
    return jsonify({
        "success": True,
        "data": {
            "presets": list(current_app.config["LOAN_DURATION_PRESETS"]),
            "default": current_app.config["DEFAULT_LOAN_DAYS"],
        },
    })


@circulation_bp.post("/issue")
@tenant_required
def issue(teacher_id: int):
    data = request.get_json(silent=True) or {}
    try:
        result = CirculationService.for_teacher(teacher_id).issue_book(
            _token(data, "book_token"), _token(data, "student_token"), _loan_days(data)
        )
    except KeyError:
        return jsonify({"success": False, "message": "book_token ve student_token zorunlu"}), 400
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    return jsonify(result.to_dict()), (201 if result.success else 409)


@circulation_bp.post("/return")
@tenant_required
def return_book(teacher_id: int):
    data = request.get_json(silent=True) or {}
    try:
        book_token = _token(data, "book_token")
    except KeyError:
        return jsonify({"success": False, "message": "book_token zorunlu"}), 400

    result = CirculationService.for_teacher(teacher_id).return_book(book_token)
    return jsonify(result.to_dict()), (200 if result.success else 409)


@circulation_bp.post("/validate")
@tenant_required
def validate(teacher_id: int):
    data = request.get_json(silent=True) or {}
    try:
        book_token = _token(data, "book_token")
    except KeyError:
        return jsonify({"success": False, "message": "book_token zorunlu"}), 400

    student_token = text(data, "student_token") or None
    result = CirculationService.for_teacher(teacher_id).validate_book_for_student(book_token, student_token)
    return jsonify(result.to_dict())


@circulation_bp.post("/batch")
@tenant_required
def batch(teacher_id: int):
    """
    Tek seferlik toplu işlem: {mode, book_tokens[], student_token?, days?}
    Aynı kitap birden çok kez gelirse bir kez işlenir.
    """
    data = request.get_json(silent=True) or {}
    try:
        mode = ScanMode(str(data.get("mode", "")).upper())
    except ValueError:
        return jsonify({"success": False, "message": "mode ISSUE veya RETURN olmalı"}), 400

    tokens = []
    for t in data.get("book_tokens") or []:
        t = str(t).strip()
        if t and t not in tokens:
            tokens.append(t)
    if not tokens:
        return jsonify({"success": False, "message": "book_tokens boş olamaz"}), 400

    engine = CirculationService.for_teacher(teacher_id)
    student_token = None
    try:
        days = _loan_days(data)
        if mode is ScanMode.ISSUE:
            student_token = _token(data, "student_token")
            engine.check_loan_days(days)
    except KeyError:
        return jsonify({"success": False, "message": "student_token zorunlu"}), 400
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    report = run_batch(engine, mode, tokens, student_token=student_token, loan_days=days)
    return jsonify({"success": report.is_clean, "message": report.summary, "data": report.to_dict()})
