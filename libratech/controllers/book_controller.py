# libratech/controllers/book_controller.py

from flask import Blueprint, request, jsonify
from libratech.services.catalog_service import CatalogService
from libratech.utils.decorators import tenant_required

book_bp = Blueprint("books", __name__)


@book_bp.get("/")
@tenant_required
def list_books(teacher_id: int):
    books = CatalogService.list_books(teacher_id, request.args.get("q"))
    return jsonify({"success": True, "data": [b.to_dict() for b in books]})


@book_bp.get("/<int:book_id>")
@tenant_required
def get_book(teacher_id: int, book_id: int):
    try:
        b = CatalogService.get_book(teacher_id, book_id)
        return jsonify({"success": True, "data": b.to_dict()})
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 404


@book_bp.post("/")
@tenant_required
def create_book(teacher_id: int):
    data = request.get_json(silent=True) or {}
    try:
        b = CatalogService.add_book(teacher_id, data)
        return jsonify({"success": True, "message": "Kitap başarıyla eklendi.", "id": b.id}), 201
    except KeyError:
        return jsonify({"success": False, "message": "title, author ve isbn zorunlu"}), 400
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400


@book_bp.put("/<int:book_id>")
@tenant_required
def update_book(teacher_id: int, book_id: int):
    data = request.get_json(silent=True) or {}
    try:
        b = CatalogService.update_book(teacher_id, book_id, data)
        return jsonify({"success": True, "data": b.to_dict()})
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400


@book_bp.post("/<int:book_id>/lost")
@tenant_required
def mark_lost(teacher_id: int, book_id: int):
    try:
        b = CatalogService.mark_book_lost(teacher_id, book_id)
        return jsonify({"success": True, "data": b.to_dict()})
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400


@book_bp.post("/<int:book_id>/found")
@tenant_required
def mark_found(teacher_id: int, book_id: int):
    try:
        b = CatalogService.mark_book_found(teacher_id, book_id)
        return jsonify({"success": True, "data": b.to_dict()})
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400


@book_bp.delete("/<int:book_id>")
@tenant_required
def delete_book(teacher_id: int, book_id: int):
    try:
        CatalogService.delete_book(teacher_id, book_id)
        return jsonify({"success": True})
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400
