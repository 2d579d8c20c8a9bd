from functools import wraps
from flask_jwt_extended import verify_jwt_in_request, get_jwt
from flask import jsonify

from libratech.utils.auth import current_teacher_id


def role_required(*roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if get_jwt().get("role") not in roles:
                return jsonify({"success": False, "message": "Yetkisiz"}), 403
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def tenant_required(fn):
    """JWT zorunlu; view'a teacher_id parametresi olarak öğretmen id'si geçilir."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        return fn(*args, teacher_id=current_teacher_id(), **kwargs)
    return wrapper
