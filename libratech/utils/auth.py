from flask_jwt_extended import get_jwt, get_jwt_identity


def current_teacher_id() -> int:
    """JWT identity = öğretmen id = tenant. jwt_required altında çağrılmalı."""
    return int(get_jwt_identity())


def current_role() -> str | None:
    return (get_jwt() or {}).get("role")
