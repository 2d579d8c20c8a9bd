from flask import Flask, jsonify
from libratech.config import Config
from libratech.extensions import db, migrate, jwt, mail


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # 1) Önce db init (db.session için şart)
    db.init_app(app)

    # 2) Modeller import edilsin ki tablolar metadata'ya kayıtlı olsun
    from libratech import models  # noqa: F401

    if app.config.get("AUTO_CREATE_TABLES"):
        with app.app_context():
            db.create_all()

    # 3) Diğer extension'lar
    migrate.init_app(app, db)
    jwt.init_app(app)
    mail.init_app(app)

    # 4) Tarama oturumları süreç içinde tutulur
    from libratech.services.scan_registry import ScanSessionRegistry
    app.extensions["scan_registry"] = ScanSessionRegistry()

    # 5) API blueprintleri
    from libratech.controllers.auth_controller import auth_bp
    from libratech.controllers.book_controller import book_bp
    from libratech.controllers.student_controller import student_bp
    from libratech.controllers.circulation_controller import circulation_bp
    from libratech.controllers.scan_controller import scan_bp
    from libratech.controllers.report_controller import report_bp
    from libratech.controllers.parent_controller import parent_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(book_bp, url_prefix="/books")
    app.register_blueprint(student_bp, url_prefix="/students")
    app.register_blueprint(circulation_bp, url_prefix="/circulation")
    app.register_blueprint(scan_bp, url_prefix="/scan-sessions")
    app.register_blueprint(report_bp, url_prefix="/reports")
    app.register_blueprint(parent_bp, url_prefix="/parent")

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    # Scheduler (gecikme hatırlatma)
    from libratech.tasks.scheduler import start_scheduler
    start_scheduler(app)

    return app
