import os


def _optional_int(name: str):
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")

    SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///libratech.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    # Migrate kullanılmıyorsa tablolar açılışta oluşturulur
    AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "1") == "1"

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-super-secret")

    # Mail (öğrenci e-postası varsa gecikme hatırlatması)
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = True
    MAIL_USERNAME = os.getenv("MAIL_USERNAME", "")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD", "")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "noreply@libratech.local")

    # Ödünç ayarları
    DEFAULT_LOAN_DAYS = int(os.getenv("DEFAULT_LOAN_DAYS", "14"))
    LOAN_DURATION_PRESETS = (7, 14, 30, 90)
    MAX_LOAN_DAYS = _optional_int("MAX_LOAN_DAYS")  # None: üst sınır yok

    # Kamera aynı kodu art arda okur; bu pencere içindeki okumalar yok sayılır
    SCAN_DEBOUNCE_SECONDS = float(os.getenv("SCAN_DEBOUNCE_SECONDS", "1.0"))
    # Bu kadar dakika işlem görmeyen açık oturum kayıttan düşer
    SCAN_SESSION_TTL_MINUTES = int(os.getenv("SCAN_SESSION_TTL_MINUTES", "30"))

    # Scheduler
    SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "1") == "1"
    OVERDUE_CHECK_MINUTES = int(os.getenv("OVERDUE_CHECK_MINUTES", "10"))
    DUE_SOON_DAYS = int(os.getenv("DUE_SOON_DAYS", "1"))


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    AUTO_CREATE_TABLES = True
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    MAIL_SUPPRESS_SEND = True
    SCHEDULER_ENABLED = False
    MAX_LOAN_DAYS = None
