# libratech/tasks/scheduler.py
from __future__ import annotations

import atexit
import os

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger


def start_scheduler(app):
    """
    Gecikme hatırlatma job'unu başlatır.
    - App context ile job çalıştırır (DB erişimleri için).
    - Debug reloader'da çift çalışmayı engeller.
    - SCHEDULER_ENABLED=False ise (testler) hiç başlamaz.
    """
    if not app.config.get("SCHEDULER_ENABLED", True):
        app.logger.info("[scheduler] Disabled by config.")
        return None

    # Werkzeug reloader varsa WERKZEUG_RUN_MAIN=true olan process gerçek process'tir.
    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        app.logger.info("[scheduler] Debug reloader secondary process: scheduler skipped.")
        return None

    # circular import olmasın diye burada
    from libratech.tasks.overdue_check import run_overdue_check

    scheduler = BackgroundScheduler(timezone="UTC")
    minutes = int(app.config.get("OVERDUE_CHECK_MINUTES", 10))

    def _job_wrapper():
        with app.app_context():
            run_overdue_check()

    scheduler.add_job(
        func=_job_wrapper,
        trigger=IntervalTrigger(minutes=minutes),
        id="overdue_check_job",
        replace_existing=True,
        max_instances=1,        # aynı job üst üste binmesin
        coalesce=True,          # kaçırılanları tek seferde toparla
        misfire_grace_time=120
    )

    scheduler.start()
    app.logger.info(f"[scheduler] Overdue check job started (every {minutes} minutes).")

    app.extensions["apscheduler"] = scheduler
    atexit.register(lambda: scheduler.shutdown(wait=False) if scheduler.running else None)
    return scheduler
