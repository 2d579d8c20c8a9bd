import threading
import time
import uuid

from flask import current_app

from libratech.services.circulation_service import CirculationService
from libratech.services.scan_session import ScanMode, ScanSession, ScanSessionError, ScanState


class ScanSessionRegistry:
    """
    Süreç içi, öğretmene göre ayrılmış açık tarama oturumları.
    Bitmiş ve iptal edilmiş oturumlar yeni oturum açılırken, SCAN_SESSION_TTL_MINUTES
    boyunca boşta kalmış açık oturumlar her erişimde temizlenir.
    """

    def __init__(self, clock=time.monotonic):
        self.clock = clock
        self._sessions = {}
        self._lock = threading.Lock()

    def create(self, teacher_id: int, mode: str, loan_days=None) -> tuple[str, ScanSession]:
        cfg = current_app.config
        try:
            scan_mode = ScanMode(str(mode).upper())
        except ValueError:
            raise ScanSessionError("mode ISSUE veya RETURN olmalı")

        days = int(loan_days) if loan_days is not None else cfg["DEFAULT_LOAN_DAYS"]
        engine = CirculationService.for_teacher(teacher_id)
        if scan_mode is ScanMode.ISSUE:
            # süre hatası tarama bitince değil, oturum açılırken görülsün
            engine.check_loan_days(days)

        session = ScanSession(
            scan_mode,
            engine,
            loan_days=days,
            debounce_seconds=cfg["SCAN_DEBOUNCE_SECONDS"],
            clock=self.clock,
        )
        session_id = uuid.uuid4().hex

        with self._lock:
            self._purge_stale()
            self._sessions[session_id] = (int(teacher_id), session)

        current_app.logger.info(f"[scan] session opened id={session_id} teacher={teacher_id} mode={scan_mode.value}")
        return session_id, session

    def get(self, teacher_id: int, session_id: str) -> ScanSession:
        with self._lock:
            self._purge_stale(finished=False)
            item = self._sessions.get(session_id)
        # başka öğretmenin oturumu yokmuş gibi davranır
        if not item or item[0] != int(teacher_id):
            raise ScanSessionError("Tarama oturumu bulunamadı")
        return item[1]

    def discard(self, teacher_id: int, session_id: str) -> None:
        self.get(teacher_id, session_id)
        with self._lock:
            self._sessions.pop(session_id, None)

    def __len__(self):
        with self._lock:
            return len(self._sessions)

    def _is_stale(self, session: ScanSession, now: float, ttl: float, finished: bool) -> bool:
        if finished and session.state in (ScanState.DONE, ScanState.CANCELLED):
            return True
        # COMMITTING yarıda kesilmez
        return session.is_collecting and now - session.last_activity > ttl

    def _purge_stale(self, finished: bool = True):
        now = self.clock()
        ttl = current_app.config.get("SCAN_SESSION_TTL_MINUTES", 30) * 60
        stale = [k for k, (_t, s) in self._sessions.items() if self._is_stale(s, now, ttl, finished)]
        for k in stale:
            self._sessions.pop(k, None)
        if stale:
            current_app.logger.info(f"[scan] purged {len(stale)} session(s)")
