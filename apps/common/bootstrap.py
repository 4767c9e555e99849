"""
Chuẩn bị database khi khởi động tiến trình.

``run_startup_seed`` xóa và tạo lại schema (nếu bật), sau đó seed dữ liệu
mẫu. Mọi lỗi đều được ghi log và trả về dưới dạng ``SeedResult`` thay vì
làm dừng server; kết quả gần nhất được công bố qua ``/health/``.
"""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime

try:
    import fcntl
except ImportError:  # Windows: không có khóa liên tiến trình
    fcntl = None

from django.conf import settings
from django.contrib.contenttypes.models import ContentType
from django.core.management import call_command
from django.db import DEFAULT_DB_ALIAS, connections
from django.utils import timezone

from .seed import SeedSummary, seed_database

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedResult:
    ok: bool
    reset: bool
    started_at: datetime
    finished_at: datetime
    summary: SeedSummary | None = None
    error: str = ""
    error_type: str = ""
    skipped: bool = False

    @property
    def status(self) -> str:
        return "ok" if self.ok else "degraded"

    def as_dict(self) -> dict:
        return {
            "status": self.status,
            "reset": self.reset,
            "skipped": self.skipped,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "summary": self.summary.as_dict() if self.summary else None,
            "error": self.error or None,
            "error_type": self.error_type or None,
        }


_last_result: SeedResult | None = None


def last_seed_result() -> SeedResult | None:
    return _last_result


def reset_database(using=DEFAULT_DB_ALIAS):
    """Xóa toàn bộ bảng rồi tạo lại schema bằng migrations. Mất hết dữ liệu cũ."""
    connection = connections[using]
    with connection.cursor() as cursor:
        tables = connection.introspection.table_names(cursor)
    with connection.schema_editor() as editor:
        for table in tables:
            editor.execute(editor.sql_delete_table % {"table": editor.quote_name(table)})
    ContentType.objects.clear_cache()
    logger.warning("Dropped %d tables on database '%s'", len(tables), using)
    call_command("migrate", database=using, interactive=False, verbosity=0)


def run_startup_seed(reset=None, migrate=True) -> SeedResult:
    """
    Chạy quy trình khởi tạo database. Không bao giờ raise.

    ``reset=None`` đọc từ ``DNU_RESET_DATABASE_ON_STARTUP``. Khi không reset,
    các migration còn thiếu được áp dụng (trừ khi ``migrate=False``).
    """
    global _last_result
    if reset is None:
        reset = getattr(settings, "DNU_RESET_DATABASE_ON_STARTUP", True)

    started_at = timezone.now()
    try:
        if reset:
            reset_database()
            print("Database recreated successfully!")
        elif migrate:
            call_command("migrate", interactive=False, verbosity=0)
        summary = seed_database()
    except Exception as exc:
        logger.exception("An error occurred seeding the DB.")
        print(f"Database error: {exc}")
        result = SeedResult(
            ok=False,
            reset=reset,
            started_at=started_at,
            finished_at=timezone.now(),
            error=str(exc),
            error_type=type(exc).__name__,
        )
    else:
        result = SeedResult(
            ok=True,
            reset=reset,
            started_at=started_at,
            finished_at=timezone.now(),
            summary=summary,
        )

    _last_result = result
    return result


class StartupLock:
    """
    Khóa liên tiến trình cho bước reset/seed lúc khởi động.

    Với server nhiều worker (``gunicorn -w N`` không ``--preload``) mỗi worker
    đều nạp wsgi. Worker đầu tiên giữ khóa độc quyền trong lúc seed rồi hạ
    xuống khóa chia sẻ và giữ đến khi tiến trình kết thúc; các worker khác
    chờ đến khi seed xong rồi bỏ qua. Khi mọi worker đã dừng, lần khởi động
    sau lại seed từ đầu.
    """

    def __init__(self, path):
        self.path = path
        self._file = None

    def acquire(self) -> bool:
        """Trả về True nếu tiến trình này được quyền reset/seed."""
        if fcntl is None or not self.path:
            return True
        self._file = open(self.path, "a+")
        try:
            fcntl.flock(self._file, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            # Worker khác đang seed hoặc đã seed xong: chờ nó hạ khóa
            fcntl.flock(self._file, fcntl.LOCK_SH)
            return False
        return True

    def downgrade(self):
        if self._file is not None:
            fcntl.flock(self._file, fcntl.LOCK_SH)

    def release(self):
        if self._file is not None:
            fcntl.flock(self._file, fcntl.LOCK_UN)
            self._file.close()
            self._file = None


_startup_lock: StartupLock | None = None


def release_startup_lock():
    global _startup_lock
    if _startup_lock is not None:
        _startup_lock.release()
        _startup_lock = None


def _seed_once_per_start() -> SeedResult:
    global _last_result, _startup_lock
    release_startup_lock()
    lock = StartupLock(getattr(settings, "DNU_STARTUP_LOCK_PATH", ""))
    owner = lock.acquire()
    # Giữ khóa đến khi tiến trình kết thúc
    _startup_lock = lock
    if not owner:
        logger.info("Database already prepared by another worker, skipping seed")
        now = timezone.now()
        _last_result = SeedResult(ok=True, reset=False, started_at=now, finished_at=now, skipped=True)
        return _last_result
    try:
        return run_startup_seed()
    finally:
        lock.downgrade()


def _seed_in_worker_thread() -> SeedResult:
    try:
        return _seed_once_per_start()
    finally:
        connections.close_all()


def _event_loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def bootstrap_on_startup():
    """Gọi từ wsgi/asgi sau khi ứng dụng Django đã được nạp."""
    if not getattr(settings, "DNU_SEED_ON_STARTUP", True):
        logger.info("Startup seeding disabled (DNU_SEED_ON_STARTUP)")
        return None
    if _event_loop_running():
        # uvicorn nạp asgi bên trong event loop, ORM đồng bộ phải chạy ở thread riêng
        with ThreadPoolExecutor(max_workers=1) as executor:
            result = executor.submit(_seed_in_worker_thread).result()
    else:
        result = _seed_once_per_start()
    print("Starting web server...")
    return result
