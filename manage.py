#!/usr/bin/env python3
"""
Employee Benefits Enrollment — local management tool.

Single entry point for running the API, the e-mail worker and the
database chores during development.
Usage: python manage.py <command> [options]
"""

import json
import logging
import os
import subprocess
import sys
from datetime import datetime
from typing import List, Optional

BACKEND_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "backend")


# ═══════════════════════════════════════════════════════════
#  Logging Setup
# ═══════════════════════════════════════════════════════════

class ColorFormatter(logging.Formatter):
    """Console formatter with ANSI colors and level symbols."""

    COLORS = {
        "INFO": "\033[96m",
        "SUCCESS": "\033[92m",
        "WARNING": "\033[93m",
        "ERROR": "\033[91m",
        "CRITICAL": "\033[91m\033[1m",
        "DEBUG": "\033[94m",
        "HEADER": "\033[95m",
        "BOLD": "\033[1m",
        "RESET": "\033[0m",
    }

    SYMBOLS = {
        "INFO": "→",
        "SUCCESS": "✓",
        "WARNING": "⚠",
        "ERROR": "✗",
        "CRITICAL": "☠",
        "DEBUG": "•",
        "STEP": "▶",
    }

    MARKERS = ("SUCCESS", "WARNING", "ERROR", "STEP")

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.platform != "win32" and sys.stderr.isatty()

    def _colorize(self, text: str, color_name: str) -> str:
        if not self.use_colors:
            return text
        color = self.COLORS.get(color_name, "")
        return f"{color}{text}{self.COLORS['RESET']}" if color else text

    def format(self, record: logging.LogRecord) -> str:
        msg = str(record.msg)

        symbol, color = self.SYMBOLS.get(record.levelname, ""), record.levelname
        for marker in self.MARKERS:
            if f"[{marker}]" in msg:
                msg = msg.replace(f"[{marker}] ", "").replace(f"[{marker}]", "")
                symbol = self.SYMBOLS[marker]
                color = "INFO" if marker == "STEP" else marker
                break

        if msg.startswith("==="):
            record.msg = self._colorize(msg, "HEADER")
        elif symbol and not msg.startswith(" "):
            record.msg = self._colorize(f"{symbol} {msg}", color)
        else:
            record.msg = self._colorize(msg, color)

        return super().format(record)


# --- Bootstrap logger --------------------------------------------------------
_log_dir = "logs"
os.makedirs(_log_dir, exist_ok=True)
_log_file = os.path.join(_log_dir, f"manage-{datetime.now():%Y%m%d}.log")

_file_handler = logging.FileHandler(_log_file, encoding="utf-8")
_file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))

_console_handler = logging.StreamHandler()
_console_handler.setFormatter(ColorFormatter())

logging.basicConfig(level=logging.INFO, handlers=[_file_handler, _console_handler])
logger = logging.getLogger("manage")


# ═══════════════════════════════════════════════════════════
#  Portal Manager
# ═══════════════════════════════════════════════════════════

class PortalManager:
    """Runs the portal's processes and database chores from backend/."""

    API_URL = "http://localhost:8000"

    def __init__(self, host: str = "0.0.0.0", port: int = 8000):
        self.host = host
        self.port = port

    # ─── Helpers ──────────────────────────────────────────
    def _run(self, cmd: List[str], check: bool = True, stream: bool = False) -> subprocess.CompletedProcess:
        logger.info(f"[STEP] Running: {' '.join(cmd)}")
        if stream:
            # Long-running processes keep their own console output
            return subprocess.run(cmd, cwd=BACKEND_DIR, check=check)
        try:
            result = subprocess.run(cmd, cwd=BACKEND_DIR, check=check, text=True, capture_output=True)
        except subprocess.CalledProcessError as exc:
            logger.error(f"Command failed (exit {exc.returncode})")
            if exc.stderr:
                logger.error(f"  {exc.stderr.strip()}")
            raise
        for line in (result.stdout or "").strip().splitlines():
            if line.strip():
                logger.info(f"  {line.strip()}")
        for line in (result.stderr or "").strip().splitlines():
            if line.strip():
                logger.warning(f"  {line.strip()}")
        return result

    # ─── Processes ────────────────────────────────────────
    def serve(self, reload: bool = False) -> None:
        """Run the FastAPI app with uvicorn."""
        logger.info("\n=== Starting API ===")
        cmd = [sys.executable, "-m", "uvicorn", "portal.main:app", "--host", self.host, "--port", str(self.port)]
        if reload:
            cmd.append("--reload")
        try:
            self._run(cmd, stream=True)
        except KeyboardInterrupt:
            logger.info("\n[SUCCESS] API stopped")

    def worker(self, concurrency: int = 2) -> None:
        """Run a Celery worker on the notifications queue."""
        logger.info("\n=== Starting E-mail Worker ===")
        cmd = [
            sys.executable, "-m", "celery", "-A", "portal.tasks", "worker",
            "-Q", "notifications,default", "--loglevel", "INFO", "--concurrency", str(concurrency),
        ]
        try:
            self._run(cmd, stream=True)
        except KeyboardInterrupt:
            logger.info("\n[SUCCESS] Worker stopped")

    # ─── Database ─────────────────────────────────────────
    def init_db(self) -> None:
        """Apply Alembic migrations."""
        logger.info("\n=== Database Initialisation ===")
        logger.info("[STEP] Running Alembic migrations…")
        self._run([sys.executable, "-m", "alembic", "upgrade", "head"])
        logger.info("[SUCCESS] Database migrations applied!")

    def seed(self) -> None:
        """Import the sample roster into a development batch."""
        logger.info("\n=== Seeding Database ===")
        self._run([sys.executable, "-m", "scripts.seed_employees"])
        logger.info("[SUCCESS] Seed data inserted!")

    # ─── Premium calculator ───────────────────────────────
    def quote(self, joining: str, start: str, end: str, parents: int) -> None:
        """Print the premium breakdown for the given dates and parent count."""
        sys.path.insert(0, BACKEND_DIR)
        from portal.core.dates import parse_date
        from portal.premium.engine import format_premium, get_policy_year, get_premium_breakdown

        joining_date, policy_start, policy_end = (parse_date(v) for v in (joining, start, end))
        breakdown = get_premium_breakdown(parents, joining_date, policy_start, policy_end)

        logger.info(f"\n=== Premium for policy year {get_policy_year(policy_start, policy_end)} ===")
        logger.info(f"  {breakdown.description}")
        logger.info(f"  Remaining days:     {breakdown.remaining_days} (factor {breakdown.factor:.4f})")
        logger.info(f"  Base premium:       {format_premium(breakdown.base_premium)}")
        logger.info(f"  Pro-rated premium:  {format_premium(breakdown.pro_rated_premium)}")
        logger.info(f"  GST:                {format_premium(breakdown.gst)}")
        logger.info(f"  Total:              {format_premium(breakdown.total)}")
        logger.info(f"[SUCCESS] Monthly deduction: {format_premium(breakdown.monthly_deduction)}")

    # ─── Smoke test ───────────────────────────────────────
    def test(self) -> None:
        """Check that a running API answers its health endpoint."""
        import urllib.error
        import urllib.request

        logger.info("\n=== API Smoke Test ===")
        try:
            resp = urllib.request.urlopen(f"{self.API_URL}/health", timeout=10)
            data = json.loads(resp.read().decode())
            logger.info(f"[SUCCESS] Backend: status={data.get('status')} env={data.get('env')}")
        except (urllib.error.URLError, OSError, ValueError) as exc:
            logger.error(f"[ERROR] Backend health check failed: {exc}")

    def urls(self) -> None:
        logger.info("\n=== Access URLs ===")
        logger.info(f"🔧  Backend API:       {self.API_URL}/api/v1")
        logger.info(f"📖  Swagger Docs:      {self.API_URL}/docs")
        logger.info(f"❤️   Health Check:      {self.API_URL}/health")
        logger.info("🐘  PostgreSQL:        localhost:5432")
        logger.info("🔴  Redis:             localhost:6379")


# ═══════════════════════════════════════════════════════════
#  CLI
# ═══════════════════════════════════════════════════════════

USAGE = f"""
{ColorFormatter.COLORS['HEADER']}Employee Benefits Enrollment — Management{ColorFormatter.COLORS['RESET']}
{'═' * 50}

{ColorFormatter.COLORS['BOLD']}Usage:{ColorFormatter.COLORS['RESET']} python manage.py <command> [options]

{ColorFormatter.COLORS['BOLD']}Commands:{ColorFormatter.COLORS['RESET']}
    {ColorFormatter.COLORS['INFO']}serve{ColorFormatter.COLORS['RESET']}           Run the API (--reload for auto-reload)
    {ColorFormatter.COLORS['INFO']}worker{ColorFormatter.COLORS['RESET']}          Run the e-mail Celery worker
    {ColorFormatter.COLORS['INFO']}init-db{ColorFormatter.COLORS['RESET']}         Run Alembic migrations
    {ColorFormatter.COLORS['INFO']}seed{ColorFormatter.COLORS['RESET']}            Import the sample roster
    {ColorFormatter.COLORS['INFO']}quote{ColorFormatter.COLORS['RESET']}           Premium breakdown (--joining --start --end --parents)
    {ColorFormatter.COLORS['INFO']}test{ColorFormatter.COLORS['RESET']}            Smoke-test a running API
    {ColorFormatter.COLORS['INFO']}urls{ColorFormatter.COLORS['RESET']}            Show access URLs

{ColorFormatter.COLORS['BOLD']}Options:{ColorFormatter.COLORS['RESET']}
    --port=N        API port for 'serve' (default 8000)
    --reload        Auto-reload on code changes
    --concurrency=N Worker processes for 'worker' (default 2)

{ColorFormatter.COLORS['BOLD']}Examples:{ColorFormatter.COLORS['RESET']}
    python manage.py init-db
    python manage.py serve --reload
    python manage.py quote --joining=15/06/2024 --start=01/04/2024 --end=31/03/2025 --parents=2
"""


def _option(opts: List[str], name: str, default: Optional[str] = None) -> Optional[str]:
    for o in opts:
        if o.startswith(f"--{name}="):
            return o.split("=", 1)[1]
    return default


def main() -> None:
    if len(sys.argv) < 2 or sys.argv[1] in ("-h", "--help"):
        print(USAGE)
        sys.exit(0)

    command = sys.argv[1]
    opts = sys.argv[2:]

    mgr = PortalManager(port=int(_option(opts, "port", "8000")))

    try:
        if command == "serve":
            mgr.serve(reload="--reload" in opts)
        elif command == "worker":
            mgr.worker(concurrency=int(_option(opts, "concurrency", "2")))
        elif command == "init-db":
            mgr.init_db()
        elif command == "seed":
            mgr.seed()
        elif command == "quote":
            mgr.quote(
                joining=_option(opts, "joining", ""),
                start=_option(opts, "start", "01/04/2024"),
                end=_option(opts, "end", "31/03/2025"),
                parents=int(_option(opts, "parents", "2")),
            )
        elif command == "test":
            mgr.test()
        elif command == "urls":
            mgr.urls()
        else:
            logger.error(f"Unknown command: {command}")
            print(USAGE)
            sys.exit(1)
    except (subprocess.CalledProcessError, ValueError, TypeError) as exc:
        logger.error(f"Operation failed: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
