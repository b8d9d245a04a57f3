"""
Release step: migrate the schema to head, then seed the permission catalog
and the admin account. Both halves are safe to repeat.

Usage:
  python scripts/release.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _log(msg: str) -> None:
    print(f"[release] {msg}", flush=True)


def release_database_url() -> str:
    """DATABASE_URL, required. SQLite is refused when ENV is production."""
    db_url = (os.environ.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise RuntimeError("DATABASE_URL must be set before running a release.")
    env = (os.environ.get("ENV") or "").strip().lower()
    if env in ("prod", "production") and db_url.startswith("sqlite"):
        raise RuntimeError("Production releases need a Postgres DATABASE_URL, not SQLite.")
    return db_url


def migrate(db_url: str) -> None:
    from alembic import command
    from alembic.config import Config

    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    command.upgrade(cfg, "head")


def run_release() -> None:
    db_url = release_database_url()
    _log(f"ENV={os.environ.get('ENV') or '(unset)'}")

    _log("upgrading schema to head")
    migrate(db_url)

    _log("seeding permissions and admin account")
    from scripts import init_db

    init_db.seed_only(database_url=db_url)
    _log("done")


if __name__ == "__main__":
    run_release()
