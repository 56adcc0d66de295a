"""Create (or recreate) the account tables.

Usage:
  python -m hemo.db.create_tables [--reset]
"""
from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from .session import Base, get_engine
from . import models  # noqa: F401  # registers users/verify_tokens on the metadata


def create_all(engine=None) -> None:
    Base.metadata.create_all(bind=engine or get_engine())


def drop_all(engine=None) -> None:
    Base.metadata.drop_all(bind=engine or get_engine())


def main() -> None:
    ap = argparse.ArgumentParser(description="Create the Hemo account tables")
    ap.add_argument("--reset", action="store_true", help="Drop existing tables first (destroys data)")
    args = ap.parse_args()
    if args.reset:
        drop_all()
    create_all()
    print("Tables ready: " + ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    try:
        main()
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
