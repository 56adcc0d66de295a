#!/usr/bin/env python3
"""
List accounts that never completed email verification (for example when the
verification email could not be sent) and optionally delete them.

Usage:
  python scripts/list_unverified.py [--delete] [--email user@example.com]
"""
from __future__ import annotations

import argparse
import sys

from hemo.core.utils import normalize_email
from hemo.repositories.sql_repository import SQLRepository


def main() -> None:
    ap = argparse.ArgumentParser(description="List or delete unverified accounts")
    ap.add_argument("--email", help="Only consider this address")
    ap.add_argument("--delete", action="store_true", help="Delete the listed accounts")
    args = ap.parse_args()

    repo = SQLRepository()
    users = repo.list_unverified_users()
    if args.email:
        wanted = normalize_email(args.email)
        users = [u for u in users if u.email == wanted]
    if not users:
        print("No unverified accounts")
        return

    for user in users:
        pending = len(repo.get_verify_tokens_for_user(user.id))
        print(f"{user.id}  {user.email}  created={user.created_at:%Y-%m-%d %H:%M}  pending_tokens={pending}")
        if args.delete:
            repo.delete_user(user.id)
            print(f"  deleted {user.id}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
