from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow running this file directly: `python coursehub/scripts/issue_token.py`
if __package__ in (None, ""):
    repo_root = Path(__file__).resolve().parents[2]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

from sqlalchemy import select

from coursehub.core.config import get_settings
from coursehub.core.security import create_access_token
from coursehub.db.session import Database
from coursehub.models import User


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print a bearer token for an existing user (local/dev only).")
    parser.add_argument("--email", required=True, help="User email")
    parser.add_argument("--expires", type=int, default=0, help="Lifetime in seconds (default: settings value)")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    settings = get_settings()
    if settings.app_env == "production":
        print("Error: refusing to issue tokens in production", file=sys.stderr)
        return 2

    database = Database(settings)
    with database.session() as db:
        user = db.execute(select(User).where(User.email == args.email.strip().lower())).scalars().first()
        if not user:
            print(f"Error: no user with email {args.email}", file=sys.stderr)
            return 1
        token = create_access_token(
            str(user.id),
            user.role,
            settings.jwt_secret,
            args.expires or settings.access_token_expire_seconds,
        )

    print(token)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
