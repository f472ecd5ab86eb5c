"""Create an account in the SQLite DB.

Usage:
  python scripts/create_account.py --name alice --password '...' --role user
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from intranet_platform.config import load_config
from intranet_platform.db import init_db, connect
from intranet_platform.auth.crud import create_account


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--name", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--role", choices=["user", "admin"], default="user")
    args = ap.parse_args()

    cfg = load_config()
    init_db(cfg.DB_DSN)

    with connect(cfg.DB_DSN) as conn:
        try:
            a = create_account(conn, name=args.name, password=args.password, role=args.role)
        except ValueError as e:
            ap.error(str(e))

    print("Created account:")
    print(a)


if __name__ == "__main__":
    main()
