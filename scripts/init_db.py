import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from intranet_platform.auth.crud import purge_expired_sessions
from intranet_platform.config import load_config
from intranet_platform.db import connect, init_db


def main() -> None:
    cfg = load_config()
    init_db(cfg.DB_DSN)
    with connect(cfg.DB_DSN) as conn:
        n = purge_expired_sessions(conn)

    print(f"DB initialized: {cfg.DB_DSN} (purged {n} expired sessions)")


if __name__ == "__main__":
    main()
