import argparse
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from seller_ops.config import get_settings
from seller_ops.core.logging import setup_logging
from seller_ops.core.scheduler import build_scheduler
from seller_ops.database import init_db
from seller_ops.services.reorder_service import run_auto_reorder_for_all_users

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Run the daily auto-reorder pass.")
    parser.add_argument(
        "--run-once",
        action="store_true",
        help="Run the auto-reorder pass once and exit.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()
    settings = get_settings()
    init_db()

    if args.run_once:
        totals = run_auto_reorder_for_all_users()
        print(
            "Evaluated {evaluated} product(s) for {users} user(s); "
            "queued {triggered} reorder(s).".format(**totals)
        )
        return

    scheduler = build_scheduler(settings, run_auto_reorder_for_all_users)
    scheduler.start()
    logger.info("Auto-reorder scheduled daily at %s", settings.AUTO_REORDER_RUN_TIME)
    try:
        while scheduler.running:
            scheduler.wait(60)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down.")
    finally:
        scheduler.stop()


if __name__ == "__main__":
    main()
