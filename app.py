import logging
import sys

import config
from microservices.habit_service import run_service
from repo_json import JSONRepo
from tracker import HabitTracker

logger = logging.getLogger(__name__)


def build_tracker(path=None):
    repo = JSONRepo(path or config.data_path())
    return HabitTracker(repo, include_creation_day=config.count_creation_day())


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    config.setup_logging()
    port = config.service_port()
    if argv:
        try:
            port = int(argv[0])
        except ValueError:
            print(f"Invalid port '{argv[0]}', using default {port} instead.")
    tracker = build_tracker()
    logger.info("Using habit data at %s", tracker.repo.path)
    run_service(tracker, port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
