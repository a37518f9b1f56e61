"""``habitat-worker``: sends the delayed welcome and reservation-reminder pushes.

Rows are queued by :mod:`habitat.core.notifications.scheduling` and routed back
to its handlers by event type.
"""

from __future__ import annotations

import logging
import os

from habitat import create_app
from habitat.core.notifications.scheduling import HANDLERS, handle_outbox_message
from habitat.habitat_platform.worker.config import DispatchConfig
from habitat.habitat_platform.worker.dispatcher import run_dispatcher

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(level=os.environ.get("WORKER_LOGLEVEL", "INFO"))
    app = create_app(os.environ.get("APP_ENV", "development"))
    config = DispatchConfig.from_env()
    logger.info(
        "Notification worker started for %s (batch %d, poll %ss, %d attempts)",
        ", ".join(sorted(HANDLERS)),
        config.batch_size,
        config.poll_interval,
        config.max_attempts,
    )
    with app.app_context():
        run_dispatcher(config, send=handle_outbox_message)


if __name__ == "__main__":
    main()
