from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from event_approval.config import Settings

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def configure_logging(settings: Settings) -> None:
    """Install the root handler at the configured level."""
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
