from __future__ import annotations

import logging


def configure_app_logging(level: str = "INFO") -> None:
    """
    Set the level for the `annual_review` logger tree.

    Uvicorn configures the handlers; this only controls verbosity of our
    package. Use `ANNUAL_REVIEW_LOG_LEVEL=DEBUG` to see permission decisions.
    """

    normalized = level.upper()
    logging.getLogger("annual_review").setLevel(normalized)
    logging.getLogger("annual_review").propagate = True
