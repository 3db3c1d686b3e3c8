"""
RFP Slide Generator - Runner

Starts the API server on PORT (default 5000).

    python -m rfp_slides.runner
"""

import logging

import uvicorn

from rfp_slides.core.config import get_settings, setup_logging

logger = logging.getLogger(__name__)


def main():
    setup_logging()
    settings = get_settings()
    logger.info(f"Starting RFP to Slide Generator API on port {settings.port}")
    uvicorn.run("rfp_slides.api:app", host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
