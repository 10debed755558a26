# storefront/main.py
import os

import uvicorn

from storefront.api import create_app
from storefront.utils.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

app = create_app()


def run() -> None:
    port = int(os.getenv("PORT", 8000))
    logger.info(f"Starting storefront API on port {port}")
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    run()
