"""Server entry point: load configuration, configure logging, run uvicorn."""

from typing import Optional

import uvicorn

from .app import create_app
from .config_loader import load_config
from .logging import setup_logging


def run(config_path: Optional[str] = None) -> None:
    config = load_config(config_path)
    logger = setup_logging(config.log_level)
    app = create_app(config)
    logger.info(f"Starting server on {config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    run()
