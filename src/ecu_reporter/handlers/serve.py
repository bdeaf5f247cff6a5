# ecu_reporter/handlers/serve.py

import logging
import argparse
from typing import TYPE_CHECKING

import uvicorn

from ..utilities.error_handling import handler_error_wrapper

if TYPE_CHECKING:
    from ..api import StoreAPI

logger = logging.getLogger("ecu-reporter")


@handler_error_wrapper
def handle_serve(store: "StoreAPI", params: argparse.Namespace) -> bool:
    """
    Handler for the 'serve' command. Runs the HTTP endpoints against the
    configured store until interrupted.

    Args:
        store: The scan store client
        params: Command line parameters

    Returns:
        bool: True once the server has shut down
    """
    from ..server import create_app

    print(f"\n--- Running {params.command.upper()} Command ---")

    app = create_app(store=store, settings=params.settings)
    print(f"\nServing on http://{params.host}:{params.port}")
    logger.info(f"Starting HTTP server on {params.host}:{params.port}")
    uvicorn.run(app, host=params.host, port=params.port, log_level=params.log.lower())
    return True
