#!/usr/bin/env python3
"""mazegen_server: Main entry point for the maze generation web service."""

import os
import logging
import sys
import argparse

from mazegen_lib.app import APP_DIR, create_app
from mazegen_lib.log_utils import setup_logging


def main():
    """Initializes and runs the mazegen Flask application."""
    # --- Basic Setup ---
    os.makedirs(APP_DIR, exist_ok=True)
    log = logging.getLogger("mazegen.main")

    # --- Argument Parsing ---
    parser = argparse.ArgumentParser(description="Image-to-maze web service.")
    g_server = parser.add_argument_group("Server Configuration")
    g_server.add_argument(
        "--host", type=str, default=None, help="Interface to bind. Default: from config."
    )
    g_server.add_argument(
        "--port", type=int, default=None, help="Port to listen on. Default: from config."
    )
    g_server.add_argument(
        "--config",
        metavar="FILE",
        default=None,
        help=f"Path to the settings file. Default: {os.path.join(APP_DIR, 'mazegen.cfg')}",
    )

    g_log = parser.add_argument_group("Logging & Output")
    g_log.add_argument(
        "-v", "--verbose", action="store_true", help="Enable INFO logging for progress."
    )
    g_log.add_argument(
        "--color-logs", action="store_true", help="Enable colored logging output."
    )
    g_log.add_argument(
        "--log-file",
        metavar="FILE",
        default=None,
        help="Redirect all logging output to a specified file.",
    )
    g_log.add_argument(
        "-d",
        "--debug",
        dest="debug_topics",
        metavar="TOPICS",
        help="Enable DEBUG logging (all,api,store,config,generate,edges,path).",
    )
    args = parser.parse_args()

    # --- Logging Setup ---
    setup_logging(
        level=logging.INFO if args.verbose else logging.WARNING,
        color_logs=args.color_logs,
        debug_topics=args.debug_topics,
        log_file=args.log_file,
    )

    config_overrides = {
        key: value
        for key, value in {"CONFIG_PATH": args.config}.items()
        if value is not None
    }

    # --- App Creation ---
    try:
        app = create_app(config_overrides)
        server_settings = app.config_service.get_settings().get("Server", {})
        log.info("mazegen application created successfully.")
    except Exception as e:
        log.critical("Failed to create the mazegen application: %s", e, exc_info=True)
        sys.exit(1)

    host = args.host or server_settings.get("host", "127.0.0.1")
    port = args.port or int(server_settings.get("port", 5000))

    # --- Run Server ---
    try:
        log.info("Starting mazegen server at http://%s:%d...", host, port)
        log.info("Press CTRL+C to stop the server.")
        from waitress import serve

        serve(app, host=host, port=port)
    except KeyboardInterrupt:
        log.info("\nServer stopped by user. Exiting.")
        sys.exit(0)
    except Exception as e:
        log.critical("The Flask server failed to run: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
