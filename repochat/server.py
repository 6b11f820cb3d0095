"""
RepoChat Server

Entry point: loads configuration, builds the services once and serves the
HTTP API with uvicorn.

Environment variables:
    REPOCHAT_DATA_PATH: Directory holding config.yaml and logs (default: ~/.repochat)
    REPOCHAT_DEBUG: Enable debug logging (default: false)
    REPOCHAT_LOG_FILE: Log file path (default: $REPOCHAT_DATA_PATH/server.log)
    GITHUB_PAT: Token for the GitHub contents API
    OPENAI_API_KEY / ANTHROPIC_API_KEY: Text-generation credentials
"""

import argparse
import os
from pathlib import Path
from typing import Optional

import uvicorn

from repochat.configs import create_default_config, get_logger, load_settings, setup_logging
from repochat.http import create_app
from repochat.services import Services


def build_app(config_path: Optional[Path] = None, static_dir: Optional[Path] = None):
    """Load settings and assemble the FastAPI app."""
    settings = load_settings(config_path)
    services = Services(settings)
    return create_app(services, static_dir=static_dir), settings


def main():
    """Main entry point for the HTTP server."""
    parser = argparse.ArgumentParser(description="RepoChat server")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    parser.add_argument("--port", type=int, default=None, help="Port (default: http_port from config)")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--static", type=Path, default=None, help="Built frontend directory to serve")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write a default config.yaml to the data directory and exit",
    )
    args = parser.parse_args()

    setup_logging(debug=args.debug or None)
    logger = get_logger("server")

    if args.init_config:
        if create_default_config():
            logger.warning("Created default config.yaml; edit it and restart")
        else:
            logger.warning("config.yaml already exists")
        return

    app, settings = build_app(args.config, args.static)
    port = args.port or int(os.environ.get("PORT", settings.http_port))

    logger.info(f"RepoChat backend running on http://localhost:{port}")
    logger.info(f"Available projects: {', '.join(p.key for p in settings.projects)}")
    uvicorn.run(app, host=args.host, port=port, log_level="warning")


if __name__ == "__main__":
    main()
