#!/usr/bin/env python3
"""
Entry point for the Sport Manager roster service.

Usage:
    python run.py

Environment Variables:
    ENV: development or production (default: development)
    PORT: Port to run on (default: 8080)
    DATABASE_URL: SQLAlchemy URL; otherwise built from PGHOST, PGUSER,
                  PGPASSWORD, PGDATABASE, PGPORT
    LOG_LEVEL: Overrides the per-environment log level
"""
import logging
import os

from sportmanager.app import create_app
from sportmanager.config import ENV_DEVELOPMENT

logger = logging.getLogger(__name__)


def main():
    env = os.getenv('ENV', ENV_DEVELOPMENT)
    app = create_app(env)
    port = app.config['PORT']

    logger.info(f"Starting roster service on port {port}...")
    app.run(host='0.0.0.0', port=port, debug=app.config.get('DEBUG', False))


if __name__ == '__main__':
    main()
