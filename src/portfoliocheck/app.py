"""Module exposing the FastAPI app instance for uvicorn.

This module builds the application from the default configuration (plus any
ALL_UPPERCASE environment variables referenced through config vars) so that
tools like uvicorn can run "portfoliocheck.app:app" directly, in addition to
the `portfoliocheck serve` command.
"""

from __future__ import annotations

from .config.config_parser import load_config
from .servers.webserver import create_app

app = create_app(load_config())
