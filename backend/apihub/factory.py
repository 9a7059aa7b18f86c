"""Application factory for the token and resource API."""

from __future__ import annotations

from typing import Any

from flask import Flask

from apihub.core.config import BaseConfig, get_config
from apihub.core.logger import configure_logging, init_app as init_logging
from apihub.core.startup import run_startup_checks


def _shell_context() -> dict[str, Any]:
    """Names preloaded into ``flask shell``."""
    from apihub import models
    from apihub.core.extensions import db

    return {
        "db": db,
        "User": models.User,
        "Token": models.Token,
        "Todo": models.Todo,
        "Note": models.Note,
        "Url": models.Url,
    }


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    ``config`` defaults to the class selected by ``APP_ENV``. An optional
    ``instance/config.py`` is layered on top.

    :raises apihub.core.startup.StartupCheckError: When the signing secret is
        missing, or is unsafe for production.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)
    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    # Refuse to boot before any token could be minted with a bad secret
    run_startup_checks(app)

    from apihub import cli as app_cli
    from apihub.api import init_app as init_api
    from apihub.core import cors, errors, extensions, proxy

    proxy.init_app(app)
    extensions.init_app(app)
    init_logging(app)
    cors.init_app(app)
    init_api(app)
    errors.init_app(app)
    app_cli.init_app(app)
    app.shell_context_processor(_shell_context)

    app.logger.debug("Application created", extra={"event": "app.created"})
    return app
