"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from evcharging.core.config import BaseConfig, get_config
from evcharging.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    Order matters: extensions (database, JWT, limiter, session store) come
    before the API so blueprints and the token-renewal hooks can resolve
    them; error handlers are attached last.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Client IPs feed the rate limiter; trust only the configured proxy hops
    hops = int(app.config.get("PROXY_FIX_HOPS", 1))
    if hops > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops)

    from evcharging.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from evcharging.core import cors

    cors.init_app(app)

    from evcharging.api import init_app as init_api

    init_api(app)

    from evcharging.core import errors

    errors.init_app(app)

    from evcharging import cli as app_cli

    app_cli.init_app(app)

    return app
