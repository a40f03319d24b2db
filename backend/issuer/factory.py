"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from issuer.core.config import BaseConfig, get_config
from issuer.core.logger import configure_logging, init_app as init_logging
from issuer.services._shared.ports.document_store import DocumentStore
from issuer.services._shared.ports.identity import IdentityDirectory


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    store: DocumentStore | None = None,
    identities: IdentityDirectory | None = None,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    ``store`` and ``identities`` override the collaborators otherwise derived
    from ``REDIS_URL`` and ``IDENTITY_SERVICE_URL``.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Proxy headers if running behind a reverse proxy (optional module)
    from issuer.core import proxy

    proxy.init_app(app)

    from issuer.core import extensions

    extensions.init_app(app, store=store, identities=identities)

    init_logging(app)

    from issuer.core import cors

    cors.init_app(app)

    from issuer.api import init_app as init_api

    init_api(app)

    from issuer.core import errors

    errors.init_app(app)

    from issuer import cli as issuer_cli

    issuer_cli.init_app(app)

    return app
