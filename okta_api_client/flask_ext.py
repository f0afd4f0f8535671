"""Flask integration for the Okta API client.

Usage:
    app = Flask(__name__)
    app.config["OKTA_PROD_BASE_URL"] = "https://mycompany.okta.com"
    app.config["OKTA_PROD_API_TOKEN"] = "..."
    okta = OktaApi(app)

    @app.route("/users")
    def users():
        return jsonify(okta.client().get("users").data)
"""
from __future__ import annotations
import os
from dataclasses import replace
from typing import Any, Mapping, Optional

from flask import Flask, current_app

from .config.settings import Connection, OktaSettings, load_settings
from .core.client import OktaApiClient
from .core.exceptions import ConfigurationError

EXTENSION_KEY = "okta_api"


def _connections_from_mapping(raw: Mapping[str, Any], log_channels: list[str]) -> dict[str, Connection]:
    connections = {}
    for key, value in raw.items():
        if isinstance(value, Connection):
            connections[key] = value
            continue
        if not isinstance(value, Mapping):
            raise ConfigurationError(f"OKTA_CONNECTIONS['{key}'] must be a mapping with base_url and token.")
        connections[key] = Connection(
            base_url=value.get("base_url") or value.get("url") or "",
            token=value.get("token") or value.get("api_token") or "",
            log_channels=tuple(value.get("log_channels") or log_channels),
        )
    return connections


def settings_from_app(app: Flask) -> OktaSettings:
    """Build OktaSettings from ``app.config``.

    ``OKTA_SETTINGS`` (an OktaSettings instance) wins. Otherwise every
    ``OKTA_*`` key of ``app.config`` overrides the environment variable of the
    same name, and ``OKTA_CONNECTIONS`` may also be a mapping of connection
    key to ``{"base_url": ..., "token": ...}``.
    """
    configured = app.config.get("OKTA_SETTINGS")
    if isinstance(configured, OktaSettings):
        return configured

    overrides = {
        key: ",".join(value) if isinstance(value, (list, tuple)) else str(value)
        for key, value in app.config.items()
        if key.startswith("OKTA_") and key not in {"OKTA_CONNECTIONS", "OKTA_SETTINGS"} and value is not None
    }
    if "OKTA_LOG_CHANNELS" not in overrides and "OKTA_LOG_CHANNELS" not in os.environ:
        overrides["OKTA_LOG_CHANNELS"] = app.logger.name

    raw_connections = app.config.get("OKTA_CONNECTIONS")
    if isinstance(raw_connections, (list, tuple)):
        overrides["OKTA_CONNECTIONS"] = ",".join(raw_connections)
    elif isinstance(raw_connections, str):
        overrides["OKTA_CONNECTIONS"] = raw_connections

    settings = load_settings({**os.environ, **overrides})
    if isinstance(raw_connections, Mapping):
        settings = replace(
            settings,
            connections={
                **settings.connections,
                **_connections_from_mapping(raw_connections, settings.log_channels),
            },
        )
    return settings


class OktaApi:
    """Flask extension holding Okta settings and building clients.

    Registered under ``app.extensions["okta_api"]``.
    """

    def __init__(self, app: Optional[Flask] = None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        settings = settings_from_app(app)
        app.extensions[EXTENSION_KEY] = settings
        app.logger.debug(
            "Okta API client registered (default_connection=%s, connections=%s)",
            settings.default_connection,
            ",".join(settings.connections) or "none",
        )

    @staticmethod
    def settings(app: Optional[Flask] = None) -> OktaSettings:
        app = app or current_app
        try:
            return app.extensions[EXTENSION_KEY]
        except KeyError:
            raise RuntimeError("OktaApi extension is not initialized on this Flask app") from None

    def client(self, connection_key: Optional[str] = None, app: Optional[Flask] = None) -> OktaApiClient:
        """Return a client for a configured connection of the current app."""
        return OktaApiClient(connection_key, settings=self.settings(app))


def get_client(connection_key: Optional[str] = None) -> OktaApiClient:
    """Client for the current Flask app (inside an application context)."""
    return OktaApiClient(connection_key, settings=OktaApi.settings())
