"""Configuration module for the Okta API client."""
from .settings import Connection, OktaSettings, load_settings

__all__ = ["Connection", "OktaSettings", "load_settings"]
