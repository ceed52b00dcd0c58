"""Client SDK for the askflow server."""

from askflow.sdk.client import Backend, HttpBackend

__all__ = ["Backend", "HttpBackend"]
