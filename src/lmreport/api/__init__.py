"""HTTP API over the incoming report directory."""

from lmreport.api.app import create_app

__all__ = ["create_app"]
