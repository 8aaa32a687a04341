"""
HTTP API for the veteran resource directory.

Provides REST endpoints for list/search, symptom-based recommendations and
per-owner client state (saved resources, search history, location).
"""

from .server import create_api_server, main, run_api_server

__all__ = ["create_api_server", "run_api_server", "main"]
