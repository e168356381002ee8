"""CORS for the web frontend."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dbai.config import Settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Only read endpoints are called from browsers; the rest are server-to-server."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit"],
    )
