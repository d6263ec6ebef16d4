"""Shared dependency factory for the Lambda handler.

Dependencies are created once and reused across invocations within the same
Lambda container.
"""

import logging
import os

from fastapi import FastAPI
from sqlalchemy import Engine
from sqlalchemy.orm import sessionmaker

from restaurant_order_service.handlers.api_handler import create_app
from restaurant_order_service.observability import configure_logging, setup_observability
from restaurant_order_service.settings import (
    create_engine_from_env,
    create_s3_client,
    create_services,
    prepare_database,
)

logger = logging.getLogger(__name__)

# Module-level caches for Lambda container reuse
_engine: Engine | None = None
_session_factory: sessionmaker | None = None
_fastapi_app: FastAPI | None = None


def get_engine() -> Engine:
    """Create or retrieve the cached database engine.

    Returns:
        Engine with the schema in place
    """
    global _engine

    if _engine is None:
        _engine = create_engine_from_env()
    return _engine


def get_session_factory() -> sessionmaker:
    """Create or retrieve the cached session factory.

    Returns:
        Session factory bound to the cached engine
    """
    global _session_factory

    if _session_factory is None:
        _session_factory = prepare_database(get_engine())
    return _session_factory


def get_fastapi_app() -> FastAPI:
    """Create or retrieve the cached FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    global _fastapi_app

    if _fastapi_app is not None:
        return _fastapi_app

    services = create_services(
        session_factory=get_session_factory(), s3_client=create_s3_client()
    )
    _fastapi_app = create_app(**services)
    setup_observability(app=_fastapi_app, engine=get_engine())

    logger.info("FastAPI application initialized")
    return _fastapi_app


def initialize_lambda_environment() -> None:
    """Initialize Lambda environment with logging.

    Should be called once during Lambda cold start.
    """
    # Configure structured logging
    log_level = os.getenv("LOG_LEVEL", "INFO")
    configure_logging(log_level)

    logger.info("Lambda environment initialized")
