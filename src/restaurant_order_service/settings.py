"""Environment driven construction of engines, clients and services.

Shared by the local entry point (main.py) and the Lambda dependency cache.
"""

import logging
import os
from decimal import Decimal
from typing import Any

import boto3
from sqlalchemy import Engine
from sqlalchemy.orm import sessionmaker

from restaurant_order_service.cart import CartPolicy
from restaurant_order_service.cart.pricing import (
    DEFAULT_DELIVERY_LOCATION,
    parse_delivery_fees,
    to_money,
)
from restaurant_order_service.db.database import create_db_engine, create_session_factory, init_db
from restaurant_order_service.db.seed_data import seed_demo_data
from restaurant_order_service.services.catalog_service import CatalogService
from restaurant_order_service.services.checkout_service import (
    DEFAULT_WHATSAPP_NUMBER,
    CheckoutService,
)
from restaurant_order_service.services.order_service import (
    DEFAULT_ESTIMATED_DELIVERY_TIME,
    OrderService,
)
from restaurant_order_service.services.upload_service import (
    DEFAULT_MAX_UPLOAD_BYTES,
    UploadService,
)

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./restaurant_orders.db"
DEFAULT_DELIVERY_FEES = "perla-marina:0,cabarete:100,sosua:150"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def create_engine_from_env() -> Engine:
    """Create the database engine and ensure the schema exists.

    Returns:
        Engine for DATABASE_URL
    """
    database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    engine = create_db_engine(
        database_url,
        echo=_env_flag("LOG_SQL_QUERIES", "false"),
        pool_size=int(os.getenv("DB_POOL_SIZE", "10")),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "20")),
    )
    init_db(engine)
    return engine


def prepare_database(engine: Engine) -> sessionmaker:
    """Create the session factory and load demo data if enabled.

    Args:
        engine: Engine with the schema in place

    Returns:
        Session factory bound to the engine
    """
    session_factory = create_session_factory(engine)
    if _env_flag("SEED_DEMO_DATA", "true"):
        seed_demo_data(session_factory)
    return session_factory


def cart_policy_from_env() -> CartPolicy:
    """Build the cart pricing policy from TAX_RATE and DELIVERY_FEES.

    Raises:
        ValueError: If either variable is malformed
    """
    tax_rate: Decimal = to_money(os.getenv("TAX_RATE", "0"))
    delivery_fees = parse_delivery_fees(os.getenv("DELIVERY_FEES", DEFAULT_DELIVERY_FEES))
    default_location = os.getenv("DEFAULT_DELIVERY_LOCATION", DEFAULT_DELIVERY_LOCATION).lower()

    return CartPolicy(
        tax_rate=tax_rate,
        delivery_fees=delivery_fees,
        default_location=default_location,
    )


def create_s3_client() -> Any:
    """Create the S3 client used for image uploads.

    Returns:
        Boto3 S3 client configured for environment
    """
    # Check for local S3 endpoint (for development)
    endpoint_url = os.getenv("S3_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    if endpoint_url:
        logger.info(f"Using local S3 at {endpoint_url}")
        return boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )

    logger.info(f"Using AWS S3 in region {region}")
    # Production - boto3 will use default credential chain (IAM role, env vars, etc.)
    return boto3.client("s3", region_name=region)


def create_services(session_factory: sessionmaker, s3_client: Any) -> dict[str, Any]:
    """Create all services from environment configuration.

    Args:
        session_factory: Factory for database sessions
        s3_client: Boto3 S3 client

    Returns:
        Services keyed by the create_app argument names
    """
    catalog_service = CatalogService(session_factory=session_factory)
    order_service = OrderService(
        session_factory=session_factory,
        estimated_delivery_time=os.getenv(
            "ESTIMATED_DELIVERY_TIME", DEFAULT_ESTIMATED_DELIVERY_TIME
        ),
    )
    checkout_service = CheckoutService(
        catalog_service=catalog_service,
        policy=cart_policy_from_env(),
        whatsapp_number=os.getenv("WHATSAPP_NUMBER", DEFAULT_WHATSAPP_NUMBER),
    )
    upload_service = UploadService(
        s3_client=s3_client,
        bucket_name=os.getenv("S3_BUCKET_NAME", "restaurant-menu-images"),
        max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES))),
        public_base_url=os.getenv("IMAGE_BASE_URL"),
    )

    logger.info("Services initialized")
    return {
        "catalog_service": catalog_service,
        "order_service": order_service,
        "checkout_service": checkout_service,
        "upload_service": upload_service,
    }
