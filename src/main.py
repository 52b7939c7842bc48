"""Main application entry point for the menu import service.

This module wires the repositories, clients and services from environment
variables and exposes the FastAPI application.
"""

import logging
import os
from typing import Any

import boto3
from fastapi import FastAPI

from menu_import_service.handlers.api_handler import create_app
from menu_import_service.observability import configure_logging, setup_observability
from menu_import_service.repositories.extraction_repository import ExtractionRecordRepository
from menu_import_service.repositories.menu_repositories import (
    MenuCategoryRepository,
    MenuItemRepository,
    RestaurantRepository,
)
from menu_import_service.services.file_intake import DEFAULT_MAX_UPLOAD_BYTES, FileIntakeService
from menu_import_service.services.import_materializer import ImportMaterializer
from menu_import_service.services.import_pipeline import MenuImportPipeline
from menu_import_service.services.quota_service import QuotaService
from menu_import_service.services.vision_client import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT_SECONDS,
    VisionExtractionClient,
)

logger = logging.getLogger(__name__)


def get_dynamodb_resource() -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    endpoint_url = os.getenv("DYNAMODB_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    # Use DynamoDB Local when an endpoint is configured
    if endpoint_url:
        logger.info(f"Using local DynamoDB at {endpoint_url}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )

    logger.info(f"Using AWS DynamoDB in region {region}")
    return boto3.resource("dynamodb", region_name=region)


def get_s3_client() -> Any:
    """Create the S3 client used for menu uploads.

    S3_ENDPOINT points at an S3-compatible store (MinIO, R2) when set.
    """
    endpoint_url = os.getenv("S3_ENDPOINT")
    region = os.getenv("AWS_REGION", "us-east-1")

    # Use MinIO or R2 when an endpoint is configured
    if endpoint_url:
        logger.info(f"Using S3-compatible storage at {endpoint_url}")
        return boto3.client("s3", endpoint_url=endpoint_url, region_name=region)

    return boto3.client("s3", region_name=region)


def create_vision_client() -> VisionExtractionClient:
    """Create the vision client from environment variables.

    Raises:
        ValueError: If VISION_API_KEY is not set
    """
    api_key = os.getenv("VISION_API_KEY")
    if not api_key:
        raise ValueError("VISION_API_KEY must be set in environment")

    client = VisionExtractionClient(
        api_key=api_key,
        base_url=os.getenv("VISION_API_BASE_URL", DEFAULT_BASE_URL),
        model=os.getenv("VISION_MODEL", DEFAULT_MODEL),
        max_tokens=int(os.getenv("VISION_MAX_TOKENS", str(DEFAULT_MAX_TOKENS))),
        timeout_seconds=float(os.getenv("VISION_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))),
    )
    logger.info(f"Vision client configured - URL: {client.base_url}, model: {client.model}")
    return client


def create_file_intake() -> FileIntakeService:
    """Create the file intake service from environment variables.

    Raises:
        ValueError: If MENU_UPLOADS_BUCKET or MENU_UPLOADS_PUBLIC_URL is not set
    """
    bucket = os.getenv("MENU_UPLOADS_BUCKET")
    public_url = os.getenv("MENU_UPLOADS_PUBLIC_URL")

    if not bucket or not public_url:
        raise ValueError("MENU_UPLOADS_BUCKET and MENU_UPLOADS_PUBLIC_URL must be set in environment")

    return FileIntakeService(
        s3_client=get_s3_client(),
        bucket_name=bucket,
        public_base_url=public_url,
        max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES))),
    )


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    Returns:
        Configured FastAPI application instance

    Raises:
        ValueError: If required configuration is missing
    """
    # Configure structured logging
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing menu import service...")

    # Initialize DynamoDB resource
    dynamodb_resource = get_dynamodb_resource()

    # Get table names from environment
    extractions_table = os.getenv("DYNAMODB_EXTRACTIONS_TABLE", "menu-extractions")
    categories_table = os.getenv("DYNAMODB_CATEGORIES_TABLE", "menu-categories")
    items_table = os.getenv("DYNAMODB_ITEMS_TABLE", "menu-items")
    restaurants_table = os.getenv("DYNAMODB_RESTAURANTS_TABLE", "restaurants")

    # Create repositories
    extraction_repository = ExtractionRecordRepository(dynamodb_resource, extractions_table)
    category_repository = MenuCategoryRepository(dynamodb_resource, categories_table)
    item_repository = MenuItemRepository(dynamodb_resource, items_table)
    restaurant_repository = RestaurantRepository(dynamodb_resource, restaurants_table)

    logger.info(
        f"Repositories configured - extractions: {extractions_table}, "
        f"categories: {categories_table}, items: {items_table}, restaurants: {restaurants_table}"
    )

    # Build the import pipeline; intake and vision settings are required
    pipeline = MenuImportPipeline(
        file_intake=create_file_intake(),
        extraction_repository=extraction_repository,
        vision_client=create_vision_client(),
        materializer=ImportMaterializer(category_repository, item_repository),
        restaurant_repository=restaurant_repository,
        category_repository=category_repository,
        item_repository=item_repository,
    )
    quota_service = QuotaService(restaurant_repository, item_repository)

    # ADMIN_API_KEY may hold several comma-separated keys
    api_keys = [key.strip() for key in os.getenv("ADMIN_API_KEY", "").split(",") if key.strip()]
    if not api_keys:
        logger.warning("No ADMIN_API_KEY configured - API endpoints will not be accessible")
        api_keys = ["dummy-key-for-development"]

    # Create FastAPI app with dependencies
    app = create_app(
        pipeline=pipeline,
        extraction_repository=extraction_repository,
        item_repository=item_repository,
        quota_service=quota_service,
        api_keys=api_keys,
    )

    # Setup OpenTelemetry observability
    setup_observability(app)

    logger.info("Menu import service initialized successfully")
    return app


# Placeholder app during test collection; the real one needs AWS and vision settings
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
