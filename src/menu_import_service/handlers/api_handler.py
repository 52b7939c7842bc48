"""FastAPI application for the menu import API."""

import logging
from typing import Any

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from menu_import_service.auth.api_keys import APIKeyValidator, require_api_key
from menu_import_service.errors import (
    ExternalServiceError,
    MalformedResponseError,
    MenuImportError,
    PartialImportError,
    PersistenceError,
    RestaurantNotFoundError,
    StorageError,
    UnsupportedFormatError,
    ValidationError,
)
from menu_import_service.models.extraction_models import ExtractionRecord
from menu_import_service.models.menu_models import MenuCategory, MenuItem
from menu_import_service.models.quota_models import SubscriptionTier, UsageReport
from menu_import_service.repositories.extraction_repository import ExtractionRecordRepository
from menu_import_service.repositories.menu_repositories import MenuItemRepository
from menu_import_service.services.import_pipeline import MenuImportPipeline
from menu_import_service.services.quota_service import (
    QuotaService,
    can_import_more_items,
    resolve_tier,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[MenuImportError], int] = {
    ValidationError: 400,
    RestaurantNotFoundError: 404,
    UnsupportedFormatError: 415,
    MalformedResponseError: 422,
    ExternalServiceError: 502,
    StorageError: 503,
    PersistenceError: 503,
    PartialImportError: 500,
}


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class MenuImportResponse(BaseModel):
    """Rows created by a menu import, ready to merge into the dashboard."""

    extraction_id: str
    new_categories: list[MenuCategory]
    new_items: list[MenuItem]


class ItemQuotaResponse(BaseModel):
    """Response model for the import affordance check."""

    tier: SubscriptionTier
    current_count: int
    can_import_more_items: bool


def status_code_for(error: MenuImportError) -> int:
    """Map a domain error to an HTTP status, most specific class first."""
    for error_type in type(error).__mro__:
        if error_type in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[error_type]  # type: ignore[index]
    return 500


def create_app(
    pipeline: MenuImportPipeline,
    extraction_repository: ExtractionRecordRepository,
    item_repository: MenuItemRepository,
    quota_service: QuotaService,
    api_keys: list[str],
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        pipeline: Import pipeline run by the upload endpoint
        extraction_repository: Ledger used for status inspection
        item_repository: Item repository used for the import pre-check
        quota_service: Service computing owner usage
        api_keys: List of valid API keys for authentication

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Menu Import Service API",
        description="Imports restaurant menus from photos using a vision model",
        version="1.0.0",
    )

    app.state.pipeline = pipeline
    app.state.extraction_repository = extraction_repository
    app.state.item_repository = item_repository
    app.state.quota_service = quota_service
    app.state.api_key_validator = APIKeyValidator(api_keys=api_keys)

    @app.exception_handler(MenuImportError)
    async def menu_import_error_handler(request: Request, exc: MenuImportError) -> JSONResponse:
        status_code = status_code_for(exc)
        content: dict[str, Any] = {"detail": str(exc), "error": type(exc).__name__}

        if isinstance(exc, PartialImportError):
            content["categories_created"] = exc.categories_created
            content["items_created"] = exc.items_created
        elif isinstance(exc, ExternalServiceError) and exc.status_code is not None:
            content["upstream_status"] = exc.status_code

        return JSONResponse(status_code=status_code, content=content)

    def validate_api_key(x_api_key: str | None = Header(None)) -> str:
        """Dependency to validate API key."""
        return require_api_key(x_api_key, app.state.api_key_validator)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        return HealthResponse(status="healthy")

    @app.post(
        "/restaurants/{restaurant_id}/menu-imports",
        response_model=MenuImportResponse,
        status_code=201,
        tags=["Menu Import"],
    )
    async def import_menu(
        restaurant_id: str,
        file: UploadFile = File(...),
        declared_type: str = Form("image"),
        subscription_tier: str | None = Form(None),
        _api_key: str = Depends(validate_api_key),
    ) -> MenuImportResponse:
        """Import a menu from an uploaded photo.

        When subscription_tier is given, the import is refused with 403 if
        the restaurant is already at its item ceiling. The import itself can
        still take the restaurant past the ceiling.

        Args:
            restaurant_id: Restaurant receiving the menu
            file: Uploaded menu file
            declared_type: "image" or "pdf"
            subscription_tier: Optional tier used for the pre-check

        Returns:
            Created categories and items with the extraction id
        """
        if subscription_tier is not None:
            current_count = app.state.item_repository.count_for_restaurant(restaurant_id)
            if not can_import_more_items(subscription_tier, current_count):
                tier = resolve_tier(subscription_tier)
                raise HTTPException(
                    status_code=403,
                    detail=f"Menu item limit reached for the {tier.value} plan",
                )

        content = await file.read()
        logger.info(
            f"Menu import requested for restaurant {restaurant_id}: "
            f"{file.filename} ({len(content)} bytes, {file.content_type})"
        )

        result = await app.state.pipeline.import_menu_from_file(
            restaurant_id=restaurant_id,
            filename=file.filename,
            content=content,
            content_type=file.content_type,
            declared_type=declared_type,
        )

        return MenuImportResponse(
            extraction_id=result.extraction_id,
            new_categories=result.new_categories,
            new_items=result.new_items,
        )

    @app.get(
        "/restaurants/{restaurant_id}/menu-imports",
        response_model=list[ExtractionRecord],
        tags=["Menu Import"],
    )
    async def list_menu_imports(
        restaurant_id: str,
        limit: int = Query(50, ge=1, le=100),
        _api_key: str = Depends(validate_api_key),
    ) -> list[ExtractionRecord]:
        records: list[ExtractionRecord] = app.state.extraction_repository.list_for_restaurant(
            restaurant_id, limit=limit
        )
        return records

    @app.get(
        "/menu-imports/{extraction_id}",
        response_model=ExtractionRecord,
        tags=["Menu Import"],
    )
    async def get_menu_import(
        extraction_id: str,
        _api_key: str = Depends(validate_api_key),
    ) -> ExtractionRecord:
        """Get one extraction record.

        Raises:
            HTTPException: 404 if the record does not exist
        """
        record: ExtractionRecord | None = app.state.extraction_repository.get(extraction_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"Extraction {extraction_id} not found")
        return record

    @app.get("/quota/items", response_model=ItemQuotaResponse, tags=["Quota"])
    async def check_item_import(
        tier: str | None = None,
        current_count: int = 0,
        _api_key: str = Depends(validate_api_key),
    ) -> ItemQuotaResponse:
        return ItemQuotaResponse(
            tier=resolve_tier(tier),
            current_count=current_count,
            can_import_more_items=can_import_more_items(tier, current_count),
        )

    @app.get("/owners/{owner_id}/usage", response_model=UsageReport, tags=["Quota"])
    async def get_owner_usage(
        owner_id: str,
        tier: str | None = None,
        _api_key: str = Depends(validate_api_key),
    ) -> UsageReport:
        """Get an owner's restaurant and item usage against a tier."""
        report: UsageReport = await app.state.quota_service.evaluate(owner_id, tier)
        return report

    return app
