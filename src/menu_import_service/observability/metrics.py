"""Custom metrics for the menu import service."""

from opentelemetry import metrics

meter = metrics.get_meter("menu-import-svc")

extraction_success_counter = meter.create_counter(
    name="menu_extraction_success_total",
    description="Total number of menu imports that completed",
    unit="1",
)

extraction_failure_counter = meter.create_counter(
    name="menu_extraction_failure_total",
    description="Total number of menu imports that failed, by error type",
    unit="1",
)

extraction_duration_histogram = meter.create_histogram(
    name="menu_extraction_duration_seconds",
    description="Duration from ledger record creation to terminal write",
    unit="s",
)

imported_rows_counter = meter.create_counter(
    name="menu_import_rows_total",
    description="Category and item rows created by imports",
    unit="1",
)

vision_api_response_time = meter.create_histogram(
    name="vision_api_response_time_seconds",
    description="Response time for vision model API calls",
    unit="s",
)


def record_extraction_success(category_count: int, item_count: int) -> None:
    """Record a completed import and the rows it created.

    Args:
        category_count: Categories created
        item_count: Items created
    """
    extraction_success_counter.add(1)
    imported_rows_counter.add(category_count, {"kind": "category"})
    imported_rows_counter.add(item_count, {"kind": "item"})


def record_extraction_failure(error_type: str) -> None:
    """Record a failed import.

    Args:
        error_type: Exception class name of the failure
    """
    extraction_failure_counter.add(1, {"error_type": error_type})


def record_extraction_duration(duration_seconds: float) -> None:
    extraction_duration_histogram.record(duration_seconds)


def record_vision_api_call(model: str, duration_seconds: float) -> None:
    """Record a vision API call.

    Args:
        model: Model name the request was sent to
        duration_seconds: Duration in seconds
    """
    vision_api_response_time.record(duration_seconds, {"model": model})
