"""AWS Lambda entry point for API Gateway requests.

The FastAPI application is built once per container during cold start and
served through the Mangum ASGI adapter on every invocation.
"""

import logging
import os
from typing import Any

from mangum import Mangum

from main import app

logger = logging.getLogger(__name__)

if os.getenv("ENVIRONMENT") != "test":
    mangum_handler: Mangum | None = Mangum(app, lifespan="off")
else:
    mangum_handler = None


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Serve an API Gateway event through FastAPI.

    Args:
        event: The API Gateway event payload
        context: The Lambda context object

    Returns:
        API Gateway response dict
    """
    logger.info(f"Received Lambda invocation, request_id: {context.aws_request_id}")

    if mangum_handler is None:
        return {"statusCode": 503, "body": "Service not initialized"}

    try:
        result: dict[str, Any] = mangum_handler(event, context)
        return result
    except Exception as e:
        logger.exception(f"Unhandled error in Lambda handler: {e}")
        return {"statusCode": 500, "body": "Internal server error"}
