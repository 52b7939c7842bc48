"""Unit tests for AWS Lambda handler."""

from unittest.mock import MagicMock, patch

import pytest

from src.lambda_handler import lambda_handler


@pytest.mark.unit
class TestLambdaHandler:
    """Tests for lambda_handler function."""

    @pytest.fixture
    def context(self) -> MagicMock:
        context = MagicMock()
        context.aws_request_id = "request-id"
        return context

    @pytest.fixture
    def api_gateway_event(self) -> dict:
        return {
            "version": "2.0",
            "requestContext": {
                "http": {"method": "GET", "path": "/health"},
                "requestId": "request-id",
            },
            "rawPath": "/health",
        }

    def test_routes_to_mangum(self, api_gateway_event: dict, context: MagicMock) -> None:
        """Test that API Gateway events are served by the ASGI adapter."""
        mock_mangum = MagicMock(return_value={"statusCode": 200, "body": '{"status":"healthy"}'})

        with patch("src.lambda_handler.mangum_handler", mock_mangum):
            result = lambda_handler(api_gateway_event, context)

        assert result["statusCode"] == 200
        mock_mangum.assert_called_once_with(api_gateway_event, context)

    def test_unhandled_error_returns_500(self, api_gateway_event: dict, context: MagicMock) -> None:
        """Test that adapter failures are turned into a 500 response."""
        mock_mangum = MagicMock(side_effect=RuntimeError("boom"))

        with patch("src.lambda_handler.mangum_handler", mock_mangum):
            result = lambda_handler(api_gateway_event, context)

        assert result["statusCode"] == 500

    def test_not_initialized_in_test_mode(self, api_gateway_event: dict, context: MagicMock) -> None:
        """Test the response when no application was built."""
        with patch("src.lambda_handler.mangum_handler", None):
            result = lambda_handler(api_gateway_event, context)

        assert result["statusCode"] == 503
