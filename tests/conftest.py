"""Shared pytest fixtures and configuration for all tests."""

import json
import os

import pytest

# main.py and lambda_handler.py only build the real application outside test mode
os.environ.setdefault("ENVIRONMENT", "test")


@pytest.fixture
def mock_restaurant_id() -> str:
    """Fixture providing a standard test restaurant ID."""
    return "rest_123456"


@pytest.fixture
def sample_menu_payload() -> dict:
    """Fixture providing a menu as the vision model returns it."""
    return {
        "categories": [
            {
                "name": "Salads",
                "description": "Fresh from the garden",
                "items": [
                    {
                        "name": "Caesar Salad",
                        "description": "Romaine, parmesan, croutons",
                        "price": 9.99,
                        "is_special": False,
                        "is_available": True,
                    },
                    {"name": "Greek Salad", "price": "$8.50"},
                ],
            },
            {
                "name": "Burgers",
                "items": [
                    {"name": "Cheeseburger", "price": 12.99, "is_special": True},
                ],
            },
        ]
    }


@pytest.fixture
def sample_model_content(sample_menu_payload: dict) -> str:
    """Fixture providing model text that wraps the menu JSON in prose."""
    return (
        "Here is the extracted menu:\n```json\n"
        + json.dumps(sample_menu_payload, indent=2)
        + "\n```\nLet me know if you need anything else."
    )


@pytest.fixture
def sample_restaurant_item() -> dict:
    """Fixture providing a restaurant row as stored in DynamoDB."""
    return {
        "id": "rest_123456",
        "owner_id": "owner_1",
        "name": "Trattoria Roma",
        "default_currency": "EUR",
    }
