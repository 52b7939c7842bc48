"""Client for the multimodal chat-completions API that reads menu images."""

import json
import logging
import re
import time
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from menu_import_service.errors import (
    ExternalServiceError,
    MalformedResponseError,
    UnsupportedFormatError,
)
from menu_import_service.models.extraction_models import ExtractedMenu
from menu_import_service.observability.decorators import traced
from menu_import_service.observability.metrics import record_vision_api_call

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TIMEOUT_SECONDS = 60.0

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

SYSTEM_PROMPT = """You are a menu extraction expert. Analyze the menu image and extract every menu item with its details.

Return a JSON object with exactly this structure:
{
  "categories": [
    {
      "name": "Category Name",
      "description": "Optional category description",
      "items": [
        {
          "name": "Item Name",
          "description": "Item description if available",
          "price": 12.99,
          "is_special": false,
          "is_available": true
        }
      ]
    }
  ]
}

Guidelines:
- Extract ALL visible menu items
- Preserve original pricing exactly as printed, including decimals
- Do not convert currencies
- Group items into the categories shown on the menu
- If no clear categories exist, create logical ones like "Main Dishes" or "Appetizers"
- Include item descriptions when available
- Set is_special to true when an item is highlighted or labelled "chef's special", "signature" or similar
- Set is_available to false only when an item is explicitly marked "sold out" or "unavailable"
"""

USER_PROMPT = "Extract all menu items from this menu image and return them in the specified JSON format."


def parse_extracted_menu(content: str) -> ExtractedMenu:
    """Pull the menu JSON object out of free-form model text.

    The model is not guaranteed to answer with bare JSON, so the span from the
    first opening brace to the last closing brace is decoded and validated.

    Raises:
        MalformedResponseError: If no JSON object is present, it does not
            decode, or it does not describe a menu
    """
    match = _JSON_OBJECT.search(content or "")
    if not match:
        raise MalformedResponseError("No JSON found in vision model response")

    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Failed to parse menu data: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedResponseError("Menu data is not a JSON object")

    try:
        return ExtractedMenu.model_validate(payload)
    except PydanticValidationError as e:
        raise MalformedResponseError(
            f"Menu data does not match the expected shape: {e.error_count()} error(s)"
        ) from e


class VisionExtractionClient:
    """HTTP client for menu extraction via a vision-capable chat model.

    Sends exactly one request per extraction. Failures are terminal for the
    call; retrying means starting a new import.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the vision client.

        Args:
            api_key: Bearer token for the chat-completions API
            base_url: API root, e.g. "https://api.openai.com/v1"
            model: Vision-capable model name
            max_tokens: Completion token ceiling
            timeout_seconds: Request timeout for the single call
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds

    def build_request(self, image_url: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": USER_PROMPT},
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                },
            ],
        }

    @traced("vision_extract", service_name="menu-import-svc")
    async def extract(self, image_url: str, file_format: str = "image") -> ExtractedMenu:
        """Extract a structured menu from an image URL.

        Args:
            image_url: Publicly fetchable URL of the menu image
            file_format: "image" or "pdf"

        Returns:
            The validated ExtractedMenu

        Raises:
            UnsupportedFormatError: For PDF input, before any request is made
            ExternalServiceError: On a non-2xx answer or a transport failure
            MalformedResponseError: If the answer holds no usable menu JSON
        """
        if file_format == "pdf":
            raise UnsupportedFormatError(
                "PDF menus are not supported; please upload a photo or screenshot of the menu"
            )

        url = f"{self.base_url}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        started = time.perf_counter()

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(url, json=self.build_request(image_url), headers=headers)
        except httpx.RequestError as e:
            logger.error(f"Vision API request failed: {e}")
            raise ExternalServiceError(f"Vision API request failed: {e}") from e
        finally:
            record_vision_api_call(self.model, time.perf_counter() - started)

        if not response.is_success:
            logger.error(f"Vision API error: {response.status_code}")
            raise ExternalServiceError(
                f"Vision API error: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise MalformedResponseError("Invalid response envelope from vision API") from e

        if not isinstance(content, str):
            raise MalformedResponseError("Vision API returned no text content")

        menu = parse_extracted_menu(content)
        logger.info(
            f"Vision model extracted {menu.category_count} categories and {menu.item_count} items"
        )
        return menu
