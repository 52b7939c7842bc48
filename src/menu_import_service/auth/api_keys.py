"""Service API key authentication.

Callers (the dashboard backend, internal jobs) authenticate with a shared key
sent in the X-API-Key header. End-user sessions are handled upstream.
"""

from fastapi import HTTPException


class APIKeyValidator:
    """Checks API keys against the configured set."""

    def __init__(self, api_keys: list[str]) -> None:
        """Initialize validator with the accepted keys.

        Args:
            api_keys: Accepted API key strings

        Raises:
            ValueError: If api_keys is empty
        """
        if not api_keys:
            raise ValueError("At least one API key must be provided")

        self.api_keys = frozenset(api_keys)

    def validate(self, api_key: str) -> bool:
        return api_key in self.api_keys


def require_api_key(x_api_key: str | None, validator: APIKeyValidator | None) -> str:
    """Return the key from the X-API-Key header if it is accepted.

    Args:
        x_api_key: Header value, None when the header is absent
        validator: Validator to check against; None skips the check

    Raises:
        HTTPException: 401 if the key is missing or not accepted
    """
    if not x_api_key:
        raise HTTPException(status_code=401, detail="Missing API key")

    if validator is not None and not validator.validate(x_api_key):
        raise HTTPException(status_code=401, detail="Invalid API key")

    return x_api_key
