"""
Response-mode selection for handlers that serve both browsers and API clients.
"""

from flask import request

JSON_MEDIA_TYPE = "application/json"


def wants_json(allow_wildcard: bool = False) -> bool:
    """
    True when the caller asked for JSON via the Accept header.

    Args:
        allow_wildcard: also treat a bare `*/*` Accept header as JSON
            (curl and most HTTP libraries send exactly that)
    """
    accept = request.headers.get("Accept", "")
    if JSON_MEDIA_TYPE in accept:
        return True
    return allow_wildcard and accept.strip() == "*/*"
