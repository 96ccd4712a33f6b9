"""
Utility functions for the form-data HTTP connector.
"""

import re
from typing import Dict, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_SENSITIVE_QUERY_KEY = re.compile(r"token|key|secret|password|signature", re.IGNORECASE)


def sanitize_url_for_logging(url: str) -> str:
    """
    Sanitize URL for logging by masking credential-like query parameters.

    Example:
        >>> sanitize_url_for_logging("https://api.example.com/v1?token=abc&page=2")
        'https://api.example.com/v1?token=%5BREDACTED%5D&page=2'
    """
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [
        (k, "[REDACTED]" if _SENSITIVE_QUERY_KEY.search(k) else v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit(parts._replace(query=urlencode(query)))


def merge_headers(
    caller: Mapping[str, str], required: Mapping[str, str]
) -> Dict[str, str]:
    """
    Add ``required`` headers to the caller's headers.

    Caller headers are kept as given. A required header replaces a caller
    header of the same name (compared case-insensitively), since the body
    encoding depends on it.
    """
    merged = dict(caller)
    for name, value in required.items():
        for key in [k for k in merged if k.lower() == name.lower()]:
            del merged[key]
        merged[name] = value
    return merged
