"""
Multipart form encoding for request bodies.

Structured values (mappings, sequences, ``None``) travel as JSON text and
primitives as their string form; binary values are sent untouched. The wire
format itself comes from urllib3, the encoder ``requests`` uses for its own
multipart uploads.
"""

import json
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, Union

from urllib3 import encode_multipart_formdata


@dataclass(frozen=True)
class MultipartPayload:
    """Encoded body plus the Content-Type header describing it."""

    body: bytes
    content_type: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Content-Type": self.content_type}


def is_structured(value: Any) -> bool:
    """True for values that are serialized as JSON rather than stringified."""
    return value is None or isinstance(value, (Mapping, list, tuple, set, frozenset))


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return list(value)
    return str(value)


def encode_value(value: Any) -> Union[str, bytes]:
    """
    Convert one body value into its form-field content.

    Binary values are passed through as bytes, whatever their encoding.

    Examples:
        >>> encode_value({"plan": "basic"})
        '{"plan": "basic"}'
        >>> encode_value(42)
        '42'
        >>> encode_value(True)
        'true'
    """
    if is_structured(value):
        return json.dumps(value, ensure_ascii=False, default=_json_default)
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return str(value)


def encode_form_fields(body: Mapping[str, Any]) -> List[Tuple[str, Union[str, bytes]]]:
    """Encode every body entry, keeping the mapping's iteration order."""
    return [(name, encode_value(value)) for name, value in body.items()]


def encode_multipart(
    body: Mapping[str, Any], boundary: Optional[str] = None
) -> MultipartPayload:
    """
    Build a ``multipart/form-data`` payload from a request body.

    Args:
        body: Field name to value mapping
        boundary: Fixed boundary (random when omitted)

    Returns:
        MultipartPayload with the encoded bytes and matching Content-Type
    """
    data, content_type = encode_multipart_formdata(
        encode_form_fields(body), boundary=boundary
    )
    return MultipartPayload(body=data, content_type=content_type)
