"""
raml-mock Response Renderer

Serializes selected example values into wire bodies and assembles the
response header set.

Body encodings:
- JSON media types: compact JSON, strings that already hold a JSON document
  are sent verbatim
- YAML media types: YAML dump, strings verbatim
- Anything else: strings verbatim, other values in JSON literal form

Header values outside printable ASCII are percent-encoded as UTF-8.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import yaml

from ..common import (
    is_json_document,
    is_json_media_type,
    is_yaml_media_type,
    stringify_value,
    to_json,
)
from ..models import ABSENT, ValueSpec
from .selector import ExampleSelector


logger = logging.getLogger("ramlmock.mock")

# Printable ASCII passes through header values unchanged
HEADER_SAFE_CHARS = ''.join(chr(code) for code in range(0x20, 0x7f))


@dataclass
class RenderedResponse:
    """Status, headers and body bytes ready for the transport."""

    status_code: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b''
    media_type: Optional[str] = None


def encode_header_value(value: str) -> str:
    """
    Make a header value safe for the wire.

    Non-ASCII and control characters are percent-encoded as UTF-8; printable
    ASCII is kept as is.

    Example:
        encode_header_value('日本')  # '%E6%97%A5%E6%9C%AC'
    """
    if all(char in HEADER_SAFE_CHARS for char in value):
        return value
    return quote(value, safe=HEADER_SAFE_CHARS)


def encode_body(media_type: Optional[str], value: Any) -> bytes:
    """
    Encode a selected body value for a media type.

    Args:
        media_type: Negotiated media type
        value: Selected value (ABSENT yields an empty body)

    Returns:
        UTF-8 encoded body
    """
    if value is ABSENT:
        return b''

    if media_type and is_json_media_type(media_type):
        if isinstance(value, str) and is_json_document(value):
            text = value
        else:
            text = to_json(value)
    elif media_type and is_yaml_media_type(media_type):
        if isinstance(value, str):
            text = value
        else:
            text = yaml.safe_dump(value, default_flow_style=False, sort_keys=False, allow_unicode=True)
    else:
        text = stringify_value(value)

    return text.encode('utf-8')


class ResponseRenderer:
    """
    Builds RenderedResponses from selected values.

    Header values are resolved independently through the shared selector, so
    each header follows the default > example > examples precedence on its
    own.

    Example:
        renderer = ResponseRenderer(ExampleSelector())
        rendered = renderer.render('application/json', {'success': True}, {})
        rendered.body  # b'{"success":true}'
    """

    def __init__(self, selector: Optional[ExampleSelector] = None):
        self.selector = selector or ExampleSelector()

    def render(
        self,
        media_type: Optional[str],
        body_value: Any,
        header_specs: Mapping[str, ValueSpec],
        status_code: int = 200
    ) -> RenderedResponse:
        """
        Render a response.

        Args:
            media_type: Negotiated media type (None when no body is declared)
            body_value: Selected body value or ABSENT
            header_specs: Declared response headers
            status_code: Status to respond with

        Returns:
            RenderedResponse
        """
        headers = self.render_headers(header_specs)
        body = encode_body(media_type, body_value)

        if body_value is ABSENT or not media_type:
            return RenderedResponse(status_code=status_code, headers=headers, body=body)

        headers['Content-Type'] = media_type
        return RenderedResponse(
            status_code=status_code,
            headers=headers,
            body=body,
            media_type=media_type
        )

    def render_headers(self, header_specs: Mapping[str, ValueSpec]) -> Dict[str, str]:
        """Resolve declared headers, dropping the ones without a value."""
        headers = {}
        for name, spec in header_specs.items():
            value = self.selector.select(spec)
            if value is ABSENT:
                continue
            text = stringify_value(value)
            encoded = encode_header_value(text)
            if encoded != text:
                logger.debug(f"Percent-encoded value of header {name}")
            headers[name] = encoded
        return headers
