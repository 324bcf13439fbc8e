"""
raml-mock Content Negotiator

Decides which declared body media type a request is answered with.

Rules, in order:
1. A known extension on the request path (``/users.json``)
2. The Accept header
3. The document's default media type
4. The only declared body, when there is exactly one
5. NotAcceptable
"""

import logging
from typing import Optional

from ..common import (
    extension_matches,
    media_range_matches,
    normalize_media_type,
    parse_accept,
    split_extension,
)
from ..errors import NotAcceptable
from ..models import ResponseSpec


logger = logging.getLogger("ramlmock.mock")


class ContentNegotiator:
    """
    Resolves the response media type for a request.

    Example:
        negotiator = ContentNegotiator(default_media_type='application/json')
        media_type = negotiator.negotiate('/users.xml', '*/*', response_spec)
    """

    def __init__(self, default_media_type: Optional[str] = None):
        """
        Initialize negotiator.

        Args:
            default_media_type: Document default media type (RAML ``mediaType``)
        """
        self.default_media_type = default_media_type

    def negotiate(
        self,
        request_path: str,
        accept_header: Optional[str],
        response_spec: ResponseSpec,
        default_media_type: Optional[str] = None
    ) -> Optional[str]:
        """
        Pick the media type to answer with.

        Args:
            request_path: Request path, possibly ending in an extension
            accept_header: Raw Accept header (may be None)
            response_spec: Response being served
            default_media_type: Overrides the negotiator's document default

        Returns:
            Declared media type, or None when the response has no body

        Raises:
            NotAcceptable: If no declared media type fits the request
        """
        available = response_spec.media_types
        if not available:
            return None

        _, ext = split_extension(request_path)
        if ext:
            for media_type in available:
                if extension_matches(ext, media_type):
                    logger.debug(f"Negotiated {media_type} from extension .{ext}")
                    return media_type

        default = default_media_type or self.default_media_type
        if response_spec.has_media_type(default):
            default = normalize_media_type(default)
        else:
            default = None

        for media_range in parse_accept(accept_header):
            # wildcard ranges prefer the document default
            candidates = (default,) + available if default and '*' in media_range else available
            for media_type in candidates:
                if media_range_matches(media_range, media_type):
                    logger.debug(f"Negotiated {media_type} from Accept range {media_range}")
                    return media_type

        if default:
            return default

        if len(available) == 1:
            return available[0]

        raise NotAcceptable(available)
