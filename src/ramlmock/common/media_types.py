"""
raml-mock Media Type Utilities

Media type parsing, Accept header handling and the file extension table
used for extension-based content negotiation.
"""

import re
from typing import List, Optional, Tuple


# RFC 6838 restricted-name characters
_TOKEN = r"[a-zA-Z0-9][a-zA-Z0-9!#$&^_.+\-]{0,126}"
MEDIA_TYPE_PATTERN = re.compile(rf'^{_TOKEN}/{_TOKEN}$')

# Extension -> media type for ".json" style path suffixes
EXTENSION_MEDIA_TYPES = {
    'json': 'application/json',
    'xml': 'application/xml',
    'yaml': 'application/yaml',
    'yml': 'application/yaml',
    'txt': 'text/plain',
    'html': 'text/html',
    'csv': 'text/csv',
}

# Media types that are equivalent for extension matching
_EXTENSION_ALIASES = {
    'xml': ('text/xml',),
    'yaml': ('application/x-yaml', 'text/yaml'),
    'yml': ('application/x-yaml', 'text/yaml'),
}

# Structured syntax suffixes (RFC 6839) per extension
_EXTENSION_SUFFIXES = {
    'json': '+json',
    'xml': '+xml',
    'yaml': '+yaml',
    'yml': '+yaml',
}


def normalize_media_type(media_type: str) -> str:
    """
    Normalize a media type for comparison.

    Drops parameters (``; charset=utf-8``), surrounding whitespace and case.

    Args:
        media_type: Media type string

    Returns:
        Lower-cased bare media type
    """
    return media_type.split(';', 1)[0].strip().lower()


def is_valid_media_type(media_type: str) -> bool:
    """Check that a string is a syntactically valid ``type/subtype``."""
    return bool(MEDIA_TYPE_PATTERN.match(normalize_media_type(media_type)))


def is_json_media_type(media_type: str) -> bool:
    media_type = normalize_media_type(media_type)
    return media_type == 'application/json' or media_type.endswith('+json')


def is_yaml_media_type(media_type: str) -> bool:
    media_type = normalize_media_type(media_type)
    return (
        media_type in ('application/yaml', 'application/x-yaml', 'text/yaml')
        or media_type.endswith('+yaml')
    )


def split_extension(path: str) -> Tuple[str, Optional[str]]:
    """
    Split a known media type extension off the last path segment.

    Args:
        path: Request path, e.g. ``/api/users.json``

    Returns:
        Tuple of (path without extension, extension) or (path, None) when the
        last segment carries no known extension

    Example:
        split_extension('/api/users.json')  # ('/api/users', 'json')
        split_extension('/files/notes.md')  # ('/files/notes.md', None)
    """
    head, _, last = path.rpartition('/')
    stem, dot, ext = last.rpartition('.')
    if not dot or not stem:
        return path, None

    ext = ext.lower()
    if ext not in EXTENSION_MEDIA_TYPES:
        return path, None

    return f"{head}/{stem}", ext


def extension_matches(ext: str, media_type: str) -> bool:
    """Check whether a declared media type can be served for an extension."""
    media_type = normalize_media_type(media_type)
    if media_type == EXTENSION_MEDIA_TYPES.get(ext):
        return True
    if media_type in _EXTENSION_ALIASES.get(ext, ()):
        return True
    suffix = _EXTENSION_SUFFIXES.get(ext)
    return bool(suffix and media_type.endswith(suffix))


def parse_accept(accept_header: Optional[str]) -> List[str]:
    """
    Parse an Accept header into media ranges ordered by preference.

    Ranges are sorted by descending quality; ranges with equal quality keep
    their header order. Ranges with ``q=0`` are dropped.

    Args:
        accept_header: Raw Accept header value (may be None)

    Returns:
        List of normalized media ranges
    """
    if not accept_header:
        return []

    ranges = []
    for position, part in enumerate(accept_header.split(',')):
        params = part.split(';')
        media_range = params[0].strip().lower()
        if not media_range:
            continue

        quality = 1.0
        for param in params[1:]:
            name, _, value = param.partition('=')
            if name.strip().lower() == 'q':
                try:
                    quality = float(value.strip())
                except ValueError:
                    quality = 0.0

        if quality <= 0:
            continue
        ranges.append((-quality, position, media_range))

    ranges.sort()
    return [media_range for _, _, media_range in ranges]


def media_range_matches(media_range: str, media_type: str) -> bool:
    """Check whether a media range (``*/*``, ``text/*``, exact) covers a type."""
    media_type = normalize_media_type(media_type)
    if media_range in ('*/*', '*'):
        return True
    if media_range.endswith('/*'):
        return media_type.split('/', 1)[0] == media_range[:-2]
    return media_range == media_type
