"""
raml-mock Common Utilities

Shared utilities and helpers used across raml-mock modules.
"""

from .utils import safe_json_parse, is_json_document, to_json, stringify_value
from .media_types import (
    EXTENSION_MEDIA_TYPES,
    normalize_media_type,
    is_valid_media_type,
    is_json_media_type,
    is_yaml_media_type,
    split_extension,
    extension_matches,
    parse_accept,
    media_range_matches,
)

__all__ = [
    'safe_json_parse',
    'is_json_document',
    'to_json',
    'stringify_value',
    'EXTENSION_MEDIA_TYPES',
    'normalize_media_type',
    'is_valid_media_type',
    'is_json_media_type',
    'is_yaml_media_type',
    'split_extension',
    'extension_matches',
    'parse_accept',
    'media_range_matches',
]
