"""
raml-mock

Mock HTTP service generated from a RAML API description.
"""

from .errors import MockServiceError, DocumentLoadError, NotAcceptable
from .models import (
    ABSENT,
    ApiDefinition,
    HTTPMethod,
    ResponseSpec,
    RouteDefinition,
    TypeDefinition,
    ValueSpec,
)
from .mock import MockServer, MockConfig, create_mock_server, load_file

__all__ = [
    'MockServiceError',
    'DocumentLoadError',
    'NotAcceptable',
    'ABSENT',
    'ApiDefinition',
    'HTTPMethod',
    'ResponseSpec',
    'RouteDefinition',
    'TypeDefinition',
    'ValueSpec',
    'MockServer',
    'MockConfig',
    'create_mock_server',
    'load_file',
]

__version__ = '1.0.0'
