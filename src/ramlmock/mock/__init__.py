"""
raml-mock Mock Server Module

Mock HTTP server answering RAML-declared routes with example responses.

This module provides:
- FastAPI-based mock server
- Example selection with default/example/examples/type precedence
- Content negotiation by extension, Accept header and document media type
- Response rendering per media type
"""

from .server import MockServer, MockConfig, create_mock_server, load_file
from .selector import (
    ExampleSelector,
    EXAMPLE_POLICIES,
    get_policy,
    random_example,
    first_example,
    last_example
)
from .negotiator import ContentNegotiator
from .renderer import ResponseRenderer, RenderedResponse, encode_body, encode_header_value
from .handlers import RouteHandlerFactory, MountedRoute

__all__ = [
    # Server
    'MockServer',
    'MockConfig',
    'create_mock_server',
    'load_file',

    # Selector
    'ExampleSelector',
    'EXAMPLE_POLICIES',
    'get_policy',
    'random_example',
    'first_example',
    'last_example',

    # Negotiation and rendering
    'ContentNegotiator',
    'ResponseRenderer',
    'RenderedResponse',
    'encode_body',
    'encode_header_value',
    'RouteHandlerFactory',
    'MountedRoute',
]
