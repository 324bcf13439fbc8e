"""
raml-mock RAML Module

Loading RAML documents and compiling them into the mock route model.
"""

from .loader import RamlLoader, RamlDocument
from .builder import RouteBuilder, build_api, unwrap_example

__all__ = [
    'RamlLoader',
    'RamlDocument',
    'RouteBuilder',
    'build_api',
    'unwrap_example',
]
