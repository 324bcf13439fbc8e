"""
raml-mock Mock Server

FastAPI-based HTTP mock server answering every route declared in a RAML
document with example-driven responses.

Features:
- One route per declared resource/method, plus a ``.json``-style extension variant
- Content negotiation by extension, Accept header and document media type
- Example precedence: default > example > examples > type property examples
- Optional CORS and gzip compression middleware
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from ..errors import NotAcceptable
from ..models import ApiDefinition, RouteDefinition
from ..raml import RamlLoader, build_api
from .handlers import RouteHandlerFactory
from .negotiator import ContentNegotiator
from .renderer import ResponseRenderer
from .selector import ExampleSelector, get_policy


@dataclass
class MockConfig:
    """Configuration for mock server behavior."""

    # Server options
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "info"
    access_log: bool = True

    # Middleware
    cors: bool = False
    compression: bool = False
    compression_minimum_size: int = 500

    # Named examples selection: random, first, last
    examples_policy: str = "random"


def route_sort_key(route: RouteDefinition):
    """Literal segments sort before parameter segments at the same depth."""
    return tuple(1 if segment.startswith('{') else 0 for segment in route.path)


class MockServer:
    """
    FastAPI-based mock server for a RAML document.

    Loads the document once, compiles it into an immutable route model and
    registers one endpoint per declared (path, method).

    Example:
        # Load document and start server
        server = MockServer('api.raml')
        server.start(port=8080)

        # With custom config
        config = MockConfig(cors=True, examples_policy='first')
        server = MockServer('api.raml', config=config)
        server.start()
    """

    def __init__(
        self,
        raml_file: Union[str, Path],
        config: Optional[MockConfig] = None,
        api: Optional[ApiDefinition] = None
    ):
        """
        Initialize mock server.

        Args:
            raml_file: Path to the RAML document
            config: Optional MockConfig for server behavior
            api: Already compiled document (skips loading raml_file)

        Raises:
            DocumentLoadError: If the document cannot be loaded
            ValueError: If the examples policy is unknown
        """
        self.raml_file = Path(raml_file)
        self.config = config or MockConfig()

        self.logger = logging.getLogger("ramlmock.mock")
        self.logger.setLevel(getattr(logging, self.config.log_level.upper()))

        self.api = api or self._load_api()

        selector = ExampleSelector(policy=get_policy(self.config.examples_policy))
        self.factory = RouteHandlerFactory(
            negotiator=ContentNegotiator(default_media_type=self.api.default_media_type),
            renderer=ResponseRenderer(selector)
        )

        self.app = self._create_app()

    def _load_api(self) -> ApiDefinition:
        """Load and compile the RAML document."""
        document = RamlLoader(self.raml_file).load()
        api = build_api(document)
        self.logger.info(f"Loaded {len(api.routes)} routes from {self.raml_file}")
        self.logger.debug(f"Document summary: {api.to_dict()}")
        return api

    def _create_app(self) -> FastAPI:
        """Create FastAPI application with routes."""
        app = FastAPI(
            title=self.api.title,
            version=self.api.version or "1.0.0",
            description=f"Mock service for {self.api.title}",
            docs_url=None,
            redoc_url=None,
            openapi_url=None
        )

        @app.exception_handler(NotAcceptable)
        async def not_acceptable(request: Request, exc: NotAcceptable):
            self.logger.debug(f"406 for {request.method} {request.url.path}: {exc}")
            return Response(status_code=406)

        @app.exception_handler(StarletteHTTPException)
        async def http_error(request: Request, exc: StarletteHTTPException):
            return Response(status_code=exc.status_code, headers=exc.headers)

        for route in sorted(self.api.routes, key=route_sort_key):
            for mounted in self.factory.mount(route, base_path=self.api.base_path):
                app.add_api_route(
                    mounted.path,
                    mounted.endpoint,
                    methods=[mounted.method],
                    name=mounted.name,
                    include_in_schema=not mounted.extension
                )
                self.logger.debug(f"Registered {mounted.method} {mounted.path}")

        if self.config.compression:
            app.add_middleware(GZipMiddleware, minimum_size=self.config.compression_minimum_size)

        if self.config.cors:
            app.add_middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["*"],
                allow_headers=["*"],
                expose_headers=self._declared_header_names()
            )

        return app

    def _declared_header_names(self) -> List[str]:
        """Response headers declared anywhere in the document."""
        names = []
        for route in self.api.routes:
            for response in route.responses.values():
                for name in response.headers:
                    if name not in names:
                        names.append(name)
        return names

    def start(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        access_log: Optional[bool] = None
    ):
        """
        Start the mock server.

        Args:
            host: Host to bind to (overrides config)
            port: Port to bind to (overrides config)
            access_log: Enable access logging (overrides config)
        """
        actual_host = host or self.config.host
        actual_port = port or self.config.port

        print(f"🚀 Mock service for {self.api.title} starting...")
        print(f"   Document: {self.raml_file}")
        print(f"   Routes: {len(self.api.routes)}")
        if self.api.default_media_type:
            print(f"   Default media type: {self.api.default_media_type}")
        print(f"   Examples policy: {self.config.examples_policy}")

        if self.config.cors:
            print(f"   CORS enabled")
        if self.config.compression:
            print(f"   Compression enabled")

        print(f"   Mock service running at http://{actual_host}:{actual_port}{self.api.base_path}")
        print()

        uvicorn.run(
            self.app,
            host=actual_host,
            port=actual_port,
            log_level=self.config.log_level,
            access_log=self.config.access_log if access_log is None else access_log
        )

    def get_app(self) -> FastAPI:
        """
        Get the FastAPI app instance for testing or custom deployment.

        Returns:
            FastAPI application instance
        """
        return self.app


def create_mock_server(
    raml_file: Union[str, Path],
    host: str = "127.0.0.1",
    port: int = 8080,
    cors: bool = False,
    compression: bool = False,
    examples_policy: str = "random",
    log_level: str = "info",
    access_log: bool = True
) -> MockServer:
    """
    Convenience function to create and configure a mock server.

    Args:
        raml_file: Path to the RAML document
        host: Host to bind to
        port: Port to bind to
        cors: Enable cross-origin headers
        compression: Enable gzip response compression
        examples_policy: Named examples selection (random, first, last)
        log_level: Log level
        access_log: Enable uvicorn access log

    Returns:
        Configured MockServer instance

    Example:
        server = create_mock_server('api.raml', port=8080, cors=True)
        server.start()
    """
    config = MockConfig(
        host=host,
        port=port,
        cors=cors,
        compression=compression,
        examples_policy=examples_policy,
        log_level=log_level,
        access_log=access_log
    )

    return MockServer(raml_file, config=config)


def load_file(raml_file: Union[str, Path], **options: Any) -> FastAPI:
    """
    Load a RAML document and return the mock ASGI application.

    Args:
        raml_file: Path to the RAML document
        **options: MockConfig fields (cors, compression, examples_policy, ...)

    Returns:
        FastAPI application serving the mock routes

    Raises:
        DocumentLoadError: If the document cannot be loaded
    """
    return MockServer(raml_file, config=MockConfig(**options)).get_app()
