"""
raml-mock Route Handler Factory

Binds the negotiator, selector and renderer into one endpoint per declared
route and works out the router paths each endpoint is mounted on.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from fastapi import Request, Response
from starlette.convertors import Convertor, register_url_convertor

from ..common import EXTENSION_MEDIA_TYPES
from ..models import RouteDefinition
from .negotiator import ContentNegotiator
from .renderer import ResponseRenderer
from .selector import ExampleSelector


logger = logging.getLogger("ramlmock.mock")

EXTENSION_PARAM = "mock_ext"
MEDIA_TYPE_EXTENSION_SEGMENT = "{mediaTypeExtension}"


class ExtensionConvertor(Convertor):
    """Path convertor matching only known media type extensions."""

    regex = "|".join(sorted(EXTENSION_MEDIA_TYPES, key=len, reverse=True))

    def convert(self, value: str) -> str:
        return value.lower()

    def to_string(self, value: str) -> str:
        return str(value)


register_url_convertor("mediaext", ExtensionConvertor())


Endpoint = Callable[[Request], Awaitable[Response]]


@dataclass(frozen=True)
class MountedRoute:
    """A router path bound to a mock endpoint."""

    path: str
    method: str
    endpoint: Endpoint
    name: str
    extension: bool = False


def join_paths(base_path: str, route_path: str) -> str:
    """
    Join the document base path and a resource path.

    Example:
        join_paths('/api', '/users/{id}')  # '/api/users/{id}'
        join_paths('', '/')  # '/'
    """
    path = base_path.rstrip('/') + '/' + route_path.lstrip('/')
    if len(path) > 1:
        path = path.rstrip('/')
    return path or '/'


class RouteHandlerFactory:
    """
    Creates request handlers for compiled routes.

    Each handler closes over the immutable ResponseSpec of its route's
    success status and runs negotiate -> select -> render for every request.

    Example:
        factory = RouteHandlerFactory(
            negotiator=ContentNegotiator('application/json'),
            renderer=ResponseRenderer(ExampleSelector())
        )
        for mounted in factory.mount(route, base_path='/api'):
            app.add_api_route(mounted.path, mounted.endpoint, methods=[mounted.method])
    """

    def __init__(
        self,
        negotiator: Optional[ContentNegotiator] = None,
        renderer: Optional[ResponseRenderer] = None
    ):
        self.negotiator = negotiator or ContentNegotiator()
        self.renderer = renderer or ResponseRenderer()

    @property
    def selector(self) -> ExampleSelector:
        return self.renderer.selector

    def create_handler(self, route: RouteDefinition) -> Endpoint:
        """
        Build the endpoint for a route.

        Args:
            route: Compiled route

        Returns:
            Async endpoint taking a Starlette request
        """
        status_code = route.success_status()
        response_spec = route.success_response()

        async def handle(request: Request) -> Response:
            media_type = self.negotiator.negotiate(
                request.url.path,
                request.headers.get('accept'),
                response_spec
            )
            body_value = self.selector.select(response_spec.body_for(media_type))
            rendered = self.renderer.render(
                media_type,
                body_value,
                response_spec.headers,
                status_code=status_code
            )
            return Response(
                content=rendered.body,
                status_code=rendered.status_code,
                headers=rendered.headers
            )

        handle.__name__ = f"mock_{route.method.value.lower()}_{'_'.join(route.path) or 'root'}"
        return handle

    def mount(self, route: RouteDefinition, base_path: str = '') -> List[MountedRoute]:
        """
        Work out the router paths for a route.

        The extension variant (``/users.json``) comes first so that a
        trailing parameter does not swallow the extension.

        Args:
            route: Compiled route
            base_path: Path part of the document's baseUri

        Returns:
            Mounted routes, extension variant first
        """
        template = route.path_template
        if template.endswith(MEDIA_TYPE_EXTENSION_SEGMENT):
            template = template[:-len(MEDIA_TYPE_EXTENSION_SEGMENT)] or '/'

        path = join_paths(base_path, template)
        endpoint = self.create_handler(route)
        method = route.method.value
        name = f"{method} {path}"

        mounted = []
        if path != '/':
            mounted.append(MountedRoute(
                path=f"{path}.{{{EXTENSION_PARAM}:mediaext}}",
                method=method,
                endpoint=endpoint,
                name=f"{name} (extension)",
                extension=True
            ))
        mounted.append(MountedRoute(path=path, method=method, endpoint=endpoint, name=name))
        return mounted
