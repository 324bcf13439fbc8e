"""
raml-mock Schema/Example Model

Immutable in-memory representation of the routes declared by a RAML
document: response specs per status code, body specs per media type and the
example data attached to bodies, body properties and headers.

The model is built once at startup and only read afterwards, so request
handlers share it without locking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .common import normalize_media_type


class _Absent:
    """Sentinel for "no value"; distinct from a declared ``null``."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'ABSENT'

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Absent, ())


ABSENT = _Absent()


def _frozen(mapping: Optional[Mapping]) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


class HTTPMethod(str, Enum):
    """HTTP methods a RAML resource may declare."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def from_key(cls, key: str) -> Optional['HTTPMethod']:
        """Map a RAML method key (``get``) to a method, or None."""
        try:
            return cls(str(key).upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class ValueSpec:
    """
    Example/default resolution unit shared by headers, bodies and properties.

    Unset fields hold ``ABSENT``. ``examples`` is either ``ABSENT`` or a
    non-empty mapping of example name to value.
    """

    default_value: Any = ABSENT
    example: Any = ABSENT
    examples: Any = ABSENT
    type_example_source: Optional['TypeDefinition'] = None

    def __post_init__(self):
        if self.examples is not ABSENT:
            if not self.examples:
                object.__setattr__(self, 'examples', ABSENT)
            else:
                object.__setattr__(self, 'examples', _frozen(self.examples))

    @property
    def is_empty(self) -> bool:
        """True when every field is unset."""
        return (
            self.default_value is ABSENT
            and self.example is ABSENT
            and self.examples is ABSENT
            and self.type_example_source is None
        )


@dataclass(frozen=True)
class TypeDefinition:
    """A named (or inline) type whose properties carry their own examples."""

    name: str
    properties: Mapping[str, ValueSpec] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'properties', _frozen(self.properties))


@dataclass(frozen=True)
class ResponseSpec:
    """Headers and bodies of one declared response."""

    headers: Mapping[str, ValueSpec] = field(default_factory=dict)
    bodies: Mapping[str, ValueSpec] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'headers', _frozen(self.headers))
        object.__setattr__(
            self,
            'bodies',
            _frozen({normalize_media_type(k): v for k, v in (self.bodies or {}).items()})
        )

    @property
    def media_types(self) -> Tuple[str, ...]:
        """Declared body media types in declaration order."""
        return tuple(self.bodies)

    def body_for(self, media_type: Optional[str]) -> Optional[ValueSpec]:
        """Case-insensitive body lookup."""
        if not media_type:
            return None
        return self.bodies.get(normalize_media_type(media_type))

    def has_media_type(self, media_type: Optional[str]) -> bool:
        return self.body_for(media_type) is not None


EMPTY_RESPONSE = ResponseSpec()


@dataclass(frozen=True)
class RouteDefinition:
    """One declared (path, method) pair and its responses."""

    path: Tuple[str, ...]
    method: HTTPMethod
    responses: Mapping[int, ResponseSpec] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'path', tuple(self.path))
        object.__setattr__(self, 'responses', _frozen(self.responses))

    @property
    def path_template(self) -> str:
        """Path as a router template, e.g. ``/users/{userId}``."""
        return '/' + '/'.join(self.path)

    def success_status(self) -> int:
        """
        Status code the mock serves for this route.

        The lowest declared 2xx code, else the lowest declared code, else 200.
        """
        codes = sorted(self.responses)
        for code in codes:
            if 200 <= code < 300:
                return code
        return codes[0] if codes else 200

    def success_response(self) -> ResponseSpec:
        return self.responses.get(self.success_status(), EMPTY_RESPONSE)


@dataclass(frozen=True)
class ApiDefinition:
    """Compiled RAML document."""

    title: str
    routes: Tuple[RouteDefinition, ...] = ()
    version: Optional[str] = None
    base_path: str = ''
    media_types: Tuple[str, ...] = ()
    types: Mapping[str, TypeDefinition] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'routes', tuple(self.routes))
        object.__setattr__(self, 'media_types', tuple(self.media_types))
        object.__setattr__(self, 'types', _frozen(self.types))

    @property
    def default_media_type(self) -> Optional[str]:
        """Document default media type used by negotiation rule 3."""
        return self.media_types[0] if self.media_types else None

    def to_dict(self) -> Dict[str, Any]:
        """Summary used for logging and diagnostics."""
        return {
            'title': self.title,
            'version': self.version,
            'base_path': self.base_path,
            'media_types': list(self.media_types),
            'routes': [
                {
                    'method': route.method.value,
                    'path': route.path_template,
                    'status': route.success_status(),
                }
                for route in self.routes
            ],
        }
