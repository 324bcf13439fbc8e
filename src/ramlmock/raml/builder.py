"""
raml-mock Route Builder

Compiles a loaded RAML tree into the immutable route model: one
RouteDefinition per declared (resource, method), with a ValueSpec for every
response body and header and a TypeDefinition for every type whose
properties carry examples.

Type references are followed for two things:
- inheriting ``default``/``example``/``examples`` when a body declares none
- assembling composite objects from property-level examples
"""

import logging
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import urlparse

from ..common import is_valid_media_type, normalize_media_type
from ..errors import DocumentLoadError
from ..models import (
    ABSENT,
    ApiDefinition,
    HTTPMethod,
    ResponseSpec,
    RouteDefinition,
    TypeDefinition,
    ValueSpec,
)
from .loader import RamlDocument


logger = logging.getLogger("ramlmock.raml")

FALLBACK_MEDIA_TYPE = 'application/json'

# RFC 9110 field-name token
HEADER_NAME_PATTERN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")

BUILTIN_TYPES = {
    'any', 'object', 'array', 'union', 'string', 'number', 'integer',
    'boolean', 'date-only', 'time-only', 'datetime-only', 'datetime',
    'file', 'nil',
}

# Facets allowed next to ``value`` in an expanded RAML 1.0 example
EXAMPLE_FACETS = {'value', 'displayName', 'description', 'strict'}


def unwrap_example(example: Any) -> Any:
    """
    Return the value of an expanded RAML 1.0 example.

    ``{value: 42, displayName: Answer}`` becomes ``42``; anything else is
    returned unchanged.
    """
    if not isinstance(example, dict) or 'value' not in example:
        return example

    for key in example:
        if key in EXAMPLE_FACETS:
            continue
        if isinstance(key, str) and key.startswith('(') and key.endswith(')'):
            continue
        return example
    return example['value']


class RouteBuilder:
    """
    Walks a RAML tree once and produces an ApiDefinition.

    Example:
        document = RamlLoader("api.raml").load()
        api = RouteBuilder(document).build()

        for route in api.routes:
            print(route.method.value, route.path_template)
    """

    def __init__(self, document: RamlDocument):
        self.document = document
        self.data = document.data
        self.expanded_examples = document.version == '1.0'

        self.media_types = self._media_types()
        self._type_decls = self._collect_type_declarations()
        self._named_specs: Dict[str, Optional[ValueSpec]] = {}
        self._building: List[str] = []

    def build(self) -> ApiDefinition:
        """
        Compile the document.

        Raises:
            DocumentLoadError: If a declaration cannot be compiled
        """
        routes = list(self._walk_resources(self.data, ()))

        types = {}
        for name in self._type_decls:
            spec = self._named_spec(name)
            if spec is not None and spec.type_example_source is not None:
                types[name] = spec.type_example_source

        title = self.data.get('title') or self.document.path.stem
        version = self.data.get('version')

        api = ApiDefinition(
            title=str(title),
            version=str(version) if version is not None else None,
            base_path=self._base_path(version),
            media_types=self.media_types,
            types=types,
            routes=routes
        )
        logger.debug(f"Compiled {len(routes)} routes, {len(types)} example types")
        return api

    def _error(self, message: str) -> DocumentLoadError:
        return DocumentLoadError(message, path=str(self.document.path))

    # Document level

    def _media_types(self) -> Tuple[str, ...]:
        declared = self.data.get('mediaType')
        if declared is None:
            return ()
        if isinstance(declared, str):
            declared = [declared]
        if not isinstance(declared, list):
            raise self._error(f"mediaType must be a string or a list, got {type(declared).__name__}")

        media_types = []
        for media_type in declared:
            if not isinstance(media_type, str) or not is_valid_media_type(media_type):
                raise self._error(f"Invalid media type {media_type!r}")
            media_types.append(normalize_media_type(media_type))
        return tuple(media_types)

    def _base_path(self, version: Any) -> str:
        base_uri = self.data.get('baseUri')
        if not base_uri:
            return ''

        base_uri = str(base_uri)
        if version is not None:
            base_uri = base_uri.replace('{version}', str(version))

        path = urlparse(base_uri).path if '://' in base_uri else base_uri
        return path.rstrip('/')

    def _collect_type_declarations(self) -> Dict[str, Any]:
        """Merge RAML 1.0 ``types`` and ``schemas`` (0.8 list or 1.0 map)."""
        declarations: Dict[str, Any] = {}

        for key in ('schemas', 'types'):
            section = self.data.get(key)
            if not section:
                continue
            if isinstance(section, list):
                for entry in section:
                    if isinstance(entry, dict):
                        declarations.update(entry)
            elif isinstance(section, dict):
                declarations.update(section)
            else:
                raise self._error(f"'{key}' must be a mapping")

        return declarations

    # Resources

    def _walk_resources(self, node: Dict[str, Any], parent: Tuple[str, ...]) -> Iterator[RouteDefinition]:
        for key, resource in node.items():
            if not isinstance(key, str) or not key.startswith('/'):
                continue

            path = parent + tuple(segment for segment in key.split('/') if segment)
            if resource is None:
                resource = {}
            if not isinstance(resource, dict):
                raise self._error(f"Resource {key} must be a mapping")

            for method_key, method_decl in resource.items():
                if not isinstance(method_key, str) or method_key.startswith('/'):
                    continue
                method = HTTPMethod.from_key(method_key)
                if method is None:
                    continue
                yield RouteDefinition(
                    path=path,
                    method=method,
                    responses=self._responses(method_decl, path, method)
                )

            yield from self._walk_resources(resource, path)

    def _responses(self, method_decl: Any, path: Tuple[str, ...], method: HTTPMethod) -> Dict[int, ResponseSpec]:
        where = f"{method.value} /{'/'.join(path)}"
        if method_decl is None:
            return {}
        if not isinstance(method_decl, dict):
            raise self._error(f"{where}: method declaration must be a mapping")

        declared = method_decl.get('responses') or {}
        if not isinstance(declared, dict):
            raise self._error(f"{where}: responses must be a mapping")

        responses = {}
        for code, response_decl in declared.items():
            try:
                status = int(code)
            except (TypeError, ValueError):
                raise self._error(f"{where}: invalid status code {code!r}") from None
            if not 100 <= status <= 599:
                raise self._error(f"{where}: status code {status} out of range")

            responses[status] = self._response(response_decl, where)
        return responses

    def _response(self, response_decl: Any, where: str) -> ResponseSpec:
        if response_decl is None:
            return ResponseSpec()
        if not isinstance(response_decl, dict):
            raise self._error(f"{where}: response must be a mapping")

        headers_decl = response_decl.get('headers') or {}
        if not isinstance(headers_decl, dict):
            raise self._error(f"{where}: headers must be a mapping")

        headers = {}
        for name, header_decl in headers_decl.items():
            name = str(name).rstrip('?')
            if not HEADER_NAME_PATTERN.match(name):
                raise self._error(f"{where}: invalid header name {name!r}")
            headers[name] = self.value_spec(header_decl)

        return ResponseSpec(headers=headers, bodies=self._bodies(response_decl.get('body'), where))

    def _bodies(self, body_decl: Any, where: str) -> Dict[str, ValueSpec]:
        if body_decl is None:
            return {}

        if isinstance(body_decl, dict) and any(isinstance(key, str) and '/' in key for key in body_decl):
            bodies = {}
            for media_type, decl in body_decl.items():
                if not isinstance(media_type, str) or not is_valid_media_type(media_type):
                    raise self._error(f"{where}: invalid media type {media_type!r}")
                bodies[normalize_media_type(media_type)] = self.value_spec(decl)
            return bodies

        # Body declared without media types: applies to the document defaults
        spec = self.value_spec(body_decl)
        return {media_type: spec for media_type in (self.media_types or (FALLBACK_MEDIA_TYPE,))}

    # Values and types

    def value_spec(self, decl: Any) -> ValueSpec:
        """
        Compile a type declaration into a ValueSpec.

        Args:
            decl: Declaration node: None, a type expression string or a mapping

        Returns:
            ValueSpec with own facets, falling back to the referenced type's
        """
        if decl is None:
            return ValueSpec()
        if isinstance(decl, str):
            return self._type_expression_spec(decl) or ValueSpec()
        if isinstance(decl, list):
            return self.value_spec({'type': decl})
        if not isinstance(decl, dict):
            return ValueSpec()

        default = decl['default'] if 'default' in decl else ABSENT
        example = self._example(decl['example']) if 'example' in decl else ABSENT
        examples = self._examples(decl.get('examples'))

        parent = self._parent_spec(decl.get('type', decl.get('schema')))
        if parent is not None and default is ABSENT and example is ABSENT and examples is ABSENT:
            default, example, examples = parent.default_value, parent.example, parent.examples

        return ValueSpec(
            default_value=default,
            example=example,
            examples=examples,
            type_example_source=self._type_source(decl, parent)
        )

    def _example(self, example: Any) -> Any:
        return unwrap_example(example) if self.expanded_examples else example

    def _examples(self, examples: Any) -> Any:
        if not examples:
            return ABSENT
        if isinstance(examples, dict):
            return {str(name): self._example(value) for name, value in examples.items()}
        if isinstance(examples, list):
            return {str(index): self._example(value) for index, value in enumerate(examples)}
        return ABSENT

    def _type_source(self, decl: Dict[str, Any], parent: Optional[ValueSpec]) -> Optional[TypeDefinition]:
        properties = {}
        name = '<inline>'
        if parent is not None and parent.type_example_source is not None:
            properties.update(parent.type_example_source.properties)
            name = parent.type_example_source.name

        own = decl.get('properties')
        if isinstance(own, dict):
            for prop_name, prop_decl in own.items():
                prop_name = str(prop_name)
                # pattern properties (/^x-/) carry no fixed name
                if len(prop_name) > 1 and prop_name.startswith('/') and prop_name.endswith('/'):
                    continue
                properties[prop_name.rstrip('?')] = self.value_spec(prop_decl)

        if not properties:
            return None
        return TypeDefinition(name=name, properties=properties)

    def _parent_spec(self, type_decl: Any) -> Optional[ValueSpec]:
        """Spec of the type a declaration inherits from (``type:`` facet)."""
        if type_decl is None:
            return None
        if isinstance(type_decl, str):
            return self._type_expression_spec(type_decl)
        if isinstance(type_decl, dict):
            return self.value_spec(type_decl)
        if isinstance(type_decl, list):
            return self._merge_parents([self._parent_spec(item) for item in type_decl])
        return None

    def _merge_parents(self, specs: List[Optional[ValueSpec]]) -> Optional[ValueSpec]:
        """Multiple inheritance: first parent with examples, union of properties."""
        specs = [spec for spec in specs if spec is not None]
        if not specs:
            return None

        example_parent = next(
            (
                spec for spec in specs
                if spec.default_value is not ABSENT or spec.example is not ABSENT or spec.examples is not ABSENT
            ),
            specs[0]
        )
        properties = {}
        for spec in specs:
            if spec.type_example_source is not None:
                properties.update(spec.type_example_source.properties)

        return ValueSpec(
            default_value=example_parent.default_value,
            example=example_parent.example,
            examples=example_parent.examples,
            type_example_source=TypeDefinition(name='<merged>', properties=properties) if properties else None
        )

    def _type_expression_spec(self, expression: str) -> Optional[ValueSpec]:
        """
        Resolve a type expression (``User``, ``User | Admin``, ``User[]``).

        Arrays, built-in types and inline JSON/XML schemas yield None.
        """
        expression = expression.strip()
        if not expression or expression[0] in '{<':
            return None

        if '|' in expression:
            for alternative in expression.split('|'):
                spec = self._type_expression_spec(alternative)
                if spec is not None:
                    return spec
            return None

        expression = expression.strip('()').strip()
        if expression.endswith('[]') or expression.endswith('?'):
            return None
        if expression in BUILTIN_TYPES:
            return None

        return self._named_spec(expression)

    def _named_spec(self, name: str) -> Optional[ValueSpec]:
        if name in self._named_specs:
            return self._named_specs[name]
        if name not in self._type_decls:
            return None
        if name in self._building:
            logger.debug(f"Recursive reference to type {name} not expanded")
            return None

        self._building.append(name)
        try:
            spec = self.value_spec(self._type_decls[name])
        finally:
            self._building.pop()

        if spec.type_example_source is not None:
            spec = ValueSpec(
                default_value=spec.default_value,
                example=spec.example,
                examples=spec.examples,
                type_example_source=TypeDefinition(name=name, properties=spec.type_example_source.properties)
            )

        self._named_specs[name] = spec
        return spec


def build_api(document: RamlDocument) -> ApiDefinition:
    """
    Compile a loaded RAML document into an ApiDefinition.

    Raises:
        DocumentLoadError: If a declaration cannot be compiled
    """
    return RouteBuilder(document).build()
