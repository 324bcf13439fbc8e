"""
Tests for raml-mock RAML loading and route building

Tests the RAML document layer including:
- Header validation and YAML parsing
- !include resolution
- DocumentLoadError reporting
- Compilation of resources, responses, headers and bodies
- Type references, inheritance and composite sources
"""

from pathlib import Path

import pytest

from ramlmock.errors import DocumentLoadError
from ramlmock.models import ABSENT, HTTPMethod
from ramlmock.mock.selector import ExampleSelector, first_example
from ramlmock.raml import RamlDocument, RamlLoader, RouteBuilder, build_api, unwrap_example


FIXTURES = Path(__file__).parent / 'fixtures'


@pytest.fixture
def api():
    """Compiled example document."""
    return build_api(RamlLoader(FIXTURES / 'example10.raml').load())


def find_route(api, path, method='GET'):
    """Find a compiled route by path template and method."""
    for route in api.routes:
        if route.path_template == path and route.method.value == method:
            return route
    raise AssertionError(f"No route {method} {path}")


def compile_tree(data, version='1.0'):
    """Compile an in-memory RAML tree."""
    return build_api(RamlDocument(path=Path('inline.raml'), version=version, data=data))


class TestRamlLoader:
    """Test RamlLoader."""

    def test_load_document(self):
        """Test loading a RAML 1.0 document."""
        document = RamlLoader(FIXTURES / 'example10.raml').load()

        assert document.version == '1.0'
        assert document.data['title'] == 'Example API'
        assert '/test' in document.data

    def test_include_yaml(self):
        """Test !include of a RAML fragment is parsed as YAML."""
        document = RamlLoader(FIXTURES / 'example10.raml').load()

        user = document.data['types']['User']
        assert user['properties']['name']['example'] == 'Kendrick'
        assert FIXTURES / 'types' / 'user.raml' in document.includes

    def test_include_json(self):
        """Test !include of a JSON file is parsed as JSON."""
        document = RamlLoader(FIXTURES / 'example10.raml').load()

        example = document.data['/legacy']['get']['responses'][200]['body']['application/json']['example']
        assert example == {'legacy': True, 'items': [1, 2, 3]}

    def test_load_from_file(self):
        """Test convenience loader."""
        document = RamlLoader.load_from_file(str(FIXTURES / 'legacy08.raml'))

        assert document.version == '0.8'

    def test_file_not_found(self):
        """Test loading a missing file."""
        with pytest.raises(DocumentLoadError, match="File not found"):
            RamlLoader(FIXTURES / 'nonexistent.raml').load()

    def test_missing_header(self):
        """Test a document without the #%RAML header."""
        with pytest.raises(DocumentLoadError, match="Invalid RAML header"):
            RamlLoader(FIXTURES / 'noheader.raml').load()

    def test_invalid_yaml(self):
        """Test a document with broken YAML."""
        with pytest.raises(DocumentLoadError, match="Invalid YAML"):
            RamlLoader(FIXTURES / 'broken.raml').load()

    def test_missing_include(self):
        """Test a document including a missing file."""
        with pytest.raises(DocumentLoadError) as exc_info:
            RamlLoader(FIXTURES / 'missing_include.raml').load()

        assert 'nope.raml' in str(exc_info.value)

    def test_circular_include(self, tmp_path):
        """Test circular includes are rejected."""
        (tmp_path / 'api.raml').write_text('#%RAML 1.0\ntitle: Loop\ntypes:\n  A: !include a.raml\n')
        (tmp_path / 'a.raml').write_text('#%RAML 1.0 DataType\nproperties:\n  b: !include a.raml\n')

        with pytest.raises(DocumentLoadError, match="Circular"):
            RamlLoader(tmp_path / 'api.raml').load()

    def test_text_include(self, tmp_path):
        """Test other includes are read as text."""
        (tmp_path / 'api.raml').write_text('#%RAML 1.0\ntitle: Text\ndescription: !include notes.md\n')
        (tmp_path / 'notes.md').write_text('# Notes\n')

        document = RamlLoader(tmp_path / 'api.raml').load()

        assert document.data['description'] == '# Notes\n'


class TestScalarResolution:
    """Test plain scalars resolve with the YAML 1.2 core schema."""

    @pytest.fixture
    def event(self):
        """Response declaration of the scalars fixture."""
        document = RamlLoader(FIXTURES / 'scalars.raml').load()
        return document.data['/event']['get']['responses'][200]

    def test_yes_no_are_strings(self, event):
        """Test YAML 1.1 booleans like no/off stay strings."""
        assert event['headers']['X-Country']['example'] == 'no'
        assert event['body']['application/json']['example']['answer'] == 'off'

    def test_core_booleans(self, event):
        """Test true/false are still booleans."""
        assert event['headers']['X-Enabled']['example'] is True

    def test_dates_are_strings(self, event):
        """Test dates and datetimes keep their written form."""
        body = event['body']['application/json']['example']

        assert event['headers']['X-Day']['example'] == '2015-05-23'
        assert body['created'] == '2015-05-23T21:00:00Z'
        assert event['body']['text/plain']['example'] == '2015-05-23'

    def test_numbers(self, event):
        """Test leading zeros are decimal and core number forms resolve."""
        body = event['body']['application/json']['example']

        assert body['mode'] == 755
        assert body['count'] == 12
        assert body['hex'] == 31
        assert body['ratio'] == 1.5
        assert body['big'] == 1000.0

    def test_sexagesimal_is_string(self, event):
        """Test 21:00 is not read as a base-60 number."""
        assert event['body']['application/json']['example']['time'] == '21:00'

    def test_octal_and_special_floats(self, tmp_path):
        """Test 0o octal and .inf/.nan forms."""
        (tmp_path / 'api.raml').write_text('#%RAML 1.0\ntitle: N\nvalues: [0o17, -.inf, .nan, -3]\n')

        values = RamlLoader(tmp_path / 'api.raml').load().data['values']

        assert values[0] == 15
        assert values[1] == float('-inf')
        assert values[2] != values[2]
        assert values[3] == -3

    def test_included_fragments_use_core_schema(self, tmp_path):
        """Test included RAML fragments resolve scalars the same way."""
        (tmp_path / 'api.raml').write_text('#%RAML 1.0\ntitle: I\ntypes:\n  Day: !include day.raml\n')
        (tmp_path / 'day.raml').write_text('#%RAML 1.0 DataType\ntype: date-only\nexample: 2020-01-31\n')

        document = RamlLoader(tmp_path / 'api.raml').load()

        assert document.data['types']['Day']['example'] == '2020-01-31'


class TestUnwrapExample:
    """Test expanded example unwrapping."""

    def test_expanded_example(self):
        """Test {value, displayName} becomes the value."""
        assert unwrap_example({'value': 42, 'displayName': 'Answer', 'strict': False}) == 42

    def test_annotations_allowed(self):
        """Test annotation keys do not block unwrapping."""
        assert unwrap_example({'value': 'x', '(source)': 'docs'}) == 'x'

    def test_plain_object_kept(self):
        """Test objects with other keys are examples themselves."""
        example = {'value': 1, 'unit': 'kg'}

        assert unwrap_example(example) == example
        assert unwrap_example({'name': 'x'}) == {'name': 'x'}


class TestRouteBuilder:
    """Test compiling the example document."""

    def test_document_level(self, api):
        """Test title, version, base path and media types."""
        assert api.title == 'Example API'
        assert api.version == 'v1'
        assert api.base_path == '/api'
        assert api.default_media_type == 'application/json'

    def test_routes(self, api):
        """Test resources and nested resources become routes."""
        paths = {(route.method.value, route.path_template) for route in api.routes}

        assert ('GET', '/test') in paths
        assert ('POST', '/users') in paths
        assert ('GET', '/users/me') in paths
        assert ('GET', '/users/{userId}') in paths
        assert ('DELETE', '/users/{userId}') in paths
        assert ('GET', '/reports{mediaTypeExtension}') in paths

    def test_body_example(self, api):
        """Test a body example is compiled."""
        spec = find_route(api, '/test').success_response().body_for('application/json')

        assert spec.example == {'success': True}
        assert spec.default_value is ABSENT

    def test_body_lookup_case_insensitive(self, api):
        """Test body lookups ignore case."""
        response = find_route(api, '/test').success_response()

        assert response.body_for('Application/JSON') is not None

    def test_default_media_type_body(self, api):
        """Test a body without media types uses the document default."""
        response = find_route(api, '/defaultmediatype').success_response()

        assert response.media_types == ('application/json',)

    def test_expanded_examples(self, api):
        """Test named examples in expanded form are unwrapped."""
        spec = find_route(api, '/examples').success_response().body_for('application/json')

        assert dict(spec.examples) == {
            'first': {'name': 'example1'},
            'second': {'name': 'example2'},
            'third': {'name': 'example3'},
        }

    def test_headers(self, api):
        """Test header specs, with optional markers stripped."""
        headers = find_route(api, '/headersexample').success_response().headers

        assert headers['foo'].example == 'bar'
        assert 'X-Undocumented' in headers
        assert headers['X-Undocumented'].is_empty

    def test_header_default_and_example(self, api):
        """Test both default and example are kept for precedence."""
        foo = find_route(api, '/headersdefaultbeforeexample').success_response().headers['foo']

        assert foo.default_value == 'test'
        assert foo.example == 'bar'

    def test_success_status(self, api):
        """Test the lowest 2xx status is served."""
        route = find_route(api, '/users', 'POST')

        assert set(route.responses) == {201, 400}
        assert route.success_status() == 201
        assert route.success_response().headers['Location'].example == '/api/users/3'

    def test_empty_response(self, api):
        """Test a status without a declaration compiles to an empty response."""
        route = find_route(api, '/users/{userId}', 'DELETE')

        assert route.success_status() == 204
        assert route.success_response().bodies == {}

    def test_type_reference(self, api):
        """Test a body referencing a type gets the type as composite source."""
        spec = find_route(api, '/user').success_response().body_for('application/json')

        assert spec.example is ABSENT
        assert spec.type_example_source.name == 'User'
        assert set(spec.type_example_source.properties) == {
            'name', 'lastname', 'age', 'good', 'object', 'array', 'nickname'
        }

    def test_type_shorthand_and_nested_reference(self, api):
        """Test 'application/json: Pet' and a property typed User."""
        spec = find_route(api, '/pet').success_response().body_for('application/json')
        selector = ExampleSelector()

        pet = selector.select(spec)
        assert pet['name'] == 'Rex'
        assert pet['owner']['name'] == 'Kendrick'
        assert 'tags' not in pet

    def test_recursive_type(self, api):
        """Test a self-referencing type does not recurse forever."""
        spec = find_route(api, '/tree').success_response().body_for('application/json')

        assert ExampleSelector().select(spec) == {'label': 'root'}

    def test_builtin_type_has_no_source(self, api):
        """Test 'type: object' without properties carries nothing."""
        spec = find_route(api, '/noexample').success_response().body_for('application/json')

        assert spec.is_empty

    def test_named_types(self, api):
        """Test named types with property examples are exposed."""
        assert {'User', 'Pet', 'Node'} <= set(api.types)

    def test_routes_are_immutable(self, api):
        """Test compiled mappings are read-only."""
        route = find_route(api, '/test')

        with pytest.raises(TypeError):
            route.responses[500] = None


class TestRouteBuilderInline:
    """Test compiling in-memory documents."""

    def test_example_inherited_from_type(self):
        """Test a body inherits the referenced type's example."""
        api = compile_tree({
            'title': 'T',
            'mediaType': 'application/json',
            'types': {'Status': {'type': 'object', 'example': {'ok': True}}},
            '/status': {'get': {'responses': {200: {'body': {'type': 'Status'}}}}},
        })

        spec = api.routes[0].success_response().body_for('application/json')
        assert spec.example == {'ok': True}

    def test_own_example_beats_type(self):
        """Test a body's own example wins over the type's."""
        api = compile_tree({
            'title': 'T',
            'types': {'Status': {'type': 'object', 'example': {'ok': True}}},
            '/status': {'get': {'responses': {200: {'body': {
                'application/json': {'type': 'Status', 'example': {'ok': False}},
            }}}}},
        })

        spec = api.routes[0].success_response().body_for('application/json')
        assert spec.example == {'ok': False}

    def test_inline_properties_extend_type(self):
        """Test inline properties are merged over the parent's."""
        api = compile_tree({
            'title': 'T',
            'types': {'Base': {'properties': {'id': {'example': 1}}}},
            '/item': {'get': {'responses': {200: {'body': {'application/json': {
                'type': 'Base',
                'properties': {'name': {'example': 'item'}},
            }}}}}},
        })

        spec = api.routes[0].success_response().body_for('application/json')
        assert ExampleSelector().select(spec) == {'id': 1, 'name': 'item'}

    def test_multiple_inheritance(self):
        """Test 'type: [A, B]' unions the parents' properties."""
        api = compile_tree({
            'title': 'T',
            'types': {
                'A': {'properties': {'a': {'example': 1}}},
                'B': {'properties': {'b': {'example': 2}}},
            },
            '/ab': {'get': {'responses': {200: {'body': {'application/json': {'type': ['A', 'B']}}}}}},
        })

        spec = api.routes[0].success_response().body_for('application/json')
        assert ExampleSelector().select(spec) == {'a': 1, 'b': 2}

    def test_union_type(self):
        """Test a union resolves to its first named member."""
        api = compile_tree({
            'title': 'T',
            'types': {'Cat': {'properties': {'meow': {'example': True}}}},
            '/pet': {'get': {'responses': {200: {'body': {'application/json': {'type': 'nil | Cat'}}}}}},
        })

        spec = api.routes[0].success_response().body_for('application/json')
        assert ExampleSelector().select(spec) == {'meow': True}

    def test_examples_list(self):
        """Test examples given as a list are accepted."""
        api = compile_tree({
            'title': 'T',
            '/l': {'get': {'responses': {200: {'body': {'text/plain': {'examples': ['a', 'b']}}}}}},
        })

        spec = api.routes[0].success_response().body_for('text/plain')
        assert ExampleSelector(policy=first_example).select(spec) == 'a'

    def test_raml08_examples_not_unwrapped(self):
        """Test RAML 0.8 examples are taken literally."""
        api = compile_tree({
            'title': 'T',
            '/v': {'get': {'responses': {200: {'body': {'application/json': {
                'example': {'value': 5, 'description': 'literal'},
            }}}}}},
        }, version='0.8')

        spec = api.routes[0].success_response().body_for('application/json')
        assert spec.example == {'value': 5, 'description': 'literal'}

    def test_base_uri_version(self):
        """Test {version} is substituted in the base path."""
        api = compile_tree({'title': 'T', 'version': 'v2', 'baseUri': 'https://example.com/{version}/'})

        assert api.base_path == '/v2'

    def test_no_base_uri(self):
        """Test documents without baseUri mount at the root."""
        assert compile_tree({'title': 'T'}).base_path == ''

    def test_method_without_responses(self):
        """Test a method with no responses still compiles."""
        api = compile_tree({'title': 'T', '/ping': {'get': None}})

        route = api.routes[0]
        assert route.method is HTTPMethod.GET
        assert route.success_status() == 200
        assert route.success_response().bodies == {}

    def test_non_method_keys_ignored(self):
        """Test resource facets are not mistaken for methods."""
        api = compile_tree({
            'title': 'T',
            '/r': {'description': 'x', 'uriParameters': {}, 'get': {}},
        })

        assert [route.method for route in api.routes] == [HTTPMethod.GET]

    def test_media_type_list(self):
        """Test mediaType given as a list uses the first as default."""
        api = compile_tree({'title': 'T', 'mediaType': ['application/xml', 'application/json']})

        assert api.default_media_type == 'application/xml'

    def test_invalid_media_type(self):
        """Test invalid body media types fail the load."""
        with pytest.raises(DocumentLoadError, match="invalid media type"):
            build_api(RamlLoader(FIXTURES / 'bad_media_type.raml').load())

    def test_invalid_document_media_type(self):
        """Test an invalid document mediaType fails the load."""
        with pytest.raises(DocumentLoadError, match="Invalid media type"):
            compile_tree({'title': 'T', 'mediaType': 'json'})

    def test_invalid_status_code(self):
        """Test non-numeric status codes fail the load."""
        with pytest.raises(DocumentLoadError, match="invalid status code"):
            compile_tree({'title': 'T', '/r': {'get': {'responses': {'ok': {}}}}})

    def test_invalid_header_name(self):
        """Test header names that are not HTTP tokens fail the load."""
        tree = {'title': 'T', '/r': {'get': {'responses': {200: {'headers': {'X Name': {'example': 'a'}}}}}}}

        with pytest.raises(DocumentLoadError, match="invalid header name"):
            compile_tree(tree)

    def test_non_ascii_header_example_kept(self):
        """Test non-ASCII header examples compile unchanged."""
        api = compile_tree({'title': 'T', '/r': {'get': {'responses': {200: {'headers': {
            'X-Name': {'example': '日本'},
        }}}}}})

        assert api.routes[0].success_response().headers['X-Name'].example == '日本'

    def test_invalid_resource(self):
        """Test a resource that is not a mapping fails the load."""
        with pytest.raises(DocumentLoadError, match="must be a mapping"):
            compile_tree({'title': 'T', '/r': 'oops'})

    def test_builder_direct(self):
        """Test using RouteBuilder directly."""
        document = RamlLoader(FIXTURES / 'legacy08.raml').load()
        api = RouteBuilder(document).build()

        assert api.base_path == '/v2'
        assert api.routes[0].path_template == '/status'
