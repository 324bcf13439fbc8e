"""
Tests for raml-mock Example Selector

Tests example selection including:
- default > example > examples > type property examples precedence
- Absence when nothing is declared
- Membership of named example picks
- Composite assembly from type property examples
- Selection policies
"""

import pytest

from ramlmock.models import ABSENT, TypeDefinition, ValueSpec
from ramlmock.mock.selector import (
    EXAMPLE_POLICIES,
    ExampleSelector,
    first_example,
    get_policy,
    last_example,
    random_example,
)


@pytest.fixture
def selector():
    """Selector with the default (random) policy."""
    return ExampleSelector()


@pytest.fixture
def user_type():
    """Type whose properties carry examples."""
    return TypeDefinition(
        name='User',
        properties={
            'name': ValueSpec(example='Kendrick'),
            'age': ValueSpec(example=10),
            'good': ValueSpec(default_value=True),
        }
    )


class TestPrecedence:
    """Test the default > example > examples > type precedence."""

    def test_default_wins_over_everything(self, selector, user_type):
        """Test default value wins when every other field is set."""
        spec = ValueSpec(
            default_value='test',
            example='bar',
            examples={'a': 'x', 'b': 'y'},
            type_example_source=user_type
        )

        for _ in range(20):
            assert selector.select(spec) == 'test'

    def test_example_wins_over_examples(self, selector, user_type):
        """Test single example wins over named examples and type examples."""
        spec = ValueSpec(example='bar', examples={'a': 'x'}, type_example_source=user_type)

        assert selector.select(spec) == 'bar'

    def test_examples_win_over_type(self, selector, user_type):
        """Test named examples win over type property examples."""
        spec = ValueSpec(examples={'a': 'x'}, type_example_source=user_type)

        assert selector.select(spec) == 'x'

    def test_falsy_default_still_wins(self, selector):
        """Test a declared false/zero/null default is a value, not absence."""
        assert selector.select(ValueSpec(default_value=False, example=True)) is False
        assert selector.select(ValueSpec(default_value=0, example=5)) == 0
        assert selector.select(ValueSpec(default_value=None, example=5)) is None


class TestAbsence:
    """Test absence of values."""

    def test_empty_spec_is_absent(self, selector):
        """Test a spec with no fields resolves to ABSENT."""
        assert selector.select(ValueSpec()) is ABSENT

    def test_none_spec_is_absent(self, selector):
        """Test a missing spec resolves to ABSENT."""
        assert selector.select(None) is ABSENT

    def test_empty_examples_are_unset(self, selector):
        """Test an empty examples mapping counts as unset."""
        spec = ValueSpec(examples={})

        assert spec.is_empty
        assert selector.select(spec) is ABSENT

    def test_absent_is_falsy_singleton(self):
        """Test the ABSENT sentinel."""
        assert not ABSENT
        assert repr(ABSENT) == 'ABSENT'


class TestMembership:
    """Test selection among named examples."""

    def test_random_pick_is_member(self, selector):
        """Test repeated picks always come from the declared set."""
        spec = ValueSpec(examples={'a': 'bar', 'b': 'foo', 'c': 'random', 'd': 'another'})

        picks = {selector.select(spec) for _ in range(200)}

        assert picks <= {'bar', 'foo', 'random', 'another'}
        assert picks

    def test_first_policy(self):
        """Test first policy picks the first declared example."""
        selector = ExampleSelector(policy=first_example)
        spec = ValueSpec(examples={'a': 1, 'b': 2, 'c': 3})

        assert selector.select(spec) == 1

    def test_last_policy(self):
        """Test last policy picks the last declared example."""
        selector = ExampleSelector(policy=last_example)
        spec = ValueSpec(examples={'a': 1, 'b': 2, 'c': 3})

        assert selector.select(spec) == 3

    def test_custom_policy(self):
        """Test a custom policy callable."""
        selector = ExampleSelector(policy=lambda examples: examples['b'])

        assert selector.select(ValueSpec(examples={'a': 1, 'b': 2})) == 2


class TestComposite:
    """Test composites assembled from type property examples."""

    def test_properties_assembled(self, selector, user_type):
        """Test each property resolves independently."""
        spec = ValueSpec(type_example_source=user_type)

        assert selector.select(spec) == {'name': 'Kendrick', 'age': 10, 'good': True}

    def test_absent_properties_omitted(self, selector):
        """Test properties without examples are left out."""
        definition = TypeDefinition(
            name='Partial',
            properties={'a': ValueSpec(example=1), 'b': ValueSpec()}
        )

        assert selector.select(ValueSpec(type_example_source=definition)) == {'a': 1}

    def test_no_resolved_property_is_absent(self, selector):
        """Test a type with no resolvable property yields ABSENT."""
        definition = TypeDefinition(name='Empty', properties={'a': ValueSpec()})

        assert selector.select(ValueSpec(type_example_source=definition)) is ABSENT

    def test_nested_composite(self, selector, user_type):
        """Test property specs referencing other types recurse."""
        pet = TypeDefinition(
            name='Pet',
            properties={
                'name': ValueSpec(example='Rex'),
                'owner': ValueSpec(type_example_source=user_type),
            }
        )

        assert selector.select(ValueSpec(type_example_source=pet)) == {
            'name': 'Rex',
            'owner': {'name': 'Kendrick', 'age': 10, 'good': True},
        }

    def test_property_precedence(self, selector):
        """Test property specs follow the same precedence."""
        definition = TypeDefinition(
            name='T',
            properties={'p': ValueSpec(default_value='d', example='e')}
        )

        assert selector.compose(definition) == {'p': 'd'}


class TestPolicies:
    """Test policy lookup."""

    def test_known_policies(self):
        """Test the registered policy names."""
        assert set(EXAMPLE_POLICIES) == {'random', 'first', 'last'}
        assert get_policy('random') is random_example
        assert get_policy('first') is first_example
        assert get_policy('last') is last_example

    def test_unknown_policy(self):
        """Test unknown policy names are rejected."""
        with pytest.raises(ValueError, match="Unknown examples policy"):
            get_policy('sometimes')
