"""
raml-mock Example Selector

Picks one concrete value for a ValueSpec.

Precedence, first match wins:
1. default value
2. single example
3. one of the named examples (chosen by the selection policy)
4. object assembled from the referenced type's property examples
5. ABSENT

Which named example is picked depends on the selection policy:
callers must not assume the same member is returned across requests.
"""

import random
from typing import Any, Callable, Dict, Mapping, Optional

from ..models import ABSENT, ValueSpec, TypeDefinition


SelectionPolicy = Callable[[Mapping[str, Any]], Any]


def random_example(examples: Mapping[str, Any]) -> Any:
    """Pick a named example uniformly at random."""
    return random.choice(list(examples.values()))


def first_example(examples: Mapping[str, Any]) -> Any:
    """Pick the first named example in declaration order."""
    return next(iter(examples.values()))


def last_example(examples: Mapping[str, Any]) -> Any:
    """Pick the last named example in declaration order."""
    return list(examples.values())[-1]


EXAMPLE_POLICIES: Dict[str, SelectionPolicy] = {
    'random': random_example,
    'first': first_example,
    'last': last_example,
}


def get_policy(name: str) -> SelectionPolicy:
    """
    Look up a selection policy by name.

    Raises:
        ValueError: If the name is not a known policy
    """
    try:
        return EXAMPLE_POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown examples policy '{name}'. "
            f"Choose one of: {', '.join(EXAMPLE_POLICIES)}"
        ) from None


class ExampleSelector:
    """
    Resolves ValueSpecs to concrete values.

    The selector is stateless apart from its policy, so one instance is
    shared by every request.

    Example:
        selector = ExampleSelector(policy=first_example)
        value = selector.select(ValueSpec(examples={'a': 1, 'b': 2}))  # 1
    """

    def __init__(self, policy: Optional[SelectionPolicy] = None):
        self.policy = policy or random_example

    def select(self, spec: Optional[ValueSpec]) -> Any:
        """
        Select a value for a spec.

        Args:
            spec: ValueSpec to resolve (None is treated as empty)

        Returns:
            Selected value, or ABSENT when the spec yields nothing
        """
        if spec is None:
            return ABSENT
        if spec.default_value is not ABSENT:
            return spec.default_value
        if spec.example is not ABSENT:
            return spec.example
        if spec.examples is not ABSENT:
            return self.policy(spec.examples)
        if spec.type_example_source is not None:
            return self.compose(spec.type_example_source)
        return ABSENT

    def compose(self, type_definition: TypeDefinition) -> Any:
        """
        Assemble an object from a type's property examples.

        Each property goes through the same precedence as ``select``;
        properties that resolve to ABSENT are left out. An object with no
        resolved property is ABSENT.
        """
        composite = {}
        for name, property_spec in type_definition.properties.items():
            value = self.select(property_spec)
            if value is not ABSENT:
                composite[name] = value
        return composite if composite else ABSENT
