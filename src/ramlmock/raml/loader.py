"""
raml-mock RAML Loader

Reads a RAML document from disk. RAML is YAML with a ``#%RAML <version>``
header line and an ``!include`` tag for pulling in other files.

Included files are resolved relative to the file that includes them:
- ``.raml``, ``.yaml``, ``.yml``: parsed as YAML (nested includes allowed)
- ``.json``: parsed as JSON
- anything else: included as text
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..errors import DocumentLoadError


logger = logging.getLogger("ramlmock.raml")

HEADER_PATTERN = re.compile(r'^#%RAML\s+(0\.8|1\.0)(?:\s+(\w+))?\s*$')
YAML_EXTENSIONS = {'.raml', '.yaml', '.yml'}

# Tags whose YAML 1.1 resolvers are replaced by the YAML 1.2 core schema
_YAML11_TAGS = {
    'tag:yaml.org,2002:bool',
    'tag:yaml.org,2002:int',
    'tag:yaml.org,2002:float',
    'tag:yaml.org,2002:timestamp',
}


class RamlYamlLoader(yaml.SafeLoader):
    """
    SafeLoader resolving plain scalars with the YAML 1.2 core schema.

    RAML documents are YAML 1.2: ``no`` and ``off`` stay strings, dates and
    datetimes stay strings, and ``0755`` is the decimal 755.
    """


RamlYamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _YAML11_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

RamlYamlLoader.add_implicit_resolver(
    'tag:yaml.org,2002:bool',
    re.compile(r'^(?:true|True|TRUE|false|False|FALSE)$'),
    list('tTfF')
)
RamlYamlLoader.add_implicit_resolver(
    'tag:yaml.org,2002:int',
    re.compile(r'^(?:[-+]?[0-9]+|0o[0-7]+|0x[0-9a-fA-F]+)$'),
    list('-+0123456789')
)
RamlYamlLoader.add_implicit_resolver(
    'tag:yaml.org,2002:float',
    re.compile(
        r'^(?:[-+]?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?)(?:[eE][-+]?[0-9]+)?'
        r'|[-+]?\.(?:inf|Inf|INF)'
        r'|\.(?:nan|NaN|NAN))$'
    ),
    list('-+0123456789.')
)


def construct_core_int(loader: yaml.SafeLoader, node: yaml.Node) -> int:
    """Integers per the YAML 1.2 core schema (leading zeros are decimal)."""
    value = loader.construct_scalar(node).replace('_', '')
    if value.startswith('0o'):
        return int(value[2:], 8)
    if value.startswith('0x'):
        return int(value[2:], 16)
    return int(value, 10)


def construct_core_float(loader: yaml.SafeLoader, node: yaml.Node) -> float:
    value = loader.construct_scalar(node).lower()
    if value.endswith('.inf'):
        return float('-inf') if value.startswith('-') else float('inf')
    if value == '.nan':
        return float('nan')
    return float(value)


RamlYamlLoader.add_constructor('tag:yaml.org,2002:int', construct_core_int)
RamlYamlLoader.add_constructor('tag:yaml.org,2002:float', construct_core_float)


@dataclass
class RamlDocument:
    """A parsed RAML file."""

    path: Path
    version: str
    data: Dict[str, Any] = field(default_factory=dict)
    fragment: Optional[str] = None
    includes: List[Path] = field(default_factory=list)


class RamlLoader:
    """
    Loader for RAML documents.

    Example:
        loader = RamlLoader("api.raml")
        document = loader.load()

        print(document.version, document.data['title'])
    """

    def __init__(self, file_path: Union[str, Path]):
        """
        Initialize RAML loader.

        Args:
            file_path: Path to the RAML document
        """
        self.file_path = Path(file_path)
        self.includes: List[Path] = []

    def load(self) -> RamlDocument:
        """
        Load the RAML document.

        Returns:
            RamlDocument with the parsed YAML tree

        Raises:
            DocumentLoadError: If the file is missing, unreadable, has no
                ``#%RAML`` header, is not valid YAML or includes a missing file
        """
        text = self._read(self.file_path)

        first_line = text.lstrip('\ufeff').split('\n', 1)[0].strip()
        match = HEADER_PATTERN.match(first_line)
        if not match:
            raise DocumentLoadError(
                f"Invalid RAML header {first_line[:40]!r}, expected '#%RAML 1.0' or '#%RAML 0.8'",
                path=str(self.file_path)
            )

        data = self._parse_yaml(text, self.file_path, stack=[self.file_path.resolve()])
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise DocumentLoadError(
                f"Expected a mapping at the document root, got {type(data).__name__}",
                path=str(self.file_path)
            )

        version, fragment = match.group(1), match.group(2)
        logger.debug(f"Loaded RAML {version} document {self.file_path} ({len(self.includes)} includes)")

        return RamlDocument(
            path=self.file_path,
            version=version,
            data=data,
            fragment=fragment,
            includes=list(self.includes)
        )

    @staticmethod
    def load_from_file(file_path: Union[str, Path]) -> RamlDocument:
        """
        Convenience method to load a document in one call.

        Example:
            document = RamlLoader.load_from_file("api.raml")
        """
        return RamlLoader(file_path).load()

    def _read(self, path: Path) -> str:
        if not path.exists():
            raise DocumentLoadError("File not found", path=str(path))

        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentLoadError(f"Cannot read file: {e}", path=str(path)) from e

    def _parse_yaml(self, text: str, path: Path, stack: List[Path]) -> Any:
        loader_class = self._loader_class(path.parent, stack)
        try:
            return yaml.load(text, Loader=loader_class)
        except DocumentLoadError:
            raise
        except yaml.YAMLError as e:
            raise DocumentLoadError(f"Invalid YAML: {e}", path=str(path)) from e

    def _loader_class(self, base_dir: Path, stack: List[Path]) -> type:
        """RamlYamlLoader subclass resolving ``!include`` against base_dir."""
        loader = self

        class IncludeLoader(RamlYamlLoader):
            pass

        def construct_include(yaml_loader: RamlYamlLoader, node: yaml.Node) -> Any:
            reference = yaml_loader.construct_scalar(node)
            return loader._include(base_dir / str(reference).strip(), stack)

        IncludeLoader.add_constructor('!include', construct_include)
        return IncludeLoader

    def _include(self, path: Path, stack: List[Path]) -> Any:
        resolved = path.resolve()
        if resolved in stack:
            raise DocumentLoadError("Circular !include", path=str(path))

        text = self._read(path)
        self.includes.append(path)
        suffix = path.suffix.lower()

        if suffix in YAML_EXTENSIONS:
            return self._parse_yaml(text, path, stack + [resolved])

        if suffix == '.json':
            try:
                return json.loads(text)
            except json.JSONDecodeError as e:
                raise DocumentLoadError(f"Invalid JSON: {e}", path=str(path)) from e

        return text
