"""OpenAPI document loader.

Reads a root document (YAML or JSON), follows relative-file ``$ref``
values, dereferences everything it can and checks the document structure.
Each file reached along the way is kept in its raw form so that schema
names can be collected from all of them.
"""

import logging
from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import BaseModel

from openapi_includer.errors import DocumentError

logger = logging.getLogger(__name__)


class LoadedDocument(BaseModel):
    """A validated, dereferenced root document plus every raw source file."""

    data: dict
    files: dict[str, Any]  # resolved file path -> raw parsed contents, root first


class DocumentParser(Protocol):
    def load(self, file_path: Path) -> LoadedDocument: ...


class YamlDocumentParser:
    """Default :class:`DocumentParser` backed by PyYAML."""

    def load(self, file_path: Path) -> LoadedDocument:
        resolver = _RefResolver()
        root_path = file_path.resolve()
        raw = resolver.load_file(root_path)
        validate_document(raw, root_path)

        data = resolver.resolve(raw, root_path, ())
        logger.debug("loaded %s (%d source files)", root_path, len(resolver.files))
        return LoadedDocument(
            data=data,
            files={str(path): content for path, content in resolver.files.items()},
        )


def validate_document(doc: Any, file_path: Path) -> None:
    """Structural checks on a root OpenAPI/Swagger document."""
    if not isinstance(doc, dict):
        raise DocumentError(f"{file_path}: document root must be a mapping")
    if "openapi" not in doc and "swagger" not in doc:
        raise DocumentError(f"{file_path}: missing 'openapi' or 'swagger' version field")

    info = doc.get("info")
    if not isinstance(info, dict):
        raise DocumentError(f"{file_path}: missing 'info' object")
    for key in ("title", "version"):
        if key not in info:
            raise DocumentError(f"{file_path}: 'info.{key}' is required")

    paths = doc.get("paths")
    if not isinstance(paths, dict):
        raise DocumentError(f"{file_path}: 'paths' must be a mapping")
    for path in paths:
        if not str(path).startswith("/"):
            raise DocumentError(f"{file_path}: path '{path}' must start with '/'")


class _RefResolver:
    def __init__(self):
        self.files: dict[Path, Any] = {}

    def load_file(self, file_path: Path) -> Any:
        if file_path not in self.files:
            try:
                text = file_path.read_text(encoding="utf-8")
            except OSError as e:
                raise DocumentError(f"cannot read {file_path}: {e}") from e
            try:
                self.files[file_path] = yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise DocumentError(f"cannot parse {file_path}: {e}") from e
        return self.files[file_path]

    def resolve(self, node: Any, base: Path, stack: tuple) -> Any:
        if isinstance(node, list):
            return [self.resolve(item, base, stack) for item in node]
        if not isinstance(node, dict):
            return node

        ref = node.get("$ref")
        if isinstance(ref, str):
            target_path, pointer = self._locate(ref, base)
            key = (target_path, pointer)
            if key in stack:
                # Circular reference; keep the $ref node as-is.
                return dict(node)
            target = _pointer_get(self.load_file(target_path), pointer, ref)
            return self.resolve(target, target_path, stack + (key,))

        return {key: self.resolve(value, base, stack) for key, value in node.items()}

    def _locate(self, ref: str, base: Path) -> tuple[Path, str]:
        if "://" in ref:
            raise DocumentError(f"remote $ref is not supported: {ref}")
        file_part, _, pointer = ref.partition("#")
        target_path = (base.parent / file_part).resolve() if file_part else base
        return target_path, pointer


def _pointer_get(doc: Any, pointer: str, ref: str) -> Any:
    """Resolve a JSON Pointer (RFC 6901) fragment against a loaded document."""
    if not pointer:
        return doc
    if not pointer.startswith("/"):
        raise DocumentError(f"unsupported $ref fragment '{pointer}' in {ref}")

    current = doc
    for raw_token in pointer[1:].split("/"):
        token = raw_token.replace("~1", "/").replace("~0", "~")
        if isinstance(current, list):
            try:
                current = current[int(token)]
            except (ValueError, IndexError) as e:
                raise DocumentError(f"cannot resolve $ref {ref}: bad index '{token}'") from e
        elif isinstance(current, dict):
            if token not in current:
                # YAML may have parsed numeric keys (e.g. response codes) as ints.
                if token.isdigit() and int(token) in current:
                    token = int(token)
                else:
                    raise DocumentError(f"cannot resolve $ref {ref}: '{token}' not found")
            current = current[token]
        else:
            raise DocumentError(f"cannot resolve $ref {ref}: '{token}' is not a container")
    return current
