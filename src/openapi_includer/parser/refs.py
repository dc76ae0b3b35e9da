"""Collect schema definitions from every source file of a document."""

import logging
from collections.abc import Iterable
from typing import Any

from openapi_includer.models import Refs

logger = logging.getLogger(__name__)


def collect_refs(files: Iterable[Any]) -> Refs:
    """Merge schemas from all files into one name -> schema mapping.

    Each file contributes its ``components.schemas`` (``definitions`` for
    Swagger 2.0) and then all of its own top-level entries, so standalone
    schema files are picked up too. Later entries overwrite earlier ones.
    """
    refs: Refs = {}
    for content in files:
        if not isinstance(content, dict):
            continue

        components = content.get("components") or {}
        entries = list((components.get("schemas") or {}).items())
        entries += list((content.get("definitions") or {}).items())
        entries += list(content.items())

        for name, schema in entries:
            name = str(name)
            if name in refs and refs[name] is not schema:
                logger.debug("schema %r redefined, keeping the later definition", name)
            refs[name] = schema
    return refs
