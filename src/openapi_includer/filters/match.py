"""Endpoint/tag matching for the ``filter`` and ``noindex`` options."""

import logging
from collections.abc import Callable

from openapi_includer.config import FilterParams
from openapi_includer.filters.expression import ExpressionEvaluator, LiquidEvaluator
from openapi_includer.models import Endpoint, Specification, Tag, TagMap

logger = logging.getLogger(__name__)

Action = Callable[[Endpoint, Tag | None], None]
Transform = Callable[[Specification], Specification]


def _context(model: Endpoint | Tag, vars: dict[str, str]) -> dict:
    record = model.model_dump()
    record.update(model.model_dump(by_alias=True))
    record["vars"] = vars
    return record


def match_filter(
    filter: FilterParams | None,
    vars: dict[str, str],
    action: Action,
    evaluator: ExpressionEvaluator | None = None,
) -> Callable[[Specification], None]:
    """Build a walker calling ``action(endpoint, tag)`` for each match.

    Untagged endpoints match only the endpoint expression (``tag`` is None).
    Inside a tag, every endpoint matches when the tag expression does, and
    otherwise each endpoint is checked against the endpoint expression.
    An endpoint is reported at most once per tag.
    """
    evaluator = evaluator or LiquidEvaluator()
    endpoint_expr = filter.endpoint if filter else None
    tag_expr = filter.tag if filter else None

    def match_tag(tag: Tag) -> bool:
        return bool(tag_expr) and evaluator.evaluate(tag_expr, _context(tag, vars))

    def match_endpoint(endpoint: Endpoint) -> bool:
        return bool(endpoint_expr) and evaluator.evaluate(endpoint_expr, _context(endpoint, vars))

    def walk(spec: Specification) -> None:
        for endpoint in spec.endpoints:
            if match_endpoint(endpoint):
                action(endpoint, None)

        for _, tag in spec.tags:
            whole_tag = match_tag(tag)
            for endpoint in tag.endpoints:
                if whole_tag or match_endpoint(endpoint):
                    action(endpoint, tag)

    return walk


def filter_content(
    filter: FilterParams | None,
    vars: dict[str, str],
    evaluator: ExpressionEvaluator | None = None,
) -> Transform:
    """Return a pure ``Specification -> Specification`` filter.

    Without a filter this is the identity. Matched tagged endpoints are
    regrouped into new tags with the same id and name; tags left without
    endpoints are dropped.
    """
    if filter is None or filter.is_empty():
        return lambda spec: spec

    def transform(spec: Specification) -> Specification:
        by_tag: dict[str, list[Endpoint]] = {}
        untagged: list[Endpoint] = []

        def collect(endpoint: Endpoint, tag: Tag | None) -> None:
            if tag is None:
                untagged.append(endpoint)
            else:
                by_tag.setdefault(tag.id, []).append(endpoint)

        match_filter(filter, vars, collect, evaluator)(spec)

        tags = TagMap(
            (tag_id, tag.model_copy(update={"endpoints": by_tag[tag_id]}))
            for tag_id, tag in spec.tags
            if tag_id in by_tag
        )
        logger.debug(
            "filter kept %d tags, %d untagged endpoints", len(tags), len(untagged)
        )
        return Specification(tags=tags, endpoints=untagged)

    return transform


def apply_noindex(
    noindex: FilterParams | None,
    vars: dict[str, str],
    evaluator: ExpressionEvaluator | None = None,
) -> Transform:
    """Return a transform marking matched endpoints ``noindex``.

    Matched endpoints are replaced by copies with the flag set; the input
    specification is left untouched.
    """
    if noindex is None or noindex.is_empty():
        return lambda spec: spec

    def transform(spec: Specification) -> Specification:
        # Page ids are only unique per directory, so matches are tracked by object.
        marked: set[int] = set()
        match_filter(noindex, vars, lambda endpoint, tag: marked.add(id(endpoint)), evaluator)(spec)

        def mark(endpoints: list[Endpoint]) -> list[Endpoint]:
            return [
                e.model_copy(update={"noindex": True}) if id(e) in marked else e
                for e in endpoints
            ]

        tags = TagMap(
            (tag_id, tag.model_copy(update={"endpoints": mark(tag.endpoints)}))
            for tag_id, tag in spec.tags
        )
        logger.debug("marked %d endpoints noindex", len(marked))
        return Specification(tags=tags, endpoints=mark(spec.endpoints))

    return transform
