"""Turn a dereferenced OpenAPI document into Info + Specification."""

import hashlib
import logging
import re

from openapi_includer.models import Endpoint, Info, Specification, Tag, TagMap

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

# Page names taken by the leading pages in every output directory.
RESERVED_IDS = frozenset({"index"})


def slugify(value: str) -> str:
    """Lower-case, file-name safe identifier; keeps non-ASCII letters."""
    slug = re.sub(r"[^\w]+", "-", value.lower())
    return slug.strip("-")


def endpoint_id(method: str, path: str, operation_id: str | None = None) -> str:
    """Base page id: the operationId if declared, else method + path."""
    slug = slugify(operation_id) if operation_id else ""
    return slug or slugify(f"{method}-{path}")


def tag_slug(name: str) -> str:
    """Base directory name for a tag; a short hash when nothing is left of the name."""
    return slugify(name) or "tag-" + hashlib.sha1(name.encode("utf-8")).hexdigest()[:8]


def unique_id(base: str, used: set[str]) -> str:
    """Return ``base`` or the first free ``base-N`` (N >= 2) and mark it used."""
    candidate, n = base, 1
    while candidate in used:
        n += 1
        candidate = f"{base}-{n}"
    used.add(candidate)
    return candidate


def parse_info(data: dict) -> Info:
    info = data.get("info", {})
    return Info(
        title=str(info.get("title", "")),
        version=str(info.get("version", "")),
        description=info.get("description"),
        terms_of_service=info.get("termsOfService"),
        contact=info.get("contact"),
        license=info.get("license"),
    )


def parse_tags(data: dict) -> TagMap:
    """Declared tags in declaration order, each with no endpoints yet.

    Tags whose names slugify alike get suffixed ids; a repeated name is
    declared only once.
    """
    tags = TagMap()
    names: set[str] = set()
    for declared in data.get("tags") or []:
        name = str(declared["name"])
        if name in names:
            logger.debug("tag %r declared more than once", name)
            continue
        names.add(name)
        tag_id = unique_id(tag_slug(name), set(tags.keys()))
        tags.set(tag_id, Tag(id=tag_id, name=name, description=declared.get("description")))
    return tags


def parse_paths(data: dict, tags: TagMap) -> Specification:
    """Place every operation under its first tag, or in the untagged list.

    Tags that operations reference but the document never declared are
    appended after the declared ones, in order of first use. Endpoint ids
    are unique within their output directory (a tag's or the root) and
    never take a leading page name.
    """
    tags = TagMap((tag_id, tag.model_copy(update={"endpoints": []})) for tag_id, tag in tags)
    by_name = {tag.name: tag_id for tag_id, tag in tags}
    used_ids: dict[str | None, set[str]] = {}
    untagged: list[Endpoint] = []

    for path, path_item in (data.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        shared_params = path_item.get("parameters") or []

        for method, operation in path_item.items():
            method = str(method).lower()
            if method not in HTTP_METHODS or not isinstance(operation, dict):
                continue

            tag_names = [str(t) for t in operation.get("tags") or []]
            tag_id = None
            if tag_names:
                tag_id = by_name.get(tag_names[0])
                if tag_id is None:
                    logger.debug("tag %r used by %s %s is not declared", tag_names[0], method.upper(), path)
                    tag_id = unique_id(tag_slug(tag_names[0]), set(tags.keys()))
                    tags.set(tag_id, Tag(id=tag_id, name=tag_names[0]))
                    by_name[tag_names[0]] = tag_id

            used = used_ids.setdefault(tag_id, set(RESERVED_IDS))
            page_id = unique_id(endpoint_id(method, str(path), operation.get("operationId")), used)
            endpoint = _parse_operation(data, page_id, str(path), method, operation, shared_params, path_item)

            if tag_id is None:
                untagged.append(endpoint)
            else:
                tags.get(tag_id).endpoints.append(endpoint)

    return Specification(tags=tags, endpoints=untagged)


def _parse_operation(
    data: dict,
    page_id: str,
    path: str,
    method: str,
    operation: dict,
    shared_params: list[dict],
    path_item: dict,
) -> Endpoint:
    operation_id = operation.get("operationId")
    return Endpoint(
        id=page_id,
        method=method.upper(),
        path=path,
        operation_id=operation_id,
        summary=operation.get("summary"),
        description=operation.get("description"),
        tags=[str(t) for t in operation.get("tags") or []],
        parameters=_merge_parameters(shared_params, operation.get("parameters") or []),
        request_body=operation.get("requestBody"),
        responses={str(code): resp for code, resp in (operation.get("responses") or {}).items()},
        security=operation.get("security", data.get("security")) or [],
        servers=operation.get("servers") or path_item.get("servers") or data.get("servers") or [],
        deprecated=bool(operation.get("deprecated", False)),
    )


def _merge_parameters(shared: list[dict], own: list[dict]) -> list[dict]:
    """Path-level parameters, overridden by operation ones with the same name+in."""
    merged = {(p.get("name"), p.get("in")): p for p in shared}
    for p in own:
        merged[(p.get("name"), p.get("in"))] = p
    return list(merged.values())
