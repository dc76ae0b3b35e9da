"""Navigation tree (toc.yaml) for a specification."""

import logging
from pathlib import Path, PurePosixPath

import yaml

from openapi_includer.config import LeadingPage, assert_leading_page_mode
from openapi_includer.models import Endpoint, Specification, TocItem

logger = logging.getLogger(__name__)

TOC_NAME = "openapi"


def section_name(endpoint: Endpoint) -> str:
    """Display name of an endpoint page."""
    return endpoint.summary or endpoint.operation_id or f"{endpoint.method} {endpoint.path}"


def md_path(endpoint: Endpoint) -> str:
    return f"{endpoint.id}.md"


def endpoint_item(endpoint: Endpoint, prefix: str | None = None) -> TocItem:
    href = md_path(endpoint)
    if prefix:
        href = str(PurePosixPath(prefix) / href)
    return TocItem(name=section_name(endpoint), href=href)


def add_leading_page(section: TocItem, mode: str, name: str, href: str) -> None:
    """Attach the leading page as a first child (leaf) or as the section href."""
    if mode == "leaf":
        section.items = [TocItem(name=name, href=href)] + (section.items or [])
    else:
        section.href = href


def build_toc(spec: Specification, leading_page: LeadingPage, name: str = TOC_NAME) -> TocItem:
    assert_leading_page_mode(leading_page.mode)

    toc = TocItem(name=name, items=[])
    for tag_id, tag in spec.tags:
        section = TocItem(
            name=tag.name,
            items=[endpoint_item(endpoint, tag_id) for endpoint in tag.endpoints],
        )
        add_leading_page(section, leading_page.mode, leading_page.name, f"{tag_id}/index.md")
        toc.items.append(section)

    for endpoint in spec.endpoints:
        toc.items.append(endpoint_item(endpoint))

    add_leading_page(toc, leading_page.mode, leading_page.name, "index.md")
    return toc


def write_toc(toc: TocItem, write_path: Path) -> Path:
    write_path.mkdir(parents=True, exist_ok=True)
    toc_file = write_path / "toc.yaml"
    toc_file.write_text(
        yaml.safe_dump(toc.to_dict(), sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
    logger.debug("wrote %s", toc_file)
    return toc_file
