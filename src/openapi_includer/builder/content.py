"""Page payloads for a specification: root index, tag indexes, endpoints."""

import logging
from pathlib import Path, PurePosixPath

from pydantic import BaseModel

from openapi_includer.builder.toc import md_path
from openapi_includer.config import SandboxParams, assert_spec_render_mode
from openapi_includer.generator.markdown import PageGenerator
from openapi_includer.models import Endpoint, Info, Refs, Specification

logger = logging.getLogger(__name__)


class Page(BaseModel):
    path: str  # relative to the write path, POSIX separators
    content: str


def build_content(
    spec: Specification,
    info: Info,
    data: dict,
    refs: Refs,
    render_mode: str,
    generator: PageGenerator,
    sandbox: SandboxParams | None = None,
) -> list[Page]:
    assert_spec_render_mode(render_mode)

    pages = [Page(path="index.md", content=generator.main(data, info, spec, render_mode))]

    for tag_id, tag in spec.tags:
        pages.append(Page(path=f"{tag_id}/index.md", content=generator.section(tag)))
        for endpoint in tag.endpoints:
            pages.append(_endpoint_page(generator, refs, endpoint, tag_id, sandbox))

    for endpoint in spec.endpoints:
        pages.append(_endpoint_page(generator, refs, endpoint, None, sandbox))

    return pages


def _endpoint_page(
    generator: PageGenerator,
    refs: Refs,
    endpoint: Endpoint,
    prefix: str | None,
    sandbox: SandboxParams | None,
) -> Page:
    path = md_path(endpoint)
    if prefix:
        path = str(PurePosixPath(prefix) / path)
    return Page(path=path, content=generator.endpoint(refs, endpoint, sandbox))


def write_pages(pages: list[Page], write_path: Path) -> None:
    """Write every page under ``write_path``; each page has its own file."""
    for page in pages:
        target = write_path / page.path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(page.content, encoding="utf-8")
    logger.debug("wrote %d pages under %s", len(pages), write_path)
