"""Includer entry point: one OpenAPI document -> toc.yaml + Markdown pages."""

import logging
from pathlib import Path, PurePosixPath

from openapi_includer.builder.content import build_content, write_pages
from openapi_includer.builder.toc import build_toc, write_toc
from openapi_includer.config import FilterParams, IncluderParams, LeadingPage, SandboxParams
from openapi_includer.errors import IncluderError
from openapi_includer.filters.expression import ExpressionEvaluator, LiquidEvaluator
from openapi_includer.filters.match import apply_noindex, filter_content
from openapi_includer.generator.markdown import MarkdownGenerator, PageGenerator
from openapi_includer.models import Refs
from openapi_includer.parser.loader import DocumentParser, YamlDocumentParser
from openapi_includer.parser.refs import collect_refs
from openapi_includer.parser.spec import parse_info, parse_paths, parse_tags

logger = logging.getLogger(__name__)

NAME = "openapi"


def include(
    params: IncluderParams,
    *,
    read_base_path: Path,
    write_base_path: Path,
    toc_path: str,
    include_path: str,
    vars: dict[str, str] | None = None,
    index: int = 0,
    parser: DocumentParser | None = None,
    generator: PageGenerator | None = None,
    evaluator: ExpressionEvaluator | None = None,
) -> Path:
    """Generate the pages for one include and return the directory written.

    The first include (``index == 0``) reads its input from the write base
    path, later ones from the read base path. Every failure is reported as
    :class:`IncluderError` carrying ``toc_path``.
    """
    vars = vars or {}
    parser = parser or YamlDocumentParser()
    generator = generator or MarkdownGenerator()
    evaluator = evaluator or LiquidEvaluator()

    base_path = write_base_path if index == 0 else read_base_path
    content_path = (base_path / params.input).resolve()
    toc_dir = PurePosixPath(toc_path).parent
    write_path = write_base_path / toc_dir / include_path

    try:
        logger.info("loading %s", content_path)
        document = parser.load(content_path)
        refs = collect_refs(document.files.values())

        write_path.mkdir(parents=True, exist_ok=True)
        generate_toc(
            document.data, write_path, params.leading_page, params.filter, vars, evaluator
        )
        generate_content(
            document.data,
            write_path,
            refs,
            params.leading_page,
            generator,
            params.filter,
            params.noindex,
            vars,
            params.sandbox,
            evaluator,
        )
    except IncluderError:
        raise
    except Exception as e:
        raise IncluderError(str(e), toc_path) from e

    logger.info("generated %s", write_path)
    return write_path


def generate_toc(
    data: dict,
    write_path: Path,
    leading_page: LeadingPage,
    filter: FilterParams | None,
    vars: dict[str, str],
    evaluator: ExpressionEvaluator | None = None,
) -> Path:
    spec = filter_content(filter, vars, evaluator)(parse_paths(data, parse_tags(data)))
    toc = build_toc(spec, leading_page, NAME)
    return write_toc(toc, write_path)


def generate_content(
    data: dict,
    write_path: Path,
    refs: Refs,
    leading_page: LeadingPage,
    generator: PageGenerator,
    filter: FilterParams | None = None,
    noindex: FilterParams | None = None,
    vars: dict[str, str] | None = None,
    sandbox: SandboxParams | None = None,
    evaluator: ExpressionEvaluator | None = None,
) -> None:
    vars = vars or {}
    info = parse_info(data)
    spec = parse_paths(data, parse_tags(data))
    spec = apply_noindex(noindex, vars, evaluator)(spec)
    spec = filter_content(filter, vars, evaluator)(spec)

    pages = build_content(
        spec, info, data, refs, leading_page.spec.render_mode, generator, sandbox
    )
    write_pages(pages, write_path)
