"""CLI entry point for openapi-includer."""

import logging
from pathlib import Path

import click

from openapi_includer.config import (
    LEADING_PAGE_MODES,
    SPEC_RENDER_MODES,
    FilterParams,
    IncluderParams,
    SandboxParams,
    load_params,
)
from openapi_includer.errors import IncluderError
from openapi_includer.includer import include


def _parse_vars(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse KEY=VALUE pairs given with --var."""
    result = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{pair}'", param_hint="--var")
        result[key.strip()] = value
    return result


def _build_params(
    doc_path: Path,
    config: Path | None,
    leading_page_name: str | None,
    leading_page_mode: str | None,
    render_mode: str | None,
    filter_endpoint: str | None,
    filter_tag: str | None,
    noindex_endpoint: str | None,
    noindex_tag: str | None,
    sandbox_host: str | None,
) -> IncluderParams:
    """Merge the config file (if any) with command-line overrides."""
    if config:
        params = load_params(config, input=str(doc_path))
    else:
        params = IncluderParams(input=str(doc_path))

    if leading_page_name:
        params.leading_page.name = leading_page_name
    if leading_page_mode:
        params.leading_page.mode = leading_page_mode
    if render_mode:
        params.leading_page.spec.render_mode = render_mode

    if filter_endpoint or filter_tag:
        params.filter = params.filter or FilterParams()
        params.filter.endpoint = filter_endpoint or params.filter.endpoint
        params.filter.tag = filter_tag or params.filter.tag
    if noindex_endpoint or noindex_tag:
        params.noindex = params.noindex or FilterParams()
        params.noindex.endpoint = noindex_endpoint or params.noindex.endpoint
        params.noindex.tag = noindex_tag or params.noindex.tag
    if sandbox_host:
        params.sandbox = SandboxParams(host=sandbox_host)
    return params


@click.group()
def main():
    """OpenAPI includer — generate Markdown docs and a toc.yaml from OpenAPI documents."""
    pass


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", required=True, type=click.Path(file_okay=False, path_type=Path), help="Output directory for the generated pages.")
@click.option("--config", type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None, help="YAML file with includer options.")
@click.option("--leading-page-name", default=None, help="Title of the leading (index) pages.")
@click.option("--leading-page-mode", default=None, type=click.Choice(LEADING_PAGE_MODES), help="Leading page placement in the toc.")
@click.option("--render-mode", default=None, type=click.Choice(SPEC_RENDER_MODES), help="Whether the root page embeds the specification.")
@click.option("--filter-endpoint", default=None, help="Keep only endpoints matching this expression.")
@click.option("--filter-tag", default=None, help="Keep only tags matching this expression.")
@click.option("--noindex-endpoint", default=None, help="Mark endpoints matching this expression noindex.")
@click.option("--noindex-tag", default=None, help="Mark endpoints of tags matching this expression noindex.")
@click.option("--sandbox-host", default=None, help="Host used for the interactive sandbox.")
@click.option("--var", "var_pairs", multiple=True, help="Variable for filter expressions, KEY=VALUE. Repeatable.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def build(
    doc_path: Path,
    output: Path,
    config: Path | None,
    leading_page_name: str | None,
    leading_page_mode: str | None,
    render_mode: str | None,
    filter_endpoint: str | None,
    filter_tag: str | None,
    noindex_endpoint: str | None,
    noindex_tag: str | None,
    sandbox_host: str | None,
    var_pairs: tuple[str, ...],
    verbose: bool,
):
    """Generate documentation pages from an OpenAPI document."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    vars = _parse_vars(var_pairs)
    params = _build_params(
        doc_path.resolve(),
        config,
        leading_page_name,
        leading_page_mode,
        render_mode,
        filter_endpoint,
        filter_tag,
        noindex_endpoint,
        noindex_tag,
        sandbox_host,
    )

    click.echo(f"Generating pages for {doc_path}...")
    try:
        write_path = include(
            params,
            read_base_path=output,
            write_base_path=output,
            toc_path="toc.yaml",
            include_path=".",
            vars=vars,
        )
    except IncluderError as e:
        raise click.ClickException(str(e)) from e

    pages = sorted(write_path.rglob("*.md"))
    click.echo(f"Done! Generated {len(pages)} pages and toc.yaml in {write_path}")
