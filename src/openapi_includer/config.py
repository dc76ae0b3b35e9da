"""Includer options.

Options arrive from a YAML config file (camelCase keys, as written in toc
files) or from the CLI. Mode values stay plain strings here; the builders
check them so an invalid value reports the accepted options.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

from openapi_includer.errors import ConfigurationError

LEADING_PAGE_MODES = ("leaf", "section")
SPEC_RENDER_MODES = ("default", "hidden")


class _Params(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LeadingPageSpec(_Params):
    render_mode: str = Field(default="default", alias="renderMode")


class LeadingPage(_Params):
    name: str = "Overview"
    mode: str = "leaf"
    spec: LeadingPageSpec = Field(default_factory=LeadingPageSpec)


class FilterParams(_Params):
    """Boolean expressions matched against endpoints and tags."""

    endpoint: str | None = None
    tag: str | None = None

    def is_empty(self) -> bool:
        return not self.endpoint and not self.tag


class SandboxParams(_Params):
    host: str | None = None


class IncluderParams(_Params):
    input: str
    leading_page: LeadingPage = Field(default_factory=LeadingPage, alias="leadingPage")
    filter: FilterParams | None = None
    noindex: FilterParams | None = None
    sandbox: SandboxParams | None = None


def assert_leading_page_mode(mode: str) -> None:
    if mode not in LEADING_PAGE_MODES:
        raise ConfigurationError(
            f"invalid leading page mode {mode}, available options: {', '.join(LEADING_PAGE_MODES)}"
        )


def assert_spec_render_mode(mode: str) -> None:
    if mode not in SPEC_RENDER_MODES:
        raise ConfigurationError(
            f"invalid spec display mode {mode}, available options: {', '.join(SPEC_RENDER_MODES)}"
        )


def load_params(file_path: Path, **overrides) -> IncluderParams:
    """Read includer options from a YAML file; keyword overrides win."""
    data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{file_path}: expected a mapping of includer options")
    data.update({k: v for k, v in overrides.items() if v is not None})
    return IncluderParams.model_validate(data)
