from unittest.mock import MagicMock

import pytest

from openapi_includer.builder.content import Page, build_content, write_pages
from openapi_includer.config import SandboxParams
from openapi_includer.errors import ConfigurationError
from openapi_includer.generator.markdown import MarkdownGenerator, concat_new_line
from openapi_includer.models import Endpoint, Info, Specification, Tag, TagMap

INFO = Info(title="Petstore", version="1.0", description="Pets for everyone.")
DATA = {"openapi": "3.0.0", "info": {"title": "Petstore", "version": "1.0"}, "paths": {}}


def _spec() -> Specification:
    return Specification(
        tags=TagMap([
            ("pets", Tag(id="pets", name="Pets", description="Pet operations", endpoints=[
                Endpoint(id="listpets", method="GET", path="/pets", summary="List pets"),
            ])),
        ]),
        endpoints=[Endpoint(id="get-health", method="GET", path="/health")],
    )


class TestBuildContent:
    def test_page_layout(self):
        pages = build_content(_spec(), INFO, DATA, {}, "default", MarkdownGenerator())
        assert [p.path for p in pages] == ["index.md", "pets/index.md", "pets/listpets.md", "get-health.md"]

    def test_delegates_to_generator(self):
        generator = MagicMock()
        generator.main.return_value = "main"
        generator.section.return_value = "section"
        generator.endpoint.return_value = "endpoint"
        sandbox = SandboxParams(host="https://sandbox")
        refs = {"Pet": {"type": "object"}}

        pages = build_content(_spec(), INFO, DATA, refs, "hidden", generator, sandbox)

        assert [p.content for p in pages] == ["main", "section", "endpoint", "endpoint"]
        generator.main.assert_called_once_with(DATA, INFO, _spec(), "hidden")
        assert generator.endpoint.call_args.args[0] is refs
        assert generator.endpoint.call_args.args[2] is sandbox

    def test_invalid_render_mode(self):
        with pytest.raises(ConfigurationError, match="default, hidden"):
            build_content(_spec(), INFO, DATA, {}, "full", MarkdownGenerator())

    def test_write_pages(self, tmp_path):
        write_pages([Page(path="a/b.md", content="hello"), Page(path="index.md", content="root")], tmp_path)
        assert (tmp_path / "a" / "b.md").read_text(encoding="utf-8") == "hello"
        assert (tmp_path / "index.md").read_text(encoding="utf-8") == "root"


class TestMarkdownGenerator:
    def test_main_default_embeds_specification(self):
        content = MarkdownGenerator().main(DATA, INFO, _spec(), "default")
        assert content.startswith("# Petstore")
        assert "- [Pets](pets/index.md)" in content
        assert "- [GET /health](get-health.md)" in content
        assert "## Specification" in content
        assert "openapi: 3.0.0" in content

    def test_main_hidden_omits_specification(self):
        content = MarkdownGenerator().main(DATA, INFO, _spec(), "hidden")
        assert "## Specification" not in content

    def test_section(self):
        tag = _spec().tags.get("pets")
        content = MarkdownGenerator().section(tag)
        assert content.startswith("# Pets")
        assert "Pet operations" in content
        assert "- [List pets](listpets.md)" in content

    def test_endpoint_noindex_front_matter(self):
        gen = MarkdownGenerator()
        marked = Endpoint(id="a", method="GET", path="/a", noindex=True)
        plain = Endpoint(id="b", method="GET", path="/b")
        assert "noindex: true" in gen.endpoint({}, marked, None)
        assert "noindex" not in gen.endpoint({}, plain, None)

    def test_endpoint_parameters_and_body(self):
        endpoint = Endpoint(
            id="createpet",
            method="POST",
            path="/pets/{petId}",
            servers=[{"url": "https://api.example.com/v1/"}],
            parameters=[
                {"name": "petId", "in": "path", "required": True, "schema": {"type": "string"}},
                {"name": "mode", "in": "query", "description": "Mode", "schema": {"type": "string", "enum": ["a", "b"]}},
            ],
            requestBody={"content": {"application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}}},
            responses={"201": {"description": "Created"}},
        )
        refs = {"Pet": {"type": "object", "required": ["name"], "properties": {"name": {"type": "string"}}}}
        content = MarkdownGenerator().endpoint(refs, endpoint, None)
        assert "POST https://api.example.com/v1/pets/{petId}" in content
        assert "| petId* | string |  |" in content
        assert "| mode | string | Mode<br>Enum: `a`, `b` |" in content
        assert "Schema: `Pet`" in content
        assert "| name* | string |  |" in content
        assert "### 201" in content

    def test_endpoint_sandbox(self):
        endpoint = Endpoint(id="a", method="GET", path="/a")
        content = MarkdownGenerator().endpoint({}, endpoint, SandboxParams(host="https://sandbox.example.com/"))
        assert "## Try it" in content
        assert "curl -X GET 'https://sandbox.example.com/a'" in content

    def test_endpoint_without_sandbox_host(self):
        endpoint = Endpoint(id="a", method="GET", path="/a")
        assert "## Try it" not in MarkdownGenerator().endpoint({}, endpoint, SandboxParams())


class TestConcatNewLine:
    def test_blank_prefix(self):
        assert concat_new_line("  ", "b") == "b"

    def test_joins_with_break(self):
        assert concat_new_line("a", "b") == "a<br>b"
