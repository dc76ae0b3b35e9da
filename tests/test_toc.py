import pytest
import yaml

from openapi_includer.builder.toc import build_toc, md_path, section_name, write_toc
from openapi_includer.config import LeadingPage
from openapi_includer.errors import ConfigurationError
from openapi_includer.models import Endpoint, Specification, Tag, TagMap


def _spec() -> Specification:
    return Specification(
        tags=TagMap([
            ("pets", Tag(id="pets", name="Pets", endpoints=[
                Endpoint(id="listpets", method="GET", path="/pets", summary="List pets"),
                Endpoint(id="createpet", method="POST", path="/pets", operationId="createPet"),
            ])),
            ("store", Tag(id="store", name="Store", endpoints=[
                Endpoint(id="get-store", method="GET", path="/store"),
            ])),
        ]),
        endpoints=[Endpoint(id="get-health", method="GET", path="/health")],
    )


class TestNames:
    def test_section_name_fallbacks(self):
        assert section_name(Endpoint(id="a", method="GET", path="/a", summary="S", operationId="op")) == "S"
        assert section_name(Endpoint(id="a", method="GET", path="/a", operationId="op")) == "op"
        assert section_name(Endpoint(id="a", method="GET", path="/a")) == "GET /a"

    def test_md_path(self):
        assert md_path(Endpoint(id="listpets", method="GET", path="/pets")) == "listpets.md"


class TestBuildToc:
    def test_leaf_mode(self):
        toc = build_toc(_spec(), LeadingPage(name="Overview", mode="leaf"))
        assert toc.name == "openapi"
        assert toc.href is None
        assert toc.items[0].to_dict() == {"name": "Overview", "href": "index.md"}

        pets = toc.items[1]
        assert pets.name == "Pets"
        assert [i.to_dict() for i in pets.items] == [
            {"name": "Overview", "href": "pets/index.md"},
            {"name": "List pets", "href": "pets/listpets.md"},
            {"name": "createPet", "href": "pets/createpet.md"},
        ]
        assert toc.items[-1].to_dict() == {"name": "GET /health", "href": "get-health.md"}

    def test_section_mode(self):
        toc = build_toc(_spec(), LeadingPage(name="Overview", mode="section"))
        assert toc.href == "index.md"
        assert [i.name for i in toc.items] == ["Pets", "Store", "GET /health"]
        assert toc.items[0].href == "pets/index.md"
        assert [i.name for i in toc.items[0].items] == ["List pets", "createPet"]
        assert all(i.name != "Overview" for i in toc.items)

    def test_untagged_after_tags(self):
        toc = build_toc(_spec(), LeadingPage(mode="section"))
        assert toc.items[-1].href == "get-health.md"
        assert toc.items[-1].items is None

    def test_empty_specification(self):
        toc = build_toc(Specification(), LeadingPage(name="Intro"))
        assert toc.to_dict() == {"name": "openapi", "items": [{"name": "Intro", "href": "index.md"}]}

    def test_invalid_mode(self):
        with pytest.raises(ConfigurationError, match="leaf, section"):
            build_toc(_spec(), LeadingPage(mode="foo"))


class TestWriteToc:
    def test_writes_yaml(self, tmp_path):
        toc = build_toc(_spec(), LeadingPage())
        toc_file = write_toc(toc, tmp_path / "out")
        assert toc_file == tmp_path / "out" / "toc.yaml"
        data = yaml.safe_load(toc_file.read_text(encoding="utf-8"))
        assert data["name"] == "openapi"
        assert list(data["items"][1]) == ["name", "items"]
