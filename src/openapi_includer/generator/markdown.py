"""Markdown page generator.

Renders the root index, tag index and endpoint pages from the normalized
models. The builders only depend on the :class:`PageGenerator` protocol.
"""

import json
from typing import Protocol

import yaml

from openapi_includer.config import SandboxParams
from openapi_includer.models import Endpoint, Info, Refs, Specification, Tag

PARAMETER_LOCATIONS = ("path", "query", "header", "cookie", "formData", "body")


class PageGenerator(Protocol):
    def main(self, data: dict, info: Info, spec: Specification, render_mode: str) -> str: ...

    def section(self, tag: Tag) -> str: ...

    def endpoint(self, refs: Refs, endpoint: Endpoint, sandbox: SandboxParams | None) -> str: ...


def concat_new_line(prefix: str, suffix: str) -> str:
    """Join two table-cell fragments with a line break unless prefix is blank."""
    return f"{prefix}<br>{suffix}" if prefix.strip() else suffix


def page_title(endpoint: Endpoint) -> str:
    return endpoint.summary or endpoint.operation_id or f"{endpoint.method} {endpoint.path}"


class MarkdownGenerator:
    """Default :class:`PageGenerator` producing YFM-flavoured Markdown."""

    def main(self, data: dict, info: Info, spec: Specification, render_mode: str) -> str:
        lines = [f"# {info.title}", "", f"**Version:** {info.version}", ""]
        if info.description:
            lines += [info.description.strip(), ""]

        if len(spec.tags):
            lines += ["## Sections", ""]
            lines += [f"- [{tag.name}]({tag_id}/index.md)" for tag_id, tag in spec.tags]
            lines.append("")
        if spec.endpoints:
            lines += ["## Endpoints", ""]
            lines += [f"- [{page_title(e)}]({e.id}.md)" for e in spec.endpoints]
            lines.append("")

        if render_mode == "default":
            lines += [
                "## Specification",
                "",
                "```yaml",
                yaml.safe_dump(data, sort_keys=False, allow_unicode=True).rstrip(),
                "```",
                "",
            ]
        return "\n".join(lines)

    def section(self, tag: Tag) -> str:
        lines = [f"# {tag.name}", ""]
        if tag.description:
            lines += [tag.description.strip(), ""]
        lines += [f"- [{page_title(e)}]({e.id}.md)" for e in tag.endpoints]
        lines.append("")
        return "\n".join(lines)

    def endpoint(self, refs: Refs, endpoint: Endpoint, sandbox: SandboxParams | None) -> str:
        title = page_title(endpoint)
        meta = {"title": title}
        if endpoint.noindex:
            meta["noindex"] = True

        lines = ["---", yaml.safe_dump(meta, allow_unicode=True).rstrip(), "---", f"# {title}", ""]
        if endpoint.deprecated:
            lines += ["{% note warning %}", "", "Deprecated", "", "{% endnote %}", ""]
        if endpoint.description:
            lines += [endpoint.description.strip(), ""]

        lines += ["## Request", "", "```", f"{endpoint.method} {_base_url(endpoint)}{endpoint.path}", "```", ""]
        lines += self._parameters(refs, endpoint.parameters)

        if endpoint.request_body:
            lines += ["## Body", ""]
            if endpoint.request_body.get("description"):
                lines += [endpoint.request_body["description"].strip(), ""]
            lines += self._content(refs, endpoint.request_body.get("content") or {})

        if endpoint.responses:
            lines += ["## Responses", ""]
            for code, response in endpoint.responses.items():
                response = _resolve(response or {}, refs)
                lines += [f"### {code}", ""]
                if response.get("description"):
                    lines += [response["description"].strip(), ""]
                lines += self._content(refs, response.get("content") or {})
                if response.get("schema"):
                    lines += _schema_block(response["schema"], refs)

        if sandbox and sandbox.host:
            lines += self._sandbox(endpoint, sandbox.host)
        return "\n".join(lines)

    def _parameters(self, refs: Refs, parameters: list[dict]) -> list[str]:
        lines = []
        params = [_resolve(p, refs) for p in parameters]
        for location in PARAMETER_LOCATIONS:
            group = [p for p in params if p.get("in") == location]
            if not group:
                continue
            if location == "body":
                lines += ["## Body", ""]
                for p in group:
                    lines += _schema_block(p.get("schema") or {}, refs)
                continue

            lines += [f"### {location.capitalize()} parameters", ""]
            lines += ["| Name | Type | Description |", "|------|------|-------------|"]
            for p in group:
                schema = _resolve(p.get("schema") or p, refs)
                name = f"{p.get('name')}*" if p.get("required") else str(p.get("name"))
                cell = (p.get("description") or "").replace("\n", " ")
                if "enum" in schema:
                    cell = concat_new_line(cell, "Enum: " + ", ".join(f"`{v}`" for v in schema["enum"]))
                if "default" in schema:
                    cell = concat_new_line(cell, f"Default: `{schema['default']}`")
                lines.append(f"| {name} | {schema.get('type', '')} | {cell} |")
            lines.append("")
        return lines

    def _content(self, refs: Refs, content: dict) -> list[str]:
        lines = []
        for media_type, media in content.items():
            lines += [f"**{media_type}**", ""]
            lines += _schema_block((media or {}).get("schema") or {}, refs)
        return lines

    def _sandbox(self, endpoint: Endpoint, host: str) -> list[str]:
        request = {
            "method": endpoint.method,
            "host": host.rstrip("/"),
            "path": endpoint.path,
            "params": [p.get("name") for p in endpoint.parameters if p.get("in") in ("path", "query")],
        }
        return [
            "## Try it",
            "",
            "```bash",
            f"curl -X {endpoint.method} '{request['host']}{endpoint.path}'",
            "```",
            "",
            "<!-- sandbox " + json.dumps(request) + " -->",
            "",
        ]


def _base_url(endpoint: Endpoint) -> str:
    if endpoint.servers:
        return str(endpoint.servers[0].get("url", "")).rstrip("/")
    return ""


def _resolve(node: dict, refs: Refs) -> dict:
    """Follow a leftover ``$ref`` (circular refs stay unresolved) through refs."""
    ref = node.get("$ref") if isinstance(node, dict) else None
    if isinstance(ref, str):
        target = refs.get(ref.rsplit("/", 1)[-1])
        if isinstance(target, dict):
            return target
    return node


def _schema_block(schema: dict, refs: Refs) -> list[str]:
    ref = schema.get("$ref")
    schema = _resolve(schema, refs)
    lines = []
    if isinstance(ref, str):
        lines += [f"Schema: `{ref.rsplit('/', 1)[-1]}`", ""]

    properties = schema.get("properties") or {}
    if properties:
        required = set(schema.get("required") or [])
        lines += ["| Name | Type | Description |", "|------|------|-------------|"]
        for name, prop in properties.items():
            prop_ref = prop.get("$ref") if isinstance(prop, dict) else None
            prop = _resolve(prop if isinstance(prop, dict) else {}, refs)
            kind = prop_ref.rsplit("/", 1)[-1] if prop_ref else prop.get("type", "")
            if kind == "array" and isinstance(prop.get("items"), dict):
                items = prop["items"]
                item_kind = items["$ref"].rsplit("/", 1)[-1] if "$ref" in items else items.get("type", "")
                kind = f"{item_kind}[]"
            marker = "*" if name in required else ""
            description = (prop.get("description") or "").replace("\n", " ")
            lines.append(f"| {name}{marker} | {kind} | {description} |")
        lines.append("")
    elif schema:
        lines += ["```json", json.dumps(schema, indent=2, ensure_ascii=False, default=str), "```", ""]
    return lines
