"""Generate JSON Schema and docs for the run config YAML format."""

from __future__ import annotations

import json
from pathlib import Path

from testframe.config import RunConfig


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def generate_json_schema() -> dict:
    return RunConfig.model_json_schema()


def write_json_schema(path: Path) -> None:
    _ensure_parent(path)
    schema = generate_json_schema()
    path.write_text(json.dumps(schema, indent=2) + "\n")


def generate_schema_doc() -> str:
    schema = generate_json_schema()
    props = schema.get("properties", {})
    required = set(schema.get("required", []))

    lines: list[str] = []
    lines.append("# testframe run config")
    lines.append("")
    lines.append("This doc is generated from the Pydantic models.")
    lines.append("")
    lines.append("## Keys")
    for key, prop in props.items():
        kind = prop.get("type")
        if kind is None and "anyOf" in prop:
            kind = " | ".join(p.get("type", "?") for p in prop["anyOf"])
        suffix = "required" if key in required else f"default: {prop.get('default')!r}"
        lines.append(f"- `{key}`: {kind} ({suffix})")
    lines.append("")
    return "\n".join(lines)


def write_schema_doc(path: Path) -> None:
    _ensure_parent(path)
    path.write_text(generate_schema_doc())
