from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ..core.errors import TemplateError

FRONT_MATTER_DELIMITER = "---"


@dataclass(frozen=True, slots=True)
class TaggedValue:
    """A header value carrying a local tag such as R Markdown's ``!r`` or ``!expr``."""

    tag: str
    value: Any


class HeaderLoader(yaml.SafeLoader):
    pass


class HeaderDumper(yaml.SafeDumper):
    pass


def _construct_tagged(loader: HeaderLoader, suffix: str, node: yaml.Node) -> TaggedValue:
    if isinstance(node, yaml.ScalarNode):
        value: Any = loader.construct_scalar(node)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)
    return TaggedValue(f"!{suffix}", value)


def _represent_tagged(dumper: HeaderDumper, data: TaggedValue) -> yaml.Node:
    if isinstance(data.value, dict):
        return dumper.represent_mapping(data.tag, data.value)
    if isinstance(data.value, list):
        return dumper.represent_sequence(data.tag, data.value)
    return dumper.represent_scalar(data.tag, str(data.value))


def _represent_str(dumper: HeaderDumper, data: str) -> yaml.Node:
    # Multi-line values such as header-includes stay editable block literals.
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_str(data)


HeaderLoader.add_multi_constructor("!", _construct_tagged)
HeaderDumper.add_representer(TaggedValue, _represent_tagged)
HeaderDumper.add_representer(str, _represent_str)


def read_template(path: str | Path) -> str:
    template_path = Path(path)
    try:
        return template_path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as exc:
        raise TemplateError(f"lab-note template not found: {template_path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise TemplateError(f"unable to read lab-note template {template_path}: {exc}") from exc


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Split an R Markdown document into its parsed YAML header and body.

    The first line must be ``---`` and the header ends at the next ``---``
    line. Anything else raises ``TemplateError``.
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        raise TemplateError("template does not start with a '---' front-matter block")
    closing = next(
        (
            index
            for index, line in enumerate(lines[1:], start=1)
            if line.rstrip("\r\n") == FRONT_MATTER_DELIMITER
        ),
        None,
    )
    if closing is None:
        raise TemplateError("template front matter is not closed by a '---' line")

    try:
        header = yaml.load("".join(lines[1:closing]), Loader=HeaderLoader)
    except yaml.YAMLError as exc:
        raise TemplateError(f"template front matter is not valid YAML: {exc}") from exc
    if header is None:
        header = {}
    if not isinstance(header, dict):
        raise TemplateError("template front matter must be a mapping")
    return header, "".join(lines[closing + 1 :])


def yaml_dump(data: Mapping[str, Any]) -> str:
    return yaml.dump(
        dict(data), Dumper=HeaderDumper, sort_keys=False, allow_unicode=True, width=1000
    )


def build_editable_template(
    template_text: str,
    params: Mapping[str, str | None],
    document_date: str,
) -> str:
    """Return the template with ``date`` and ``params`` filled into its header.

    Header keys other than ``date`` and ``params`` are kept as they are, and
    the document body is returned unchanged.
    """
    header, body = split_front_matter(template_text)
    header["date"] = document_date
    header["params"] = dict(params)
    return f"{FRONT_MATTER_DELIMITER}\n{yaml_dump(header)}{FRONT_MATTER_DELIMITER}\n{body}"
