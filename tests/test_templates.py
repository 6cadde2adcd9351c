import pytest
import yaml

from labnote.core.errors import TableError, TemplateError
from labnote.services.templates import (
    TaggedValue,
    build_editable_template,
    read_template,
    split_front_matter,
)

TEMPLATE = """---
title: "Study title"
author: "Someone"
date: "`r Sys.Date()`"
params:
  subject_id: ""
---

Body with `r params$subject_id` and a literal
---
rule.
"""

PARAMS = {
    "subject_id": "001",
    "experiment_order": "Heartbeat Counting Task → Experiment → Questionnaire",
    "start_time": "2025-08-09 14:00",
    "end_time": "2025-08-09 14:45",
    "lab_number": r"A\_101",
    "hct_order": "30 → 45 → 55",
    "output_timestamp": "2025-08-09 14:50",
    "experimenter_name": "Sugiura",
}


def test_split_front_matter():
    header, body = split_front_matter(TEMPLATE)
    assert header["title"] == "Study title"
    assert body.startswith("\nBody with")
    assert "---\nrule." in body


def test_build_editable_template_merges_header():
    result = build_editable_template(TEMPLATE, PARAMS, "2025-08-09")
    header, body = split_front_matter(result)
    assert header["title"] == "Study title"
    assert header["author"] == "Someone"
    assert header["date"] == "2025-08-09"
    assert header["params"] == PARAMS
    assert body == split_front_matter(TEMPLATE)[1]


def test_backslashes_survive_yaml_round_trip():
    result = build_editable_template(TEMPLATE, PARAMS, "2025-08-09")
    header = yaml.safe_load(result.split("---\n")[1])
    assert header["params"]["lab_number"] == r"A\_101"
    assert header["params"]["subject_id"] == "001"


def test_missing_opening_delimiter():
    with pytest.raises(TemplateError):
        split_front_matter("title: x\n---\nbody\n")


def test_missing_closing_delimiter():
    with pytest.raises(TemplateError, match="not closed"):
        build_editable_template("---\ntitle: x\nbody\n", PARAMS, "2025-08-09")


def test_header_must_be_a_mapping():
    with pytest.raises(TemplateError, match="mapping"):
        split_front_matter("---\n- a\n- b\n---\nbody\n")


def test_invalid_yaml_header():
    with pytest.raises(TemplateError):
        split_front_matter('---\ntitle: "unterminated\n---\n')


def test_template_error_is_a_table_error():
    assert issubclass(TemplateError, TableError)


def test_shipped_template_is_well_formed(settings):
    header, body = split_front_matter(read_template(settings.template_path))
    assert set(PARAMS) <= set(header["params"])
    assert "params$hct_order" in body


def test_read_template_missing(tmp_path):
    with pytest.raises(TemplateError, match="not found"):
        read_template(tmp_path / "missing.Rmd")


def test_multiline_header_values_stay_block_literals(settings):
    result = build_editable_template(read_template(settings.template_path), PARAMS, "2025-08-09")
    header_text = result.split("---\n")[1]
    assert "header-includes: |\n  \\usepackage{luatexja}\n  \\usepackage{luatexja-fontspec}\n" in header_text
    assert "\n\n" not in header_text
    original_header, _ = split_front_matter(read_template(settings.template_path))
    header, _ = split_front_matter(result)
    assert header["header-includes"] == original_header["header-includes"]


def test_r_markdown_tags_survive():
    template = (
        "---\n"
        "title: Session\n"
        "author: !expr Sys.getenv(\"USER\")\n"
        "date: !r Sys.Date()\n"
        "params:\n"
        "  subject_id: !r NA\n"
        "---\n"
        "Body\n"
    )
    original, _ = split_front_matter(template)
    assert original["date"] == TaggedValue("!r", "Sys.Date()")

    result = build_editable_template(template, PARAMS, "2025-08-09")
    header, body = split_front_matter(result)
    assert header["author"] == TaggedValue("!expr", 'Sys.getenv("USER")')
    assert header["title"] == "Session"
    assert header["date"] == "2025-08-09"
    assert header["params"] == PARAMS
    assert "!expr" in result
    assert body == "Body\n"
