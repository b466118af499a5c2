"""Tests for the Jinja2 engine behind every emitter."""

import pytest

from dynamodb_codegen.core.generator import TEMPLATE_DIRECTORY
from dynamodb_codegen.core.templates import (
    TemplateEngine,
    TemplateError,
    create_template_engine,
    indent_lines,
)


def test_engine_renders_from_its_directory(tmp_path) -> None:
    (tmp_path / "greeting.py.j2").write_text("NAME = {{ name | pyrepr }}\n")
    engine = TemplateEngine(tmp_path)

    assert engine.render_template("greeting.py.j2", {"name": "routes"}) == "NAME = 'routes'\n"


def test_undefined_variables_fail(tmp_path) -> None:
    (tmp_path / "broken.py.j2").write_text("X = {{ missing }}\n")

    with pytest.raises(TemplateError, match="Failed to render template broken.py.j2"):
        TemplateEngine(tmp_path).render_template("broken.py.j2", {})


def test_missing_template_and_macro(tmp_path) -> None:
    (tmp_path / "macros.j2").write_text("{% macro shout(text) %}{{ text | upper }}{% endmacro %}")
    engine = TemplateEngine(tmp_path)

    assert engine.call_macro("macros.j2", "shout", "go") == "GO"
    with pytest.raises(TemplateError, match="has no macro whisper"):
        engine.call_macro("macros.j2", "whisper", "go")
    with pytest.raises(TemplateError, match="Template not found: absent.j2"):
        engine.render_template("absent.j2", {})


def test_engines_are_shared_per_directory() -> None:
    engine = create_template_engine(TEMPLATE_DIRECTORY)

    assert create_template_engine(TEMPLATE_DIRECTORY) is engine
    assert engine.template_dir == TEMPLATE_DIRECTORY


def test_indent_lines_skips_blank_lines() -> None:
    assert indent_lines("a = 1\n\nb = 2", 8) == "        a = 1\n\n        b = 2"
