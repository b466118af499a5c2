"""Tests for the generation pipeline and its failure handling."""

import pytest

from dynamodb_codegen import (
    CircularDependencyError,
    CodecGenerationPipeline,
    GeneratorConfig,
    generate_codecs,
)
from dynamodb_codegen.core.source import ModuleSchemaSource
from dynamodb_codegen.core.writer import (
    CodeWriterError,
    FileCodeWriter,
    InMemoryCodeWriter,
)


class FailingWriter(InMemoryCodeWriter):
    """In-memory writer that refuses one module."""

    def __init__(self, failing_module: str):
        super().__init__()
        self.failing_module = failing_module

    def write(self, module: str, source: str) -> str:
        if module == self.failing_module:
            raise CodeWriterError(f"disk full while writing {module}")
        return super().write(module, source)


def _run(modules, writer=None, **settings):
    config = GeneratorConfig(package_name="out", **settings)
    return CodecGenerationPipeline(config, writer or InMemoryCodeWriter()).run(
        ModuleSchemaSource(modules)
    )


def test_route_schema_generates_every_artifact() -> None:
    writer = InMemoryCodeWriter()
    result = _run(["fixtures.routes"], writer)

    assert result.success
    assert result.order == [
        "fixtures.routes.RouteGeometry",
        "fixtures.routes.RouteInstruction",
        "fixtures.routes.RouteMetadata",
        "fixtures.routes.UserProfile",
        "fixtures.routes.Waypoint",
        "fixtures.routes.Route",
    ]
    assert "out.route_codec" in writer
    assert "out.route_fields" in writer
    assert "out.table_name_resolver" in writer
    assert "out.__init__" in writer
    assert result.metadata == {
        "package": "out",
        "entity_count": 6,
        "codec_count": 6,
        "table_count": 2,
    }


def test_codec_source_layout() -> None:
    writer = InMemoryCodeWriter()
    _run(["fixtures.routes"], writer)
    source = writer["out.route_codec"]

    assert source.startswith("# Generated by dynamodb-codegen. DO NOT EDIT.\n")
    assert "from fixtures.routes import Difficulty, Route, RouteType" in source
    assert "    from out.waypoint_codec import WaypointCodec" in source
    assert "class RouteCodec:" in source
    assert source.index("route_geometry_codec: RouteGeometryCodec,") < source.index(
        "waypoint_codec: WaypointCodec,"
    )
    compile(source, "route_codec.py", "exec")


def test_comments_can_be_disabled() -> None:
    writer = InMemoryCodeWriter()
    _run(["fixtures.routes"], writer, add_comments=False)

    assert not writer["out.waypoint_codec"].startswith("#")


def test_writer_failure_is_isolated() -> None:
    writer = FailingWriter("out.waypoint_codec")
    result = _run(["fixtures.routes"], writer)

    assert not result.success
    assert "disk full" in result.failures["fixtures.routes.Waypoint"]
    assert "out.route_codec" in writer
    assert "out.route_geometry_codec" in writer
    assert any("RouteCodec left out of create_codecs()" in w for w in result.warnings)


def test_map_field_fails_its_entity_only() -> None:
    writer = InMemoryCodeWriter()
    result = _run(["fixtures.unsupported"], writer, strict_classification=False)

    assert "map fields are not supported" in result.failures["fixtures.unsupported.Settings"]
    assert "out.attachment_codec" in writer
    assert "out.settings_codec" not in writer


def test_map_placeholder() -> None:
    writer = InMemoryCodeWriter()
    result = _run(
        ["fixtures.unsupported"], writer, strict_classification=False, map_fields="placeholder"
    )

    assert "fixtures.unsupported.Settings" not in result.failures
    assert "# options: map attributes are not supported" in writer["out.settings_codec"]


def test_strict_classification_failure_is_isolated() -> None:
    writer = InMemoryCodeWriter()
    result = _run(["fixtures.unsupported"], writer, map_fields="placeholder")

    assert "no mapping rule matches" in result.failures["fixtures.unsupported.Attachment"]
    assert result.order == ["fixtures.unsupported.Settings"]
    assert "out.settings_codec" in writer


def test_lenient_fallback_is_reported() -> None:
    result = _run(["fixtures.unsupported"], map_fields="placeholder", strict_classification=False)

    assert result.success
    assert any("falling back to COMPLEX_OBJECT" in w for w in result.warnings)
    assert any("AttachmentCodec left out of create_codecs()" in w for w in result.warnings)


def test_missing_tables_warn() -> None:
    result = _run(["fixtures.unsupported"], map_fields="placeholder", strict_classification=False)

    assert "No @table entities; table name registry not generated" in result.warnings


def test_cycle_aborts_the_run() -> None:
    with pytest.raises(CircularDependencyError) as excinfo:
        _run(["fixtures.cyclic"])
    assert excinfo.value.unresolved == ("fixtures.cyclic.Child", "fixtures.cyclic.Parent")


def test_generate_codecs_returns_fatal_errors() -> None:
    result = generate_codecs(["fixtures.cyclic"], writer=InMemoryCodeWriter())

    assert not result.success
    assert "Circular dependency detected" in result.error_message
    assert isinstance(result.exception, CircularDependencyError)


def test_generate_codecs_rejects_invalid_config() -> None:
    result = generate_codecs(["fixtures.routes"], package_name="not-a-package")

    assert result.error_message.startswith("Code generation failed: Invalid package name")


def test_file_writer_creates_packages(tmp_path) -> None:
    writer = FileCodeWriter(tmp_path)
    location = writer.write("app.codecs.route_codec", "X = 1\n")

    assert location == str(tmp_path / "app" / "codecs" / "route_codec.py")
    assert (tmp_path / "app" / "__init__.py").exists()
    assert (tmp_path / "app" / "codecs" / "__init__.py").exists()


def test_file_writer_wraps_os_errors(tmp_path) -> None:
    (tmp_path / "app").write_text("not a directory")
    with pytest.raises(CodeWriterError, match="Failed to write"):
        FileCodeWriter(tmp_path).write("app.route_codec", "X = 1\n")


def test_generate_codecs_writes_files(tmp_path) -> None:
    result = generate_codecs(["fixtures.routes"], output_dir=tmp_path, package_name="app.codecs")

    assert result.success
    assert (tmp_path / "app" / "codecs" / "route_codec.py").exists()
    assert (tmp_path / "app" / "__init__.py").exists()
    assert result.files["app.codecs.__init__"] == str(tmp_path / "app" / "codecs" / "__init__.py")


def test_registry_keeps_tables_whose_codec_failed() -> None:
    writer = InMemoryCodeWriter()
    result = _run(["fixtures.partial_tables"], writer)

    assert "no mapping rule matches" in result.failures["fixtures.partial_tables.StoredAttachment"]
    assert result.order == ["fixtures.partial_tables.Note"]
    assert "out.stored_attachment_codec" not in writer

    registry = writer["out.table_name_resolver"]
    assert "'fixtures.partial_tables.StoredAttachment': 'attachments'," in registry
    assert "'fixtures.partial_tables.Note': 'notes'," in registry
    assert result.metadata["table_count"] == 2
    assert result.metadata["codec_count"] == 1
