"""Tests for the dynamodb-codegen command line interface."""

import json

from dynamodb_codegen.cli import create_parser, main


def test_parser_generate_options() -> None:
    args = create_parser().parse_args(
        ["generate", "app.models", "-o", "src", "--package", "app.codecs", "--lenient"]
    )

    assert args.command == "generate"
    assert args.modules == ["app.models"]
    assert args.output == "src"
    assert args.package_name == "app.codecs"
    assert args.lenient


def test_generate_writes_package(tmp_path, capsys) -> None:
    exit_code = main(
        ["generate", "fixtures.routes", "-o", str(tmp_path), "--package", "cli_codecs"]
    )

    assert exit_code == 0
    assert (tmp_path / "cli_codecs" / "route_codec.py").exists()
    assert (tmp_path / "cli_codecs" / "table_name_resolver.py").exists()
    assert "Generated" in capsys.readouterr().out


def test_dry_run_writes_nothing(tmp_path) -> None:
    exit_code = main(
        ["generate", "fixtures.routes", "-o", str(tmp_path), "--package", "dry", "--dry-run"]
    )

    assert exit_code == 0
    assert not (tmp_path / "dry").exists()


def test_no_wiring_skips_package_init(tmp_path) -> None:
    exit_code = main(
        ["generate", "fixtures.routes", "-o", str(tmp_path), "--package", "bare", "--no-wiring"]
    )

    assert exit_code == 0
    assert (tmp_path / "bare" / "__init__.py").read_text() == ""


def test_generate_requires_output_or_dry_run(capsys) -> None:
    assert main(["generate", "fixtures.routes"]) == 2
    assert "--output is required" in capsys.readouterr().out


def test_failed_entity_exits_non_zero() -> None:
    assert main(["generate", "fixtures.unsupported", "--dry-run"]) == 1


def test_map_placeholder_and_lenient_succeed() -> None:
    exit_code = main(
        ["generate", "fixtures.unsupported", "--dry-run", "--lenient", "--map-placeholder"]
    )
    assert exit_code == 0


def test_cycle_exits_non_zero(capsys) -> None:
    assert main(["generate", "fixtures.cyclic", "--dry-run"]) == 1
    assert "Circular dependency" in capsys.readouterr().out


def test_config_file_is_used(tmp_path) -> None:
    config_file = tmp_path / "codegen.json"
    config_file.write_text(json.dumps({"package_name": "from_file"}))

    exit_code = main(
        ["generate", "fixtures.routes", "-o", str(tmp_path), "--config", str(config_file)]
    )

    assert exit_code == 0
    assert (tmp_path / "from_file" / "waypoint_codec.py").exists()


def test_invalid_config_exits_with_usage_error() -> None:
    assert main(["generate", "fixtures.routes", "--dry-run", "--package", "bad-name"]) == 2


def test_inspect(capsys) -> None:
    assert main(["inspect", "fixtures.routes"]) == 0
    assert "Generation Order" in capsys.readouterr().out
