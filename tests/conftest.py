"""Shared fixtures: generating codec packages into a temporary directory."""

import importlib
import sys
import uuid

import pytest

from dynamodb_codegen import generate_codecs

ROUTE_MODULE = "fixtures.routes"


@pytest.fixture
def generate_package(tmp_path, monkeypatch):
    """Return a factory that generates codecs and imports the resulting package."""
    created = []

    def _generate(targets=(ROUTE_MODULE,), **overrides):
        package = f"codecs_{uuid.uuid4().hex[:8]}"
        result = generate_codecs(
            list(targets), output_dir=tmp_path, package_name=package, **overrides
        )
        assert result.error_message is None, result.error_message
        monkeypatch.syspath_prepend(str(tmp_path))
        created.append(package)
        return importlib.import_module(package), result

    yield _generate

    for name in list(sys.modules):
        if any(name == package or name.startswith(f"{package}.") for package in created):
            del sys.modules[name]


@pytest.fixture
def route_package(generate_package):
    """The imported codec package generated for the route fixtures."""
    package, result = generate_package()
    assert result.success, result.failures
    return package


@pytest.fixture
def codecs(route_package):
    return route_package.create_codecs()
