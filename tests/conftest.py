"""Pytest configuration and shared fixtures for the stemimg test suite."""

import os
from pathlib import Path

import pytest
from hypothesis import Phase, Verbosity, settings
from utils import FakeEngineFactory, make_document

from stemimg.transforms.stem import StemProcessor

# Register custom Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


@pytest.fixture
def engine_factory() -> FakeEngineFactory:
    """Provide a recording fake engine factory."""
    return FakeEngineFactory()


@pytest.fixture
def processor(engine_factory) -> StemProcessor:
    """Provide a processor wired to the fake engine."""
    return StemProcessor(engine_factory=engine_factory)


@pytest.fixture
def new_document(tmp_path: Path):
    """Provide a factory for documents whose base directory is ``tmp_path``."""

    def _make(children=None, attributes=None, backend="pdf", **options):
        return make_document(tmp_path, children=children, attributes=attributes, backend=backend, **options)

    return _make
