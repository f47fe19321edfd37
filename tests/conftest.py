from __future__ import annotations

import pytest

from projection_app.sample_data import (
    build_default_catalog,
    build_fiscal_constants,
    build_macro_table,
    build_sample_configuration,
)
from projection_app.services.calculator import ProjectionEngine


@pytest.fixture
def catalog():
    return build_default_catalog()


@pytest.fixture
def macro():
    return build_macro_table()


@pytest.fixture
def constants():
    return build_fiscal_constants()


@pytest.fixture
def config():
    return build_sample_configuration()


@pytest.fixture
def engine(catalog, macro, constants):
    return ProjectionEngine(catalog, macro, constants)
