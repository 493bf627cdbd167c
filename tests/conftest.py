"""Shared fixtures for the apistub tests."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import pytest

from apistub.loader import load_spec
from apistub.type_resolver import BuildContext

FIXTURES = Path(__file__).parent / "fixtures"
PETSTORE_PATH = FIXTURES / "petstore.yaml"

_PETSTORE = load_spec(PETSTORE_PATH)


@pytest.fixture
def petstore() -> dict[str, Any]:
    """A fresh copy of the pet store document."""
    return copy.deepcopy(_PETSTORE)


@pytest.fixture
def context(petstore) -> BuildContext:
    """A build context over the pet store document."""
    return BuildContext(petstore)
