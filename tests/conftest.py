"""Pytest configuration for dataknobs_parameter tests."""

import sys
from pathlib import Path

import pytest

# Add the package source to path for testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from dataknobs_parameter import Parameter  # noqa: E402


@pytest.fixture
def parameter():
    """Engine with default options."""
    return Parameter()


@pytest.fixture
def parameter_with_convert():
    """Engine with default coercion enabled."""
    return Parameter(convert=True)


@pytest.fixture
def parameter_with_root_validate():
    """Engine that reports non-mapping subjects as error records."""
    return Parameter(validateRoot=True)


@pytest.fixture
def parameter_with_widely_undefined():
    """Engine that treats empty strings and NaN as missing."""
    return Parameter(widelyUndefined=True)
