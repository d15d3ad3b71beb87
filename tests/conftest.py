"""
Pytest Configuration for crudgen Tests

Ensures proper import paths for the crudgen package during testing and
provides shared project fixtures.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add the parent directory to sys.path to ensure proper imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from crudgen.layout import ProjectLayout  # noqa: E402
from crudgen.model import ModelDescriptor  # noqa: E402


@pytest.fixture
def layout(tmp_path):
    """Default project layout rooted in a temp directory."""
    return ProjectLayout.from_config(tmp_path)


@pytest.fixture
def author():
    return ModelDescriptor.from_input("author", ["name:string", "age:int"])


@pytest.fixture
def book():
    return ModelDescriptor.from_input("Book", ["title", "isbn:string"])


@pytest.fixture(autouse=True)
def reset_crudgen_logging():
    """CLI runs attach a handler to a captured stream; drop it after each test."""
    yield
    logger = logging.getLogger("crudgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
