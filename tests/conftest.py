import sys
from pathlib import Path

import pytest

# Ensure `import mailcompose` and `import tests` work without PYTHONPATH hacks.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from mailcompose.core.storage import InMemoryStore  # noqa: E402
from tests.helpers._html_builders import build_email  # noqa: E402


@pytest.fixture
def compliant_html() -> str:
    return build_email()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()
