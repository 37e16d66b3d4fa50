import sys
from pathlib import Path

import pytest

# Ensure the repository root is on sys.path for direct pytest runs
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from pp_citation import assets as assets_mod  # noqa: E402


@pytest.fixture(scope="session")
def citation_assets():
    return assets_mod.load_assets()


@pytest.fixture
def fresh_asset_cache():
    assets_mod.reset_assets()
    yield
    assets_mod.reset_assets()
