from __future__ import annotations

from pathlib import Path

import pytest

from autofake.expander import Expander
from tests._fixtures.source_builder import SourceBuilder


@pytest.fixture
def source_builder(tmp_path: Path) -> SourceBuilder:
    """Provide a reusable Swift source tree rooted at the pytest tmp_path."""
    return SourceBuilder(tmp_path)


@pytest.fixture
def expander() -> Expander:
    """Expander with default formatting, independent of any config on disk."""
    return Expander()
