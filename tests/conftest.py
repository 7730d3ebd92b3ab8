from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any

import pytest

from filedownload.config import LOGGING_CONFIG

# Note: We explicitly turn the propagate on just for tests, because pytest
# caplog not able to capture no-propagate loggers.
LOGGING_CONFIG["loggers"]["filedownload"]["propagate"] = True


@pytest.fixture(scope="function")
def logging_config() -> dict[str, Any]:
    return deepcopy(LOGGING_CONFIG)


@pytest.fixture
def greeting_file(tmp_path: Path) -> Path:
    path = tmp_path / "greeting.txt"
    path.write_bytes(b"hello world")
    return path
