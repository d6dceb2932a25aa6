import json
from pathlib import Path

import pytest

from fbd.schema import Snapshot

SAMPLE_PATH = Path(__file__).resolve().parent.parent / "sample_snapshot.json"


@pytest.fixture
def sample_snapshot_dict() -> dict:
    return json.loads(SAMPLE_PATH.read_text(encoding="utf-8"))


@pytest.fixture
def sample_snapshot(sample_snapshot_dict) -> Snapshot:
    return Snapshot.from_dict(sample_snapshot_dict)
