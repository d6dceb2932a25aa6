import copy
import json
from pathlib import Path

from fbd.schema import IncomeEntry, MonthRecord


def write_snapshot(tmp_path: Path, data: dict, filename: str = "snapshot.json") -> Path:
    path = tmp_path / filename
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def clone_snapshot(data: dict) -> dict:
    return copy.deepcopy(data)


def month_with_income(taxed: float = 0.0, untaxed: float = 0.0, client_id: int = 1) -> MonthRecord:
    record = MonthRecord()
    if taxed:
        record.taxed_income.append(IncomeEntry(id=1, client_id=client_id, amount=taxed))
    if untaxed:
        record.untaxed_income.append(IncomeEntry(id=2, client_id=client_id, amount=untaxed))
    return record
