from tests.helpers import clone_snapshot, write_snapshot
from fbd.__main__ import main


def test_validate_mode_exits_zero(tmp_path, sample_snapshot_dict, capsys):
    path = write_snapshot(tmp_path, sample_snapshot_dict)
    code = main([str(path), "--validate"])

    assert code == 0
    assert "Snapshot is valid." in capsys.readouterr().out


def test_invalid_snapshot_returns_one(tmp_path, sample_snapshot_dict):
    data = clone_snapshot(sample_snapshot_dict)
    data["config"]["taxRate"] = 140
    path = write_snapshot(tmp_path, data)

    code = main([str(path), "--validate"])
    assert code == 1


def test_missing_snapshot_file_returns_two(tmp_path):
    missing = tmp_path / "nope.json"
    code = main([str(missing), "--validate"])
    assert code == 2


def test_malformed_json_returns_two(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{not json", encoding="utf-8")
    assert main([str(path)]) == 2


def test_summary_prints_engine_output(tmp_path, sample_snapshot_dict, capsys):
    path = write_snapshot(tmp_path, sample_snapshot_dict)
    code = main(
        [str(path), "--year", "2025", "--month", "1", "--today", "2025-03-30", "--extra", "200", "--target-years", "15", "--rows"]
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "Month: 2025-1" in out
    assert "Disposable: 1,237.00" in out
    assert "Interest saved:" in out
    assert "Extra needed for 15 years:" in out
    assert "Net worth:" in out
    assert "Annual 2025" in out
    assert "ALERT: Transfer to investment account" not in out


def test_summary_reports_non_amortizing_loan(tmp_path, sample_snapshot_dict, capsys):
    data = clone_snapshot(sample_snapshot_dict)
    data["config"]["loan"]["annualRate"] = 10
    path = write_snapshot(tmp_path, data)

    code = main([str(path), "--today", "2025-02-10", "--year", "2025", "--month", "2"])

    assert code == 0
    assert "Payoff: never" in capsys.readouterr().out


def test_bad_month_returns_two(tmp_path, sample_snapshot_dict):
    path = write_snapshot(tmp_path, sample_snapshot_dict)
    assert main([str(path), "--month", "13"]) == 2


def test_init_writes_a_valid_default_snapshot(tmp_path, capsys):
    path = tmp_path / "fresh.json"

    assert main([str(path), "--init"]) == 0
    assert path.exists()
    assert main([str(path), "--validate"]) == 0
    assert "Snapshot is valid." in capsys.readouterr().out
