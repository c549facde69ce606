from __future__ import annotations

from pathlib import Path

from speeddns.measurement.results import parse_result_csv

HEADER = "IP Address,Sent,Received,Loss Rate,Avg Latency,Download Speed (MB/s)\n"


def _write(path: Path, rows: list[str]) -> Path:
    path.write_text(HEADER + "".join(row + "\n" for row in rows), encoding="utf-8")
    return path


def test_returns_min_of_max_and_rows_in_order(tmp_path: Path) -> None:
    csv_path = _write(
        tmp_path / "result.csv",
        ["198.51.100.1,4,4,0.00,80.1,12.5", "198.51.100.2,4,4,0.00,90.2,10.1", "2001:db8::1,4,4,0,99,9"],
    )

    assert parse_result_csv(csv_path, 2) == ["198.51.100.1", "198.51.100.2"]
    assert parse_result_csv(csv_path, 3) == ["198.51.100.1", "198.51.100.2", "2001:db8::1"]
    assert parse_result_csv(csv_path, 10) == ["198.51.100.1", "198.51.100.2", "2001:db8::1"]


def test_header_only_file_yields_nothing(tmp_path: Path) -> None:
    csv_path = _write(tmp_path / "result.csv", [])

    assert parse_result_csv(csv_path, 5) == []


def test_header_row_is_always_discarded(tmp_path: Path) -> None:
    csv_path = tmp_path / "result.csv"
    csv_path.write_text("203.0.113.5,x\n203.0.113.6,y\n", encoding="utf-8")

    assert parse_result_csv(csv_path, 5) == ["203.0.113.6"]


def test_only_first_column_is_used(tmp_path: Path) -> None:
    csv_path = _write(tmp_path / "result.csv", ["203.0.113.9", "203.0.113.10,only,extra,columns"])

    assert parse_result_csv(csv_path, 5) == ["203.0.113.9", "203.0.113.10"]


def test_blank_rows_are_skipped(tmp_path: Path) -> None:
    csv_path = _write(tmp_path / "result.csv", ["198.51.100.1,1", "", "198.51.100.2,2"])

    assert parse_result_csv(csv_path, 5) == ["198.51.100.1", "198.51.100.2"]


def test_missing_file_returns_empty(tmp_path: Path) -> None:
    assert parse_result_csv(tmp_path / "absent.csv", 5) == []


def test_undecodable_file_returns_empty(tmp_path: Path) -> None:
    csv_path = tmp_path / "result.csv"
    csv_path.write_bytes(b"header\n\xff\xfe\xfa,broken\n")

    assert parse_result_csv(csv_path, 5) == []


def test_zero_max_returns_empty(tmp_path: Path) -> None:
    csv_path = _write(tmp_path / "result.csv", ["198.51.100.1,1"])

    assert parse_result_csv(csv_path, 0) == []


def test_parses_generated_sample(generated_result: Path) -> None:
    endpoints = parse_result_csv(generated_result, 10)

    assert sorted(endpoints) == ["198.51.100.1", "198.51.100.2", "198.51.100.3"]
