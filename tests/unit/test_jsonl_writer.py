"""Unit tests for the JSONL writer."""

import json

from semantic_metrics.infrastructure.io.jsonl_writer import JsonlWriter


def test_write_rows(tmp_path):
    """Test one object per line with key order kept."""
    output_path = tmp_path / "out" / "results.jsonl"
    rows = [
        {"regionId": "NA", "regionName": "North America", "totalSalesAmount": "$300.00"},
        {"regionId": "EU", "regionName": None, "totalSalesAmount": float("nan")},
    ]

    written = JsonlWriter().write_rows(rows, str(output_path))

    assert written == [str(output_path)]
    lines = output_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert list(json.loads(lines[0])) == ["regionId", "regionName", "totalSalesAmount"]
    assert json.loads(lines[1]) == {"regionId": "EU", "regionName": None, "totalSalesAmount": None}


def test_write_no_rows(tmp_path):
    """Test that an empty result writes an empty file."""
    output_path = tmp_path / "empty.jsonl"

    JsonlWriter().write_rows([], str(output_path))

    assert output_path.read_text(encoding="utf-8") == ""


def test_non_ascii_labels(tmp_path):
    """Test that labels are written unescaped."""
    output_path = tmp_path / "results.jsonl"

    JsonlWriter().write_rows([{"regionName": "Zürich", "total": "€5.00"}], str(output_path))

    assert "Zürich" in output_path.read_text(encoding="utf-8")
