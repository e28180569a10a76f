"""Tests for the command-line entry point."""

import json

import main


def test_extract_command(tmp_path, receipt_text, capsys):
    text_file = tmp_path / "receipt.txt"
    text_file.write_text(receipt_text, encoding="utf-8")

    assert main.main(["extract", "--text", str(text_file)]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["suggested_category_slug"] == "finance"
    assert any(f["key"] == "total_amount" for f in output["fields"])


def test_run_command(tmp_path, receipt_text, capsys):
    page = tmp_path / "receipt.txt"
    page.write_text(receipt_text, encoding="utf-8")
    db = tmp_path / "categories.db"

    exit_code = main.main([
        "run", str(page), "--owner", "me", "--db", str(db), "--document-id", "doc-1"
    ])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["documentId"] == "doc-1"
    assert output["category"]["slug"] == "finance"
    assert output["extractionMode"] == "heuristic"


def test_errors_exit_non_zero(tmp_path, capsys):
    exit_code = main.main([
        "run", str(tmp_path / "missing.png"), "--owner", "me", "--db", str(tmp_path / "c.db")
    ])
    assert exit_code == 1
    assert "Error:" in capsys.readouterr().err


def test_run_command_on_scanned_page(tmp_path, png_bytes, capsys):
    page = tmp_path / "scan.png"
    page.write_bytes(png_bytes)

    exit_code = main.main([
        "run", str(page), "--owner", "me", "--db", str(tmp_path / "c.db"), "--document-id", "doc-2"
    ])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["category"]["slug"] == "general"
    assert output["fields"] == []
