import datetime as dt
import os

import pytest

from row_source import file_access, list_sheets, load_preview, load_rows
from row_source.workbook import cell_text


# ── Delimited files ───────────────────────────────────────────────────

def test_csv_header_skipped_and_cells_trimmed(write_csv):
    path = write_csv([["ID", "Value"], [" R1 ", "10k  "], ["R2", ""]])
    rows = load_rows(path, None, ignore_header=True)
    assert rows == [{1: "R1", 2: "10k"}, {1: "R2", 2: ""}]


def test_csv_header_kept_when_not_ignored(write_csv):
    path = write_csv([["ID", "Value"], ["R1", "10k"]])
    rows = load_rows(path, None, ignore_header=False)
    assert rows[0] == {1: "ID", 2: "Value"}
    assert len(rows) == 2


def test_csv_quoting_and_bom(tmp_path):
    path = tmp_path / "bom.csv"
    path.write_bytes(b'\xef\xbb\xbfID,Description\nC1,"Cap, 100nF"\n')
    rows = load_rows(path, None, ignore_header=False)
    assert rows == [{1: "ID", 2: "Description"}, {1: "C1", 2: "Cap, 100nF"}]


def test_tsv_uses_tabs(tmp_path):
    path = tmp_path / "parts.tsv"
    path.write_text("ID\tValue\nR1\t1k\n", encoding="utf-8")
    assert load_rows(path, None, ignore_header=True) == [{1: "R1", 2: "1k"}]


# ── Workbooks ─────────────────────────────────────────────────────────

def test_xlsx_rows_have_full_width(write_xlsx):
    path = write_xlsx({"Resistors": [["ID", "Value", "Note"], ["R1", 10, None], ["R2", 4.7]]})
    rows = load_rows(path, "Resistors", ignore_header=True)
    assert rows == [{1: "R1", 2: "10", 3: ""}, {1: "R2", 2: "4.7", 3: ""}]


def test_xlsx_selects_named_sheet(write_xlsx):
    path = write_xlsx({"A": [["a1"]], "B": [["b1"], ["b2"]]})
    assert load_rows(path, "B", ignore_header=False) == [{1: "b1"}, {1: "b2"}]


def test_xlsx_missing_sheet_gives_empty(write_xlsx):
    path = write_xlsx({"A": [["a1"]]})
    assert load_rows(path, "Nope", ignore_header=False) == []


def test_cell_text_rendering():
    assert cell_text(None) == ""
    assert cell_text(3.0) == "3"
    assert cell_text(True) == "TRUE"
    assert cell_text(dt.datetime(2024, 5, 1)) == "2024-05-01"
    assert cell_text("  x ") == "x"


# ── Failure tolerance ─────────────────────────────────────────────────

def test_missing_file_gives_empty(tmp_path):
    assert load_rows(tmp_path / "absent.xlsx", "Sheet1", True) == []


def test_corrupt_workbook_gives_empty(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"not a zip file")
    assert load_rows(path, "Sheet1", True) == []


def test_unsupported_extension_gives_empty(tmp_path):
    path = tmp_path / "parts.ods"
    path.write_bytes(b"whatever")
    assert load_rows(path, None, True) == []


def test_locked_file_falls_back_to_temp_copy(write_csv, monkeypatch):
    path = write_csv([["ID"], ["R1"]])
    opened = []
    real_open = open

    def locked_open(target, *args, **kwargs):
        opened.append(str(target))
        if str(target) == str(path):
            raise PermissionError("file is in use")
        return real_open(target, *args, **kwargs)

    monkeypatch.setattr(file_access, "open", locked_open, raising=False)
    monkeypatch.setattr(file_access.time, "sleep", lambda _s: None)

    assert load_rows(path, None, ignore_header=True) == [{1: "R1"}]

    copies = [p for p in opened if p != str(path)]
    assert opened.count(str(path)) == file_access.config.LOAD_RETRIES
    assert len(copies) == 1
    assert not os.path.exists(copies[0])


def test_locked_file_and_failed_copy_gives_empty(write_csv, monkeypatch):
    path = write_csv([["ID"], ["R1"]])

    def always_locked(*_args, **_kwargs):
        raise PermissionError("file is in use")

    def failed_copy(*_args, **_kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(file_access, "open", always_locked, raising=False)
    monkeypatch.setattr(file_access.time, "sleep", lambda _s: None)
    monkeypatch.setattr(file_access.shutil, "copyfile", failed_copy)

    assert load_rows(path, None, ignore_header=True) == []


# ── Sheet listing and preview ─────────────────────────────────────────

def test_list_sheets(write_xlsx, write_csv):
    assert list_sheets(write_xlsx({"Caps": [], "Res": []})) == ["Caps", "Res"]
    assert list_sheets(write_csv([["ID"]], name="diodes.csv")) == ["diodes"]


def test_preview_columns_and_rows(write_xlsx):
    path = write_xlsx({"S": [["ID", "", "Value"], ["R1", "x", "1k"], ["R2", "y", "2k"]]})
    preview = load_preview(path, "S", ignore_header=True, max_rows=1)
    assert [(c.index, c.letter, c.header) for c in preview.columns] == [
        (1, "A", "ID"), (2, "B", None), (3, "C", "Value"),
    ]
    assert preview.columns[0].label == "A - ID"
    assert preview.rows == [{1: "R1", 2: "x", 3: "1k"}]


def test_preview_without_header_has_no_header_text(write_csv):
    preview = load_preview(write_csv([["R1", "1k"]]), None, ignore_header=False)
    assert [c.header for c in preview.columns] == [None, None]
    assert preview.rows == [{1: "R1", 2: "1k"}]


@pytest.mark.parametrize("suffix", [".xlsx", ".csv"])
def test_preview_of_missing_file_is_empty(tmp_path, suffix):
    preview = load_preview(tmp_path / f"absent{suffix}", "S")
    assert preview.columns == [] and preview.rows == []


def test_backoff_grows_and_skips_the_final_wait(tmp_path, monkeypatch):
    path = tmp_path / "parts.csv"
    path.write_text("ID\n", encoding="utf-8")
    sleeps = []

    def always_locked(*_args, **_kwargs):
        raise PermissionError("file is in use")

    monkeypatch.setattr(file_access, "open", always_locked, raising=False)
    monkeypatch.setattr(file_access.time, "sleep", sleeps.append)

    assert file_access._open_with_retries(path, 3, 0.15) is None
    assert sleeps == pytest.approx([0.15, 0.30])
