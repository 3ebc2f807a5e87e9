import csv

import openpyxl
import pytest

from config_store import ConfigStore
from schema.mapping import AppConfiguration
from tests.factories import make_mapping


@pytest.fixture
def write_csv(tmp_path):
    """Factory: write rows (lists of cells) to a CSV file and return its path."""
    def _write(rows, name="parts.csv"):
        path = tmp_path / name
        with open(path, "w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerows(rows)
        return path
    return _write


@pytest.fixture
def write_xlsx(tmp_path):
    """Factory: write {sheet name: rows} to a workbook and return its path."""
    def _write(sheets, name="parts.xlsx"):
        wb = openpyxl.Workbook()
        wb.remove(wb.active)
        for title, rows in sheets.items():
            ws = wb.create_sheet(title)
            for row in rows:
                ws.append(row)
        path = tmp_path / name
        wb.save(path)
        return path
    return _write


@pytest.fixture
def mapping_factory():
    return make_mapping


@pytest.fixture
def store_factory(tmp_path):
    """Factory: ConfigStore holding the given mappings (source files taken from them)."""
    def _store(mappings, symbol_prefix="", footprint_prefix=""):
        store = ConfigStore(tmp_path / "config.json")
        files = []
        for m in mappings:
            if m.source_file not in files:
                files.append(m.source_file)
        store.replace(AppConfiguration(source_files=files, sheet_mappings=mappings,
                                       symbol_prefix=symbol_prefix,
                                       footprint_prefix=footprint_prefix))
        return store
    return _store


@pytest.fixture
def client_factory():
    """Factory: Flask test client serving the given store."""
    from main import create_app

    def _client(store):
        app = create_app(store)
        app.config["TESTING"] = True
        return app.test_client()
    return _client
