import json
import pytest
import pandas as pd
from pathlib import Path


def test_store_load_resource(session_workdir):
    from molcharge.infrastructure.resources import _store_resource, _load_resource

    data = {"a": 1, "b": 2}
    filename = _store_resource(data, session_workdir / "test_manifest.json", "store_resource_test_data", "Test data storage", "json")
    loaded_data = _load_resource(session_workdir / "test_manifest.json", filename)

    assert data == loaded_data
    assert filename.startswith("store_resource_test_data_json_")


def test_store_load_csv_resource(session_workdir):
    from molcharge.infrastructure.resources import _store_resource, _load_resource

    df = pd.DataFrame({"smiles": ["CCO", "CC(=O)[O-]"]})
    filename = _store_resource(df, session_workdir / "test_manifest.json", "charges", "Test csv storage", "csv")
    loaded = _load_resource(session_workdir / "test_manifest.json", filename)

    assert loaded["smiles"].tolist() == ["CCO", "CC(=O)[O-]"]


def test_store_resource_records_manifest_entry(session_workdir):
    from molcharge.infrastructure.resources import _store_resource, read_project_manifest

    filename = _store_resource({"x": 1}, session_workdir / "test_manifest.json", "tracked", "Tracked data", "json")
    manifest = read_project_manifest(session_workdir / "test_manifest.json")

    entry = [r for r in manifest["resources"] if r["filename"] == filename][0]
    assert entry["type_tag"] == "json"
    assert entry["explanation"] == "Tracked data"
    assert entry["parent_function_name"] == "test_store_resource_records_manifest_entry"


def test_store_resource_unsupported_type(session_workdir):
    from molcharge.infrastructure.resources import _store_resource

    with pytest.raises(ValueError, match="Unsupported resource type"):
        _store_resource({}, session_workdir / "test_manifest.json", "bad", "Bad type", "parquet")


def test_load_resource_errors(session_workdir):
    from molcharge.infrastructure.resources import _load_resource

    with pytest.raises(ValueError):
        _load_resource(session_workdir / "test_manifest.json", "nounderscores.csv")
    with pytest.raises(ValueError, match="Unknown resource type"):
        _load_resource(session_workdir / "test_manifest.json", "data_xlsx_ABCDEF12.xlsx")
    with pytest.raises(FileNotFoundError):
        _load_resource(session_workdir / "test_manifest.json", "missing_csv_ABCDEF12.csv")


def test_create_project_manifest(session_workdir):
    from molcharge.infrastructure.resources import create_project_manifest

    manifest = create_project_manifest(str(session_workdir), "test_project")

    assert manifest["project_name"] == "test_project"
    assert "created_at" in manifest
    assert manifest["resources"] == []
    assert (session_workdir / "test_project_manifest.json").exists()

    with pytest.raises(FileExistsError):
        create_project_manifest(str(session_workdir), "test_project")


def test_add_to_project_manifest(session_workdir):
    from molcharge.infrastructure.resources import create_project_manifest, add_to_project_manifest, read_project_manifest

    manifest_path = str(session_workdir / "add_test_manifest.json")
    create_project_manifest(str(session_workdir), "add_test")

    add_to_project_manifest(manifest_path, "test_file_csv_12345678.csv", "csv", "Test CSV file")

    manifest = read_project_manifest(manifest_path)
    assert len(manifest["resources"]) == 1
    assert manifest["resources"][0]["filename"] == "test_file_csv_12345678.csv"
    assert manifest["resources"][0]["type_tag"] == "csv"


def test_missing_manifest(tmp_path):
    from molcharge.infrastructure.resources import read_project_manifest

    with pytest.raises(FileNotFoundError, match="create_project_manifest"):
        read_project_manifest(str(tmp_path / "nope_manifest.json"))


def test_supported_resource_types():
    from molcharge.infrastructure.resources import get_supported_resource_types

    assert set(get_supported_resource_types()) == {"csv", "json"}
