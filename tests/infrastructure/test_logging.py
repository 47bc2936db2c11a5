from rdkit import Chem


def test_loggable_writes_history_entry():
    from molcharge.config import LOG_PATH
    from molcharge.infrastructure.logging import loggable

    @loggable
    def double_charges(values: list[int]) -> list[int]:
        """Double every formal charge."""
        return [2 * v for v in values]

    assert double_charges([1, -1]) == [2, -2]

    text = LOG_PATH.read_text(encoding="utf-8")
    assert "Function: double_charges()" in text
    assert "Description: Double every formal charge." in text
    assert "Outputs: [2, -2]" in text


def test_loggable_preserves_metadata():
    from molcharge.infrastructure.logging import loggable

    @loggable
    def some_tool(x):
        """Tool docstring."""
        return x

    assert some_tool.__name__ == "some_tool"
    assert some_tool.__doc__ == "Tool docstring."
    assert some_tool.__wrapped__(3) == 3


def test_fmt_compacts_values():
    from molcharge.infrastructure.logging import _fmt

    assert _fmt("x" * 200).endswith("...")
    assert len(_fmt("x" * 200)) == 100
    assert _fmt(list(range(50))) == "<list len=50>"
    assert _fmt(Chem.MolFromSmiles("CC(=O)[O-]")) == "<Mol CC(=O)[O-]>"


def test_data_root_env_override(monkeypatch, tmp_path):
    from molcharge.config import get_data_root, get_acid_base_file

    monkeypatch.setenv("MOLCHARGE_DATA_DIR", str(tmp_path / "custom"))
    assert get_data_root() == tmp_path / "custom"
    assert (tmp_path / "custom").is_dir()

    monkeypatch.delenv("MOLCHARGE_ACID_BASE_FILE", raising=False)
    assert get_acid_base_file().name == "acid_base_pairs.txt"
    monkeypatch.setenv("MOLCHARGE_ACID_BASE_FILE", str(tmp_path / "pairs.txt"))
    assert get_acid_base_file() == tmp_path / "pairs.txt"
