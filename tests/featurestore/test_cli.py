"""
Tests for the resolve_features command-line script.
"""

import json
import sys
import tempfile
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "scripts"))

from resolve_features import main  # noqa: E402

from src.featurestore.storage import ParquetStorage  # noqa: E402

from tests.fixtures.feature_graphs import DIAMOND_GRAPH, build_features  # noqa: E402

FIXTURE_FILE = str(Path(__file__).parent.parent / "fixtures" / "dockerfile_features.yaml")


@pytest.fixture
def store_path():
    """Parquet store holding the diamond graph."""
    with tempfile.TemporaryDirectory() as tmpdir:
        ParquetStorage.write(build_features(DIAMOND_GRAPH), Path(tmpdir))
        yield tmpdir


class TestResolveCommand:
    """Tests for the resolve sub-command."""

    def test_names_only(self, capsys):
        code = main(["--fixtures", FIXTURE_FILE, "resolve", "python-app", "--names-only"])

        assert code == 0
        assert capsys.readouterr().out.split() == ["base-image", "python", "node", "python-app"]

    def test_text_output_contains_snippets_in_order(self, capsys):
        code = main(["--fixtures", FIXTURE_FILE, "resolve", "python"])

        out = capsys.readouterr().out
        assert code == 0
        assert out.index("FROM debian:bookworm-slim") < out.index("apt-get install -y python3")

    def test_json_output(self, capsys, store_path):
        code = main(["--store-path", store_path, "--max-workers", "2",
                     "resolve", "app", "--format", "json"])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert [item["name"] for item in data] == ["base", "python", "pip", "node", "app"]
        assert data[0]["snippet"] == "# base"

    def test_missing_feature_exit_code(self, capsys):
        assert main(["--fixtures", FIXTURE_FILE, "resolve", "ghost"]) == 1


class TestOtherCommands:
    """Tests for show and search sub-commands."""

    def test_show_json(self, capsys):
        code = main(["--fixtures", FIXTURE_FILE, "show", "node", "--format", "json"])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["author"] == "web"
        assert data["dependencies"] == ["base-image"]

    def test_search_json(self, capsys, store_path):
        code = main(["--store-path", store_path, "search", "--pattern", "^p",
                     "--format", "json"])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert [item["name"] for item in data] == ["python", "pip"]

    def test_search_text_empty(self, capsys):
        code = main(["--fixtures", FIXTURE_FILE, "search", "--pattern", "^zzz"])

        assert code == 0
        assert "No features found" in capsys.readouterr().out

    def test_requires_source(self):
        assert main(["resolve", "python"]) == 1

    def test_requires_command(self):
        assert main(["--fixtures", FIXTURE_FILE]) == 1
