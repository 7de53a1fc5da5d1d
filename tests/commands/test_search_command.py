# tests/commands/test_search_command.py
"""Tests for the search command."""

import os
import tempfile

from oracle_rag.commands import search


class TestSearchCommand:
    """Tests for search.search()."""

    def test_search_no_database(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            result = search.search(
                query="lead magnets", data_dir=os.path.join(tmpdir, "nonexistent")
            )

            assert result.success is False
            assert "Data directory not found" in result.error

    def test_load_oracle_reports_config_errors(self, tmp_path) -> None:
        path = tmp_path / "oracle.yaml"
        path.write_text("storage: s3\n", encoding="utf-8")

        error = search.load_oracle(config_path=path)

        assert isinstance(error, str)
        assert error.startswith("Unknown storage 's3'.")

    def test_search_with_oracle(self, oracle) -> None:
        result = search.search_with_oracle(oracle, "grand slam offer pricing")

        assert result.success is True
        assert result.method == oracle.settings.search_method
        assert result.passages
        scores = [p.score for p in result.passages]
        assert scores == sorted(scores, reverse=True)

    def test_k_limits_passages(self, oracle) -> None:
        result = search.search_with_oracle(oracle, "grand slam offer pricing", k=1)

        assert result.success is True
        assert len(result.passages) == 1

    def test_method_override(self, oracle) -> None:
        result = search.search_with_oracle(oracle, "grand slam offer", method="semantic")

        assert result.method == "semantic"

    def test_unknown_method_is_an_error(self, oracle) -> None:
        result = search.search_with_oracle(oracle, "grand slam offer", method="telepathy")

        assert result.success is False
        assert result.error.startswith("Search failed")
