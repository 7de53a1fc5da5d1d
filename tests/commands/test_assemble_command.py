# tests/commands/test_assemble_command.py
"""Tests for the assemble command."""

from oracle_rag.assembly import build_context
from oracle_rag.commands import assemble


class TestAssembleCommand:
    """Tests for assemble.assemble()."""

    def test_assemble_missing_file(self, tmp_path) -> None:
        config = tmp_path / "oracle.yaml"
        config.write_text("{}\n", encoding="utf-8")

        result = assemble.assemble(tmp_path / "missing.json", config_path=config)

        assert result.success is False
        assert "Cannot read" in result.error

    def test_assemble_invalid_context(self, tmp_path) -> None:
        config = tmp_path / "oracle.yaml"
        config.write_text("{}\n", encoding="utf-8")
        path = tmp_path / "context.json"
        path.write_text('{"original_query": "pricing"}', encoding="utf-8")

        result = assemble.assemble(path, config_path=config)

        assert result.success is False
        assert result.error.startswith("Invalid assembly context")

    def test_assemble_invalid_config(self, tmp_path) -> None:
        config = tmp_path / "oracle.yaml"
        config.write_text("settings:\n  conflict_policy: coin_flip\n", encoding="utf-8")

        result = assemble.assemble(tmp_path / "context.json", config_path=config)

        assert result.success is False
        assert result.error.startswith("Invalid configuration")

    def test_assemble_context_file(self, tmp_path, make_classification, make_enhanced) -> None:
        config = tmp_path / "oracle.yaml"
        config.write_text("{}\n", encoding="utf-8")
        context = build_context(
            make_classification(),
            [make_enhanced("a"), make_enhanced("b", source_type="video")],
        )
        path = tmp_path / "context.json"
        path.write_text(context.model_dump_json(), encoding="utf-8")

        result = assemble.assemble(path, config_path=config)

        assert result.success is True
        assert result.context_id == context.context_id
        assert result.organization == context.assembly_strategy.content_organization.kind
        assert result.summary
        assert 0.0 <= result.overall_quality <= 1.0
        assert result.payload["synthesized_content"]["executive_summary"] == result.summary

    def test_assemble_blank_query_is_an_error(self, tmp_path, make_classification) -> None:
        config = tmp_path / "oracle.yaml"
        config.write_text("{}\n", encoding="utf-8")
        context = build_context(make_classification(), [])
        path = tmp_path / "context.json"
        path.write_text(
            context.model_copy(update={"original_query": "  "}).model_dump_json(),
            encoding="utf-8",
        )

        result = assemble.assemble(path, config_path=config)

        assert result.success is False
        assert result.context_id == context.context_id
