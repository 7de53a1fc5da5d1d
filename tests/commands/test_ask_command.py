# tests/commands/test_ask_command.py
"""Tests for the ask command."""

import json
import os
import tempfile

from oracle_rag.commands import ask

QUESTION = "How do I implement a grand slam offer for my startup?"


class TestAskCommand:
    """Tests for ask.ask()."""

    def test_ask_no_database(self) -> None:
        """Ask with no data directory returns an error instead of raising."""
        with tempfile.TemporaryDirectory() as tmpdir:
            result = ask.ask(question=QUESTION, data_dir=os.path.join(tmpdir, "nonexistent"))

            assert result.success is False
            assert "not found" in result.error.lower()
            assert result.query == QUESTION

    def test_ask_with_oracle(self, oracle) -> None:
        result = ask.ask_with_oracle(oracle, QUESTION)

        assert result.success is True
        assert result.query == QUESTION
        assert result.answer is None
        assert result.summary
        assert result.insights
        assert result.passages
        assert all(p.business_phase in ("startup", "all") for p in result.passages)
        assert result.quality_score is not None

    def test_payload_is_json_ready(self, oracle) -> None:
        result = ask.ask_with_oracle(oracle, QUESTION, candidates=2)

        payload = json.loads(json.dumps(result.payload))
        assert payload["query"] == QUESTION
        assert payload["classification"]["primary_intent"] == "implementation"
        assert payload["ranking"] is not None
        assert payload["search_errors"] == []
        assert len(payload["sources"]) == len(result.passages)

    def test_synthesize_without_llm_keeps_answer_empty(self, oracle) -> None:
        result = ask.ask_with_oracle(oracle, QUESTION, synthesize=True)

        assert result.success is True
        assert result.answer is None

    def test_blank_question_is_an_error(self, oracle) -> None:
        result = ask.ask_with_oracle(oracle, "   ")

        assert result.success is False
        assert result.error.startswith("Ask failed")
