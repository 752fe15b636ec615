"""
Tests for the CLI interface.
"""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from ai_chat_guard.cli.main import app, EXIT_CODE_PASS, EXIT_CODE_FAIL
from ai_chat_guard.config.loader import AssistantConfig
from ai_chat_guard.sdk.local_assistant import LocalAssistant
from ai_chat_guard.sdk.types import CompletionResult

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real credentials out of CLI tests."""
    for name in ("OPENROUTER_API_KEY", "SITE_NAME", "USE_MOCK_ASSISTANT",
                 "OPENROUTER_MODEL", "ASSISTANT_MODEL_POLICY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_create():
    """Mock the assistant factory."""
    with patch('ai_chat_guard.cli.main.create_assistant') as mock:
        yield mock


def _assistant_returning(result):
    assistant = MagicMock()
    assistant.complete = AsyncMock(return_value=result)
    return assistant


class TestCLI:
    """Test CLI commands."""

    def test_no_command_prints_help_hint(self):
        """Test running without a command."""
        result = runner.invoke(app, [])
        assert "Use --help" in result.output

    def test_ask_success(self, mock_create):
        """Test ask prints the reply, model and cost."""
        mock_create.return_value = _assistant_returning(
            CompletionResult("Paris is the capital.", "deepseek-chat", 0.0000006)
        )

        result = runner.invoke(app, ["ask", "Capital of France?"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Paris is the capital." in result.output
        assert "deepseek-chat" in result.output
        assert "$0.00000060" in result.output
        mock_create.return_value.complete.assert_awaited_once_with("Capital of France?")

    def test_ask_error_result_fails(self, mock_create):
        """Test an error result exits non-zero."""
        mock_create.return_value = _assistant_returning(
            CompletionResult("The assistant took too long to respond. Please try again.", "error", 0.0)
        )

        result = runner.invoke(app, ["ask", "Hello"])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "took too long" in result.output

    def test_ask_mock_and_model_flags(self, mock_create):
        """Test flags are applied to the configuration."""
        mock_create.return_value = _assistant_returning(
            CompletionResult("Hello!", "local-mock", 0.00001)
        )

        runner.invoke(app, ["ask", "Hello", "--mock", "--model", "anthropic/claude-3-opus"])

        config = mock_create.call_args[0][0]
        assert isinstance(config, AssistantConfig)
        assert config.force_local is True
        assert config.model == "anthropic/claude-3-opus"

    def test_ask_empty_message(self, mock_create):
        """Test a blank message is reported as an error."""
        mock_create.return_value = LocalAssistant(delay_window=(0, 0))

        result = runner.invoke(app, ["ask", "   "])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "cannot be empty" in result.output

    def test_ask_bad_config_file(self, mock_create):
        """Test a missing config file fails cleanly."""
        result = runner.invoke(app, ["ask", "Hello", "--config", "missing.yaml"])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Error loading configuration" in result.output
        mock_create.assert_not_called()

    def test_models_lists_cost_table(self):
        """Test the models command shows every model with its rate."""
        result = runner.invoke(app, ["models"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "deepseek-chat" in result.output
        assert "anthropic/claude-3-opus" in result.output
        assert "$15.00" in result.output

    def test_status_without_key(self):
        """Test status reports the local assistant when no key is set."""
        result = runner.invoke(app, ["status"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "local assistant" in result.output

    def test_status_with_key(self, monkeypatch):
        """Test status reports the live assistant for a valid key."""
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-v1-abc")
        monkeypatch.setenv("SITE_NAME", "TeddyBox Chat")

        result = runner.invoke(app, ["status"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "OpenRouter assistant for TeddyBox Chat" in result.output
