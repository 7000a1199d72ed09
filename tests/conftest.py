import pytest
from click.testing import CliRunner

from md_editor.input_events import InputEventProcessor


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def processor() -> InputEventProcessor:
    """Provides an input processor with a fresh history."""
    return InputEventProcessor()
