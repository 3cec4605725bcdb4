"""Shared test fixtures for nouncli.

Provides a sample application definition, isolated config directories,
recording transports, output state management, and the Typer CLI runner.
These fixtures are automatically discovered by pytest and available to all
test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from nouncli.models import CLIConfig, TransportRequest
from nouncli.output import DisplayMode, OutputManager, reset_output, set_output
from nouncli.runner import CLIRunner, create_cli_runner


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Application definition fixtures
# ---------------------------------------------------------------------------


SHOP_NOUNS: dict[str, dict[str, str]] = {
    "Customer": {
        "name": "string",
        "email": "string",
        "phone": "string?",
    },
    "Order": {
        "total": "number",
        "status": "pending | paid | shipped",
        "customer": "->Customer",
        "note": "string?",
        "gift": "boolean?",
    },
    "LineItem": {
        "quantity": "number",
    },
}

SHOP_VERBS: dict[str, Any] = {
    "Order": {"pay": "handlers.pay", "ship": "handlers.ship"},
    "Customer": ["archive"],
}


@pytest.fixture
def shop_config() -> CLIConfig:
    """A small shop definition: customers, orders with verbs, line items."""
    return CLIConfig(
        cli_name="shop",
        version="1.2.3",
        description="Shop API command line",
        nouns=SHOP_NOUNS,
        verbs=SHOP_VERBS,
    )


@pytest.fixture
def runner(shop_config: CLIConfig) -> CLIRunner:
    return create_cli_runner(shop_config)


@pytest.fixture
def shop_definition_path() -> Path:
    """Path to the YAML rendition of the shop definition."""
    return FIXTURES_DIR / "shop.yaml"


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """A config directory under tmp_path. It does not exist yet."""
    return tmp_path / ".shop"


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at tmp_path and clear SHOP_* environment variables.

    Returns:
        The fake home directory.
    """
    monkeypatch.setenv("HOME", str(tmp_path))
    for var in ["SHOP_API_KEY", "SHOP_BASE_URL", "NOUNCLI_APP"]:
        monkeypatch.delenv(var, raising=False)
    return tmp_path


# ---------------------------------------------------------------------------
# Transport fixtures
# ---------------------------------------------------------------------------


class RecordingTransport:
    """Async transport double that records requests and replays a response.

    Set ``response`` to the value to return, or ``error`` to an exception
    to raise instead.
    """

    def __init__(self, response: Any = None, error: BaseException | None = None) -> None:
        self.response = response
        self.error = error
        self.requests: list[TransportRequest] = []

    async def __call__(self, request: TransportRequest) -> Any:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response

    @property
    def last(self) -> TransportRequest:
        return self.requests[-1]


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport(response={"id": "rec_1"})


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN, colourless OutputManager as the global output."""
    output = OutputManager(mode=DisplayMode.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner.

    Returns a CliRunner instance that captures stdout/stderr and
    provides a consistent interface for invoking Typer apps in tests.
    """
    from typer.testing import CliRunner

    return CliRunner()
