import pytest

from plugcfg.config.source import StaticConfigSource
from plugcfg.core.host import LoggingHost
from plugcfg.core.orchestrator import ConfigOrchestrator
from plugcfg.core.state import ConfigState
from plugcfg.plugins.loader import InMemoryResolver
from tests.helpers import CallRecorder


@pytest.fixture
def recorder():
    return CallRecorder()


@pytest.fixture
def resolver():
    return InMemoryResolver()


@pytest.fixture
def host():
    return LoggingHost()


@pytest.fixture
def state():
    return ConfigState()


@pytest.fixture
def make_orchestrator(resolver, host, state):
    """Build an orchestrator over an in-memory document and resolver."""

    def _make(document=None):
        return ConfigOrchestrator(StaticConfigSource(document), resolver, host, state)

    return _make
