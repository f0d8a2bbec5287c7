import pytest

from fakes import FakeSessionFactory
from md_render.console import ConsoleLog


@pytest.fixture
def log() -> ConsoleLog:
    return ConsoleLog(debug=True)


@pytest.fixture
def session() -> FakeSessionFactory:
    return FakeSessionFactory()
