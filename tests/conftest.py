from __future__ import annotations

import pytest

from tests._fixtures.fakes import FakeGitHub, ScriptedBackend


@pytest.fixture
def github() -> FakeGitHub:
    """Provide an empty in-memory GitHub double."""
    return FakeGitHub()


@pytest.fixture
def backend() -> ScriptedBackend:
    """Provide a chat backend double with no scripted follow-up replies."""
    return ScriptedBackend()
