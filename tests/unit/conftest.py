from __future__ import annotations

import pytest

from tests.unit.fakes import FIXED_NOW, InMemoryPlaylistRepository, InMemoryRecipeRepository


@pytest.fixture
def playlist_repo() -> InMemoryPlaylistRepository:
    return InMemoryPlaylistRepository()


@pytest.fixture
def recipe_repo(playlist_repo: InMemoryPlaylistRepository) -> InMemoryRecipeRepository:
    return InMemoryRecipeRepository(playlist_repo)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW
