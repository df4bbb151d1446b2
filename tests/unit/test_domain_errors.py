from __future__ import annotations

import pytest

from recipe_sync.app.domain.errors import (
    CatalogRepositoryError,
    ConfigurationError,
    DuplicateRecordError,
    PlaylistNotFoundError,
    PlaylistSyncDisabledError,
    RecipeNotFoundError,
    RecipeSyncError,
)


class TestRecipeSyncError:
    def test_base_exception(self) -> None:
        error = RecipeSyncError("Base error")
        assert str(error) == "Base error"
        assert isinstance(error, Exception)


class TestPlaylistNotFoundError:
    def test_includes_playlist_id(self) -> None:
        error = PlaylistNotFoundError("playlist-123")
        assert "playlist-123" in str(error)
        assert error.user_playlist_id == "playlist-123"


class TestPlaylistSyncDisabledError:
    def test_includes_playlist_id(self) -> None:
        error = PlaylistSyncDisabledError("playlist-9")
        assert "disabled" in str(error)
        assert error.user_playlist_id == "playlist-9"


class TestRecipeNotFoundError:
    def test_includes_recipe_id(self) -> None:
        error = RecipeNotFoundError("recipe-1")
        assert "recipe-1" in str(error)
        assert error.recipe_id == "recipe-1"


class TestCatalogRepositoryError:
    def test_includes_operation_and_reason(self) -> None:
        error = CatalogRepositoryError("insert_recipe", "Connection refused")
        assert "insert_recipe" in str(error)
        assert "Connection refused" in str(error)
        assert error.operation == "insert_recipe"
        assert error.reason == "Connection refused"


class TestDuplicateRecordError:
    def test_is_repository_error(self) -> None:
        error = DuplicateRecordError("insert_user_recipe", "duplicate key value")
        assert isinstance(error, CatalogRepositoryError)
        assert error.operation == "insert_user_recipe"


class TestConfigurationError:
    def test_lists_every_error(self) -> None:
        error = ConfigurationError(["SUPABASE_URL is required", "GEMINI_API_KEY is required"])
        assert "SUPABASE_URL" in str(error)
        assert "GEMINI_API_KEY" in str(error)
        assert len(error.errors) == 2


class TestErrorHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            PlaylistNotFoundError("p"),
            PlaylistSyncDisabledError("p"),
            RecipeNotFoundError("r"),
            CatalogRepositoryError("op", "reason"),
            DuplicateRecordError("op", "reason"),
            ConfigurationError(["missing"]),
        ],
    )
    def test_all_inherit_from_base(self, error: Exception) -> None:
        assert isinstance(error, RecipeSyncError)

    def test_can_catch_repository_errors_together(self) -> None:
        with pytest.raises(CatalogRepositoryError):
            raise DuplicateRecordError("insert_recipe", "duplicate key value")
