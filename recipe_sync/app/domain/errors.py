from __future__ import annotations


class RecipeSyncError(Exception):
    pass


class PlaylistNotFoundError(RecipeSyncError):
    def __init__(self, user_playlist_id: str):
        super().__init__(f"Playlist not found: {user_playlist_id}")
        self.user_playlist_id = user_playlist_id


class PlaylistSyncDisabledError(RecipeSyncError):
    def __init__(self, user_playlist_id: str):
        super().__init__(f"Sync is disabled for playlist: {user_playlist_id}")
        self.user_playlist_id = user_playlist_id


class RecipeNotFoundError(RecipeSyncError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class CatalogRepositoryError(RecipeSyncError):
    def __init__(self, operation: str, reason: str):
        super().__init__(f"Catalog repository error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason


class DuplicateRecordError(CatalogRepositoryError):
    """A unique constraint rejected the write; another run got there first."""


class ConfigurationError(RecipeSyncError):
    def __init__(self, errors: list[str]):
        super().__init__(f"Configuration errors: {', '.join(errors)}")
        self.errors = errors
