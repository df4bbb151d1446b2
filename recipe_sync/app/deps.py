# recipe_sync/app/deps.py

from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client, create_client

from recipe_sync.app.config import Settings, get_settings
from recipe_sync.app.domain.errors import ConfigurationError
from recipe_sync.app.infra.db.base import PlaylistRepository, RecipeRepository
from recipe_sync.app.infra.db.supabase_catalog_repo import (
    SupabasePlaylistRepository,
    SupabaseRecipeRepository,
)
from recipe_sync.app.services.enrichment_finder import EnrichmentFinder
from recipe_sync.app.services.enrichment_processor import EnrichmentProcessor
from recipe_sync.app.services.enrichment_runner import EnrichmentRunner
from recipe_sync.app.services.playlist_connections import PlaylistConnectionService
from recipe_sync.app.services.playlist_sync import PlaylistSyncService
from recipe_sync.services.gemini_client import GeminiClient
from recipe_sync.services.ingredients import IngredientExtractor
from recipe_sync.services.transcripts import (
    HttpTranscriptSource,
    TranscriptSource,
    YouTubeCaptionTranscriptSource,
)
from recipe_sync.services.youtube_playlists import YouTubePlaylistSource

_client: Client | None = None


def get_supabase(settings: Settings = Depends(get_settings)) -> Client:
    global _client
    if _client is None:
        errors = settings.validate_store()
        if errors:
            raise ConfigurationError(errors)
        _client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    return _client


def get_playlist_repository(supa: Client = Depends(get_supabase)) -> PlaylistRepository:
    return SupabasePlaylistRepository(supa)


def get_recipe_repository(supa: Client = Depends(get_supabase)) -> RecipeRepository:
    return SupabaseRecipeRepository(supa)


def get_playlist_source(settings: Settings = Depends(get_settings)) -> YouTubePlaylistSource:
    return YouTubePlaylistSource(
        api_base=settings.YOUTUBE_API_BASE,
        timeout_seconds=settings.YOUTUBE_TIMEOUT_SECONDS,
        max_pages=settings.YOUTUBE_MAX_PAGES,
    )


def get_transcript_source(settings: Settings = Depends(get_settings)) -> TranscriptSource:
    if settings.TRANSCRIPT_PROVIDER == "youtube_transcript_api":
        return YouTubeCaptionTranscriptSource(
            languages=settings.TRANSCRIPT_LANGUAGES,
            timeout_seconds=settings.TRANSCRIPT_TIMEOUT_SECONDS,
        )
    return HttpTranscriptSource(
        api_url=settings.TRANSCRIPT_API_URL,
        timeout_seconds=settings.TRANSCRIPT_TIMEOUT_SECONDS,
    )


def get_ingredient_extractor(settings: Settings = Depends(get_settings)) -> IngredientExtractor:
    errors = settings.validate_gemini()
    if errors:
        raise ConfigurationError(errors)
    client = GeminiClient(
        api_key=settings.GEMINI_API_KEY,
        model_name=settings.GEMINI_MODEL,
        timeout_seconds=settings.GEMINI_TIMEOUT_SECONDS,
        temperature=settings.GEMINI_TEMPERATURE,
        max_output_tokens=settings.GEMINI_MAX_OUTPUT_TOKENS,
    )
    return IngredientExtractor(client, max_transcript_chars=settings.TRANSCRIPT_MAX_CHARS)


def get_sync_service(
    playlists: PlaylistRepository = Depends(get_playlist_repository),
    recipes: RecipeRepository = Depends(get_recipe_repository),
    source: YouTubePlaylistSource = Depends(get_playlist_source),
) -> PlaylistSyncService:
    return PlaylistSyncService(playlists, recipes, source)


def get_connection_service(
    playlists: PlaylistRepository = Depends(get_playlist_repository),
    source: YouTubePlaylistSource = Depends(get_playlist_source),
) -> PlaylistConnectionService:
    return PlaylistConnectionService(playlists, source)


def get_enrichment_finder(
    recipes: RecipeRepository = Depends(get_recipe_repository),
) -> EnrichmentFinder:
    return EnrichmentFinder(recipes)


def get_enrichment_processor(
    recipes: RecipeRepository = Depends(get_recipe_repository),
    transcripts: TranscriptSource = Depends(get_transcript_source),
    extractor: IngredientExtractor = Depends(get_ingredient_extractor),
    settings: Settings = Depends(get_settings),
) -> EnrichmentProcessor:
    return EnrichmentProcessor(
        recipes,
        transcripts,
        extractor,
        transcript_max_chars=settings.TRANSCRIPT_MAX_CHARS,
        default_batch_size=settings.ENRICH_DEFAULT_BATCH_SIZE,
    )


def get_enrichment_runner(
    finder: EnrichmentFinder = Depends(get_enrichment_finder),
    processor: EnrichmentProcessor = Depends(get_enrichment_processor),
    settings: Settings = Depends(get_settings),
) -> EnrichmentRunner:
    return EnrichmentRunner(finder, processor, batch_delay_seconds=settings.ENRICH_BATCH_DELAY_SECONDS)


auth_scheme = HTTPBearer(auto_error=False)


def get_youtube_token(
    cred: HTTPAuthorizationCredentials | None = Depends(auth_scheme),
) -> str:
    """YouTube OAuth access token sent as `Authorization: Bearer <token>`."""
    if cred is None or cred.scheme.lower() != "bearer" or not cred.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing YouTube token")
    return cred.credentials
