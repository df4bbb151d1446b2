import argparse
import json
import logging
import pathlib
import sys

from dotenv import find_dotenv, load_dotenv

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from recipe_sync.app import deps
from recipe_sync.app.config import get_settings


def run_sync(args: argparse.Namespace) -> None:
    settings = get_settings()
    supa = deps.get_supabase(settings)
    service = deps.get_sync_service(
        deps.get_playlist_repository(supa),
        deps.get_recipe_repository(supa),
        deps.get_playlist_source(settings),
    )
    result = service.sync_playlist(args.user_playlist_id, args.token)
    print("playlist:", result.playlist_title)
    print("status:", result.status.value)
    print("total_videos:", result.total_videos)
    print("global_recipes_created:", result.global_recipes_created)
    print("user_recipes_added:", result.user_recipes_added)
    print("already_in_playlist:", result.already_in_playlist)
    for error in result.errors:
        print("  error:", json.dumps(error.to_dict(), ensure_ascii=False))


def run_find(args: argparse.Namespace) -> None:
    settings = get_settings()
    supa = deps.get_supabase(settings)
    finder = deps.get_enrichment_finder(deps.get_recipe_repository(supa))
    report = finder.find(args.user_id)
    stats = report.stats
    print("needing enrichment:", stats.total_recipes_needing_enrichment)
    print("transcript only:", stats.needs_transcript_only)
    print("ingredients only:", stats.needs_ingredients_only)
    print("both:", stats.needs_both)
    print("playlists:", ", ".join(stats.playlists_involved) or "-")
    print("estimated minutes:", stats.estimated_processing_time_minutes)
    for candidate in report.recipes[: args.limit]:
        print(f"  {candidate.recipe_id}  {candidate.need.value:<11}  {candidate.title}")


def run_enrich(args: argparse.Namespace) -> None:
    settings = get_settings()
    supa = deps.get_supabase(settings)
    recipes = deps.get_recipe_repository(supa)
    processor = deps.get_enrichment_processor(
        recipes,
        deps.get_transcript_source(settings),
        deps.get_ingredient_extractor(settings),
        settings,
    )
    runner = deps.get_enrichment_runner(deps.get_enrichment_finder(recipes), processor, settings)
    summary = runner.run(args.user_id, batch_size=args.batch_size, max_recipes=args.max_recipes)
    print("recipes_found:", summary.recipes_found)
    print("recipes_processed:", summary.recipes_processed)
    print("transcripts_added:", summary.transcripts_added)
    print("ingredients_added:", summary.ingredients_added)
    print("success_rate:", summary.success_rate)
    for error in summary.errors:
        print("  error:", json.dumps(error.to_dict(), ensure_ascii=False))


def main() -> None:
    parser = argparse.ArgumentParser(description="Run playlist sync or recipe enrichment by hand")
    parser.add_argument("--log-level", default="INFO")
    sub = parser.add_subparsers(dest="command", required=True)

    sync_parser = sub.add_parser("sync", help="Sync one connected playlist")
    sync_parser.add_argument("user_playlist_id")
    sync_parser.add_argument("--token", required=True, help="YouTube OAuth access token")
    sync_parser.set_defaults(func=run_sync)

    find_parser = sub.add_parser("find", help="List recipes missing transcript or ingredients")
    find_parser.add_argument("user_id")
    find_parser.add_argument("--limit", type=int, default=20)
    find_parser.set_defaults(func=run_find)

    enrich_parser = sub.add_parser("enrich", help="Find and enrich recipes in batches")
    enrich_parser.add_argument("user_id")
    enrich_parser.add_argument("--batch-size", type=int, default=3)
    enrich_parser.add_argument("--max-recipes", type=int, default=15)
    enrich_parser.set_defaults(func=run_enrich)

    args = parser.parse_args()

    env_path = find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(dotenv_path=env_path)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    args.func(args)


if __name__ == "__main__":
    main()
