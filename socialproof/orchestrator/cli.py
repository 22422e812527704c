"""
SocialProof CLI
===============

Command-line interface operating on the JSON snapshot file.

Commands:
    collect      - Collect reviews for a platform (or ALL)
    summary      - Show the summary of a product
    feedback     - Record an operator correction of a summary
    reanalyze    - Force a new AI analysis of a product
    override     - Set or clear the operator summary of a product
    status       - Show provider / cache / collection status
    stats        - Show review counts per platform and status
    approve-all  - Approve pending reviews
    add-url      - Import a YouTube or TikTok review by URL

Usage:
    socialproof collect --platform YOUTUBE
    socialproof summary --product P001 --json
    socialproof feedback --product P001 --original "..." --corrected "..."
    socialproof add-url --url https://youtu.be/abc123 --product P001
"""

import argparse
import asyncio
import json
import logging
import sys

from ..collection.manual_import import UnsupportedUrlError
from ..config import get_settings
from ..reviews.repositories import DuplicateReviewError
from ..storage.json_store import JsonStore
from .logging_config import setup_logging
from .service import ALL_PLATFORMS, SocialProofService

logger = logging.getLogger(__name__)


def build_service(args) -> SocialProofService:
    settings = get_settings()
    store = JsonStore(
        args.data_file or settings.storage.data_file,
        feedback_limit=settings.ai.feedback_history_limit,
    )
    return SocialProofService.from_store(store, settings)


def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def cmd_collect(args):
    """Collect reviews."""
    service = build_service(args)
    result = asyncio.run(service.trigger_collection(args.platform, deadline_seconds=args.deadline))

    if args.json:
        print_json(result)
        return 0

    results = result if args.platform.upper() == ALL_PLATFORMS else {result["platform"]: result}
    print("=" * 60)
    print("COLLECTION RESULTS")
    print("=" * 60)
    for platform, outcome in results.items():
        icon = "✓" if outcome["success"] else "✗"
        line = f"  {icon} {platform}: {outcome['collected']} new reviews"
        if outcome.get("message"):
            line += f" ({outcome['message']})"
        print(line)
        if outcome.get("failed_products"):
            print(f"      failed: {', '.join(outcome['failed_products'])}")

    return 0 if any(o["success"] for o in results.values()) else 1


def cmd_summary(args):
    """Show a product summary."""
    service = build_service(args)
    summary = asyncio.run(service.get_summary(args.product, deadline_seconds=args.deadline))

    if args.json:
        print_json(summary.to_dict())
        return 0

    print("=" * 60)
    print(f"SUMMARY: {args.product}")
    print("=" * 60)
    print(f"Provider: {summary.provider}")
    print(f"Reviews: {summary.review_count}")
    print(f"Sentiment: {summary.sentiment.positive_ratio}% positive / {summary.sentiment.negative_ratio}% negative")
    print()
    print(summary.summary or "(no summary)")
    if summary.hashtags:
        print()
        print(" ".join(f"#{tag}" for tag in summary.hashtags))
    return 0


def cmd_feedback(args):
    """Record a summary correction."""
    service = build_service(args)
    try:
        service.record_feedback(args.product, args.original, args.corrected)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1
    print(f"Feedback recorded for {args.product}")
    return 0


def cmd_reanalyze(args):
    """Force AI re-analysis."""
    service = build_service(args)
    result = asyncio.run(service.trigger_reanalysis(args.product, deadline_seconds=args.deadline))
    if args.json or not result["success"]:
        print_json(result)
    else:
        data = result["data"]
        print(f"Re-analysis complete (version {data['version']})")
        print(data["summary"])
    return 0 if result["success"] else 1


def cmd_override(args):
    """Set or clear an override."""
    service = build_service(args)
    if args.clear:
        removed = service.clear_override(args.product)
        print("Override removed" if removed else "No override set")
        return 0

    if not args.summary:
        print("ERROR: --summary is required unless --clear is given")
        return 1

    sentiment = None
    if args.positive is not None:
        sentiment = {"positive_ratio": args.positive, "negative_ratio": 100 - args.positive}
    service.set_override(
        args.product,
        summary=args.summary,
        hashtags=args.hashtags or [],
        sentiment=sentiment,
        direction=args.direction,
    )
    print(f"Override saved for {args.product}")
    return 0


def cmd_status(args):
    """Show status."""
    service = build_service(args)
    status = service.get_status()
    if args.json:
        print_json(status)
        return 0

    print("=" * 60)
    print("SOCIALPROOF STATUS")
    print("=" * 60)
    print(f"AI provider: {status['provider']} (available: {status['available']}, model: {status['model'] or 'N/A'})")
    print(f"Analysis cache entries: {status['cache_size']}")
    print(f"Insights: {status['insights_count']}")
    print(f"Feedback records: {status['feedback_count']}")
    print(f"Overrides: {status['overrides_count']}")
    print(f"Reviews: {status['review_count']}")
    print()
    print("Platforms:")
    for platform, info in status["platforms"].items():
        mode = "manual only" if info["manual_only"] else ("configured" if info["configured"] else "not configured")
        print(f"  {platform}: {mode}")
    return 0


def cmd_stats(args):
    """Show collection statistics."""
    service = build_service(args)
    print_json(service.collection_stats())
    return 0


def cmd_approve_all(args):
    """Approve pending reviews."""
    service = build_service(args)
    count = service.approve_all(args.product)
    print(f"{count} reviews approved")
    return 0


def cmd_add_url(args):
    """Import a review by URL."""
    service = build_service(args)
    try:
        review = asyncio.run(service.add_review_from_url(args.url, args.product))
    except (UnsupportedUrlError, DuplicateReviewError) as e:
        print(f"ERROR: {e}")
        return 1

    print(f"Review {review.id} added: [{review.platform.value}] {review.title}")
    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="socialproof",
        description="SocialProof social review collection and summaries",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--data-file",
        help="JSON snapshot file (default: SOCIALPROOF_DATA_FILE)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # collect command
    collect_parser = subparsers.add_parser("collect", help="Collect reviews")
    collect_parser.add_argument(
        "--platform",
        default=ALL_PLATFORMS,
        help="YOUTUBE, INSTAGRAM, TIKTOK or ALL (default: ALL)",
    )
    collect_parser.add_argument("--deadline", type=float, help="Overall deadline in seconds")
    collect_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # summary command
    summary_parser = subparsers.add_parser("summary", help="Show a product summary")
    summary_parser.add_argument("--product", required=True, help="Product code")
    summary_parser.add_argument("--deadline", type=float, help="Deadline in seconds for the AI call")
    summary_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # feedback command
    feedback_parser = subparsers.add_parser("feedback", help="Record a summary correction")
    feedback_parser.add_argument("--product", required=True, help="Product code")
    feedback_parser.add_argument("--original", default="", help="Generated summary")
    feedback_parser.add_argument("--corrected", required=True, help="Corrected summary")

    # reanalyze command
    reanalyze_parser = subparsers.add_parser("reanalyze", help="Force AI re-analysis")
    reanalyze_parser.add_argument("--product", required=True, help="Product code")
    reanalyze_parser.add_argument("--deadline", type=float, help="Deadline in seconds for the AI call")
    reanalyze_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # override command
    override_parser = subparsers.add_parser("override", help="Set or clear an operator summary")
    override_parser.add_argument("--product", required=True, help="Product code")
    override_parser.add_argument("--summary", help="Summary text")
    override_parser.add_argument("--hashtags", nargs="*", help="Hashtags")
    override_parser.add_argument("--positive", type=int, help="Positive ratio (0-100)")
    override_parser.add_argument("--direction", help="Instruction for future AI analyses")
    override_parser.add_argument("--clear", action="store_true", help="Remove the override")

    # status command
    status_parser = subparsers.add_parser("status", help="Show status")
    status_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # stats command
    subparsers.add_parser("stats", help="Show collection statistics")

    # approve-all command
    approve_parser = subparsers.add_parser("approve-all", help="Approve pending reviews")
    approve_parser.add_argument("--product", help="Only reviews of this product")

    # add-url command
    add_url_parser = subparsers.add_parser("add-url", help="Import a review by URL")
    add_url_parser.add_argument("--url", required=True, help="YouTube or TikTok URL")
    add_url_parser.add_argument("--product", required=True, help="Product code")

    args = parser.parse_args()

    log_config = get_settings().logging
    setup_logging(
        level="DEBUG" if args.verbose else log_config.level,
        json_output=log_config.json_logs,
        log_file=log_config.log_file,
    )

    if args.command is None:
        parser.print_help()
        return 1

    commands = {
        "collect": cmd_collect,
        "summary": cmd_summary,
        "feedback": cmd_feedback,
        "reanalyze": cmd_reanalyze,
        "override": cmd_override,
        "status": cmd_status,
        "stats": cmd_stats,
        "approve-all": cmd_approve_all,
        "add-url": cmd_add_url,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
