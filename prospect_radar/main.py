#!/usr/bin/env python3
"""
Prospecting Radar

Entry point for the command-line run: loads news, builds the
news x offering relevance matrix, and reports white space and
high-potential opportunities.

Usage:
    python -m prospect_radar.main --fetch               # Fetch RSS feeds
    python -m prospect_radar.main --fetch --quick       # Quick mode (fewer feeds)
    python -m prospect_radar.main --news-file news.json # Analyze saved news
    python -m prospect_radar.main --offline             # Keyword oracle, no LLM calls
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from .company.profile import load_target_company
from .config.settings import settings
from .contacts.importer import import_contacts
from .contacts.scorer import rank_contacts
from .exceptions import ImportFormatError, ProspectRadarError
from .matrix.builder import RelevanceMatrixBuilder, mark_analyzed
from .matrix.views import group_by_news
from .news.fetcher import NewsFetcher
from .news.normalizer import normalize_batch
from .offerings.taxonomy import load_taxonomy
from .opportunities.deriver import find_white_space, group_engagements, new_opportunities
from .opportunities.models import Engagement, EngagementStatus
from .oracle.keyword_oracle import default_oracle
from .output.formatter import OutputFormatter, RunReport
from .utils.cost_tracker import PipelineCosts


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Match company news against consulting offerings"
    )

    parser.add_argument(
        "--news-file",
        type=Path,
        help="JSON file with a list of news records (title, pubDate, categories, description, link)",
    )

    parser.add_argument(
        "--fetch",
        action="store_true",
        help="Fetch news from the configured RSS feeds",
    )

    parser.add_argument(
        "--quick",
        action="store_true",
        help="Quick mode: fewer feeds, faster execution",
    )

    parser.add_argument(
        "--days-back",
        type=int,
        default=settings.news_days_back,
        help="Drop feed entries older than this many days (default: keep all)",
    )

    parser.add_argument(
        "--offline",
        action="store_true",
        help="Use the keyword oracle instead of the LLM",
    )

    parser.add_argument(
        "--max-articles",
        type=int,
        default=settings.max_articles_to_analyze,
        help=f"News items to analyze (default: {settings.max_articles_to_analyze})",
    )

    parser.add_argument(
        "--engagements",
        type=Path,
        help="JSON file with existing engagements (offering, status, estimated_value...)",
    )

    parser.add_argument(
        "--contacts",
        type=Path,
        help="CSV or JSON contact export to rank against the new opportunities",
    )

    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Print results only, do not write the output directory",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Debug logging",
    )

    return parser.parse_args(argv)


def load_engagements(path: Path) -> list[Engagement]:
    """Read engagements from a JSON list of objects."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ProspectRadarError(f"{path.name} must contain a list of engagements")
    return [
        Engagement(
            offering=entry.get("offering", ""),
            status=EngagementStatus.from_label(entry.get("status")),
            estimated_value=float(entry.get("estimated_value") or 0),
            name=entry.get("name", ""),
            close_date=entry.get("close_date", ""),
        )
        for entry in data
    ]


async def load_news_records(args: argparse.Namespace) -> list:
    """Collect raw records from the news file and/or the feeds."""
    records = []
    if args.news_file:
        with open(args.news_file, encoding="utf-8") as f:
            data = json.load(f)
        records.extend(dict(r, source=r.get("source", "file")) for r in data)
        print(f"   Loaded {len(data)} records from {args.news_file}")

    if args.fetch:
        fetcher = NewsFetcher(days_back=args.days_back, quick_mode=args.quick)
        fetched = await fetcher.fetch_all()
        print(f"   Fetched {len(fetched)} records from {len(fetcher.feeds)} feeds")
        records.extend(fetched)

    return records


async def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if not args.news_file and not args.fetch:
        print("❌ Nothing to analyze: pass --news-file and/or --fetch")
        return 1

    taxonomy = load_taxonomy()
    company = load_target_company()
    costs = PipelineCosts()
    oracle = default_oracle(company, use_llm=not args.offline, costs=costs)

    print("=" * 60)
    print(f"🚀 Prospecting Radar: {company.name}")
    print("=" * 60)
    print(f"Oracle: {oracle.name}")
    print(f"Service lines: {len(taxonomy.service_lines)}")

    print("\n📰 Loading news...")
    records = await load_news_records(args)
    items = normalize_batch(records, company=company)
    print(f"   {len(items)} relevant news items")
    if not items:
        print("   No news about the target company. Try --fetch or another news file")
        return 0

    print(f"\n🔍 Judging {min(len(items), args.max_articles)} items against the taxonomy...")
    builder = RelevanceMatrixBuilder(oracle, max_articles=args.max_articles)
    matrix = await builder.build_matrix(items, taxonomy)
    items = mark_analyzed(items, args.max_articles)
    print(f"   {len(matrix)} matrix rows")

    engagements = load_engagements(args.engagements) if args.engagements else []
    by_offering = group_engagements(engagements, taxonomy)
    white_space = find_white_space(matrix, taxonomy, by_offering)
    opportunities = new_opportunities(matrix, by_offering)
    groups = group_by_news(matrix, by_offering)

    print("\n" + "=" * 60)
    print("🎯 WHITE SPACE")
    print("=" * 60)
    if white_space:
        for offering in white_space:
            print(f"   • {offering} ({taxonomy.service_line_of(offering)})")
    else:
        print("   Every offering in the news already has an engagement")

    print("\n🔥 High-potential news:")
    hot = [g for g in groups if g.high_potential]
    for group in hot:
        print(f"   [{group.news_date}] {group.news[:70]}")
        for offer in group.offers:
            if offer.high_potential:
                print(f"      → {offer.category}: {offer.detail}")
    if not hot:
        print("   None")

    if args.contacts:
        try:
            contacts = import_contacts(args.contacts, company.name)
        except ImportFormatError as e:
            print(f"\n❌ {e}")
            return 1
        ranked = rank_contacts(contacts, opportunities, company)
        print(f"\n👥 {len(ranked)} contacts to approach (of {len(contacts)}):")
        for contact in ranked:
            print(f"   {contact.relevance_score:.0%}  {contact.full_name}, {contact.role}")

    if costs.steps:
        print(f"\n💰 LLM cost: ${costs.total_cost():.4f}")

    if not args.no_save:
        report = RunReport(
            matrix=matrix,
            groups=groups,
            white_space=white_space,
            opportunities=opportunities,
            oracle_name=oracle.name,
            news_count=sum(1 for i in items if i.analyzed),
            costs=costs,
        )
        run_dir = OutputFormatter(settings.output_dir).save_run(report)
        print(f"\n📁 Output saved to: {run_dir}")

    return 0


def cli() -> None:
    """CLI entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
