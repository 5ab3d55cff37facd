"""Run the moment pipeline over a fixture file or live Hacker News and print a report.

Usage:
    python scripts/qualify_fixture.py tests/fixtures/sample_items.json
    python scripts/qualify_fixture.py --live [--limit 30]
    python scripts/qualify_fixture.py tests/fixtures/sample_items.json --json
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from moment_engine.collectors.hn import HackerNewsCollector
from moment_engine.collectors.static import StaticCollector
from moment_engine.config.settings import Settings
from moment_engine.models.timestamps import to_epoch_ms
from moment_engine.observability.logger import configure_logging
from moment_engine.pipeline.moment_pipeline import MomentPipeline, PipelineResult
from moment_engine.storage.memory_store import InMemoryMomentStore


def print_header(title: str) -> None:
    print(f"\n{'=' * 64}")
    print(f"  {title}")
    print(f"{'=' * 64}")


def print_report(result: PipelineResult) -> None:
    report = result.to_report()
    print_header("MOMENT RUN")
    print(f"  Trace:            {report.trace_id}")
    print(f"  Items:            {report.item_count}")
    print(f"  Clusters:         {report.cluster_count}")
    print(f"  Qualified:        {report.qualified_count}")
    print(f"  Failed sources:   {', '.join(report.failed_sources) or '-'}")
    print(f"  Latency:          {report.latency_ms:.1f}ms")

    for m in report.moments:
        verdict = "PASS" if m.passed else "FAIL"
        print_header(f"[{verdict}] {m.name}")
        print(f"  id:               {m.moment_id}")
        print(f"  sources:          {', '.join(m.sources)} ({m.signal_count} signals)")
        s = m.score
        print(
            f"  scores:           overall={s.overall:.3f} density={s.signal_density:.3f} "
            f"velocity={s.velocity:.3f} coherence={s.narrative_coherence:.3f} "
            f"legibility={s.cultural_legibility:.3f}"
        )
        if m.reasons:
            print(f"  reasons:          {', '.join(m.reasons)}")
        if m.maturity:
            print(f"  maturity:         {m.maturity}")
        print(
            f"  decision:         {m.decision_state} "
            f"({m.signal_strength}, {m.confidence_trajectory})"
        )
        print(f"  rationale:        {m.decision_rationale}")


def fixture_now(collector: StaticCollector) -> datetime | None:
    """Pin 'now' to the newest fixture item so old fixtures still look fresh."""
    stamps = [to_epoch_ms(i.created_at) for i in collector.items]
    stamps = [s for s in stamps if s is not None]
    if not stamps:
        return None
    return datetime.fromtimestamp(max(stamps) / 1000, tz=timezone.utc)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Qualify moments from a fixture or live HN")
    parser.add_argument("fixture", nargs="?", help="JSON file of raw items")
    parser.add_argument("--live", action="store_true", help="Collect from Hacker News instead")
    parser.add_argument("--limit", type=int, default=None, help="HN stories to hydrate")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument(
        "--wall-clock",
        action="store_true",
        help="Evaluate fixture timestamps against the real clock",
    )
    args = parser.parse_args()

    if not args.live and not args.fixture:
        parser.error("pass a fixture path or --live")

    settings = Settings()
    configure_logging(settings.log_level, settings.log_json)

    now = None
    if args.live:
        collectors = [
            HackerNewsCollector(
                base_url=settings.hn_base_url,
                limit=args.limit or settings.hn_limit,
                timeout=settings.source_timeout_seconds,
            )
        ]
    else:
        static = StaticCollector.from_json_file(args.fixture)
        collectors = [static]
        if not args.wall_clock:
            now = fixture_now(static)

    pipeline = MomentPipeline(collectors, InMemoryMomentStore(), settings)
    result = await pipeline.run(now=now)

    if args.json:
        print(result.to_report().model_dump_json(indent=2))
    else:
        print_report(result)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
