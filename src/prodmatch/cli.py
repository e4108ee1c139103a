"""CLI tool for product name normalization and catalog resolution."""

from __future__ import annotations

import argparse
from collections import Counter

import structlog

from prodmatch.config import MatchConfig
from prodmatch.io import read_catalog, read_mentions, write_resolutions
from prodmatch.logging import configure_logging
from prodmatch.matcher import Matcher
from prodmatch.model_numbers import extract_model_number
from prodmatch.normalize import normalize, strip_variants
from prodmatch.tokens import tokenize
from prodmatch.types import Resolution


def cmd_normalize(args: argparse.Namespace) -> None:
    for name in args.names:
        normalized = normalize(name)
        tokens = sorted(tokenize(normalized))
        model = extract_model_number(strip_variants(name))
        print(f"{name}")
        print(f"  normalized: {normalized!r}")
        print(f"  tokens:     {', '.join(tokens) if tokens else '-'}")
        print(f"  model:      {model or '-'}")


def cmd_match(args: argparse.Namespace) -> None:
    log = structlog.get_logger()
    log.info("load_files_start", catalog=args.catalog, mentions=args.mentions)
    catalog = read_catalog(args.catalog)
    mentions = read_mentions(args.mentions)
    log.info("files_loaded", catalog_count=len(catalog), mention_count=len(mentions))

    config = MatchConfig(excluded_brand_fallback=not args.no_brand_fallback)
    matcher = Matcher(catalog, config)
    results = matcher.match_all(mentions)

    if args.show:
        _show_resolutions(results)

    _print_summary(results)
    _print_stats(matcher)
    write_resolutions(results, args.output)
    print(f"\nSaved to: {args.output}")


def _show_resolutions(results: list[Resolution]) -> None:
    print("\n--- Resolutions ---")
    for r in results:
        if r.decision == "NEW":
            print(f"  [NEW]   {r.mention.name}")
        else:
            print(
                f"  [{r.decision:<5}] {r.mention.name} -> {r.candidate.name} "
                f"({r.score:.3f}; {'; '.join(r.reasons)})"
            )


def _print_summary(results: list[Resolution]) -> None:
    counts = Counter(r.decision for r in results)
    total = len(results)
    print("\n--- Summary ---")
    for decision in ("EXACT", "FUZZY", "NEW"):
        n = counts.get(decision, 0)
        pct = (n / total * 100) if total else 0.0
        print(f"  {decision:<6} {n:>6}  ({pct:.1f}%)")
    print(f"  {'TOTAL':<6} {total:>6}")


def _print_stats(matcher: Matcher) -> None:
    s = matcher.stats
    print("\n--- Matcher stats ---")
    print(f"  catalog size:       {s.catalog_size}")
    print(f"  comparisons:        {s.comparisons}")
    print(f"  truncated pools:    {s.truncated}")
    print(f"  empty normalized:   {s.empty_normalized}")
    print(f"  brand fallbacks:    {s.brand_fallbacks}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prodmatch",
        description="Product identity resolution for free-text product mentions",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="DEBUG, INFO, WARNING or ERROR (default: $LOG_LEVEL or INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_norm = sub.add_parser("normalize", help="Show normalized form, tokens and model number")
    p_norm.add_argument("names", nargs="+", help="Raw product names")
    p_norm.set_defaults(func=cmd_normalize)

    p_match = sub.add_parser("match", help="Resolve mentions against a catalog")
    p_match.add_argument("--catalog", required=True, help="Catalog CSV/JSONL")
    p_match.add_argument("--mentions", required=True, help="Mentions CSV/JSONL")
    p_match.add_argument("--output", required=True, help="Output CSV/JSONL")
    p_match.add_argument("--show", action="store_true", help="Print every resolution")
    p_match.add_argument(
        "--no-brand-fallback",
        action="store_true",
        help="Skip the same-brand pass for brands sold outside marketplaces",
    )
    p_match.set_defaults(func=cmd_match)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    args.func(args)


if __name__ == "__main__":
    main()
