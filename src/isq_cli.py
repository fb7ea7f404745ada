#!/usr/bin/env python3
"""
Command-line interface for Stage 3 ISQ reconciliation.

Reads a Stage 1 and a Stage 2 JSON record, reconciles their specs, selects
buyer ISQs, and prints a summary. Optionally writes the result as JSON, a
review table on the console, or a comparison against a second Stage 1 record.
"""

import argparse
import json
import logging
import sys

from match_tables import resolve_tables
from option_matcher import self_test_option_matcher
from review_report import build_review_frame, compute_reconciliation_metrics
from spec_reconciler import BEST_PRIORITY, FIRST_MATCH, compare_spec_sets, run_stage3
from stage_inputs import load_stage_record, specs_from_stage1

logger = logging.getLogger(__name__)


def _print_result(result) -> None:
    print("=" * 60)
    print("Stage 3 Reconciliation")
    print("=" * 60)
    print(f"Common specs: {len(result.common_specs)}")
    for spec in result.common_specs:
        opts = ', '.join(spec.options) if spec.options else '(no common options)'
        print(f"  [{spec.tier}] {spec.name} <-> {spec.target_name}: {opts}")
    print(f"\nBuyer ISQs: {len(result.buyer_isqs)}")
    for isq in result.buyer_isqs:
        print(f"  [{isq.tier}] {isq.name} (score {isq.score}): {', '.join(isq.options)}")


def _print_comparison(comparison) -> None:
    print("\n" + "=" * 60)
    print("Stage 1 Comparison")
    print("=" * 60)
    print(f"Common specs: {len(comparison.common_specs)}")
    for spec in comparison.common_specs:
        print(f"  {spec.left_name} <-> {spec.right_name}")
        print(f"    common: {', '.join(spec.common_options) or '-'}")
        print(f"    left only: {', '.join(spec.left_unique_options) or '-'}")
        print(f"    right only: {', '.join(spec.right_unique_options) or '-'}")
    print(f"Left-only specs: {', '.join(s.name for s in comparison.left_unique_specs) or '-'}")
    print(f"Right-only specs: {', '.join(s.name for s in comparison.right_unique_specs) or '-'}")
    for name, cands in comparison.near_misses.items():
        shown = ', '.join(f"{c} ({score})" for c, score in cands)
        print(f"  near miss for {name}: {shown}")


def run_self_test() -> int:
    failures = self_test_option_matcher()
    if failures:
        print(f"Self-test FAILED ({len(failures)} failures):")
        for failure in failures:
            print(f"  - {failure}")
        return 1
    print("Self-test passed")
    return 0


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Reconcile Stage 1 and Stage 2 specifications into common specs and buyer ISQs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Reconcile and print a summary
  isq-reconcile --stage1 stage1.json --stage2 stage2.json

  # Prefer config/key specs when several Stage 2 specs match, save JSON
  isq-reconcile --stage1 stage1.json --stage2 stage2.json --policy best --output stage3.json

  # Custom vocabulary and a review table
  isq-reconcile --stage1 stage1.json --stage2 stage2.json --tables tables.xlsx --report

  # Compare two Stage 1 runs
  isq-reconcile --stage1 run_a.json --compare run_b.json

  # Check the option matcher rules
  isq-reconcile --self-test
        """
    )
    parser.add_argument('--stage1', help='Stage 1 JSON record')
    parser.add_argument('--stage2', help='Stage 2 JSON record')
    parser.add_argument('--tables', help='Match table overrides (.json, .xlsx, .csv)')
    parser.add_argument('--policy', choices=[FIRST_MATCH, BEST_PRIORITY], default=FIRST_MATCH,
                        help='Pair selection policy (default: first)')
    parser.add_argument('--output', help='Write the Stage 3 result as JSON')
    parser.add_argument('--compare', help='Second Stage 1 record to compare against --stage1')
    parser.add_argument('--report', action='store_true', help='Print the review table and metrics')
    parser.add_argument('--self-test', action='store_true', help='Run the option matcher self-test and exit')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.self_test:
        return run_self_test()

    if not args.stage1:
        parser.error('--stage1 is required')
    if not args.stage2 and not args.compare:
        parser.error('one of --stage2 or --compare is required')

    try:
        tables = resolve_tables(args.tables)
    except (OSError, ValueError) as e:
        print(f"Error: could not load match tables: {e}")
        return 2

    logger.debug("Pair selection policy: %s", args.policy)
    stage1 = load_stage_record(args.stage1, 1)

    if args.stage2:
        stage2 = load_stage_record(args.stage2, 2)
        result = run_stage3(stage1, stage2, policy=args.policy, tables=tables)
        _print_result(result)

        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
            print(f"\nOutput: {args.output}")

        df = build_review_frame(result)
        metrics = compute_reconciliation_metrics(df)
        print(f"\nEmpty common sets: {metrics['empty_common_count']} ({metrics['empty_common_rate']}%)")
        print(f"Average common options: {metrics['avg_option_count']}")
        if args.report:
            print("\n" + "=" * 60)
            print("Review")
            print("=" * 60)
            if df.empty:
                print("(no common specs)")
            else:
                print(df.to_string(index=False))
            print(f"\nTier breakdown: {metrics['tier_breakdown']}")
            print(f"Buyer ISQs: {metrics['buyer_isq_count']}")

    if args.compare:
        other = load_stage_record(args.compare, 1)
        comparison = compare_spec_sets(specs_from_stage1(stage1), specs_from_stage1(other), tables)
        _print_comparison(comparison)

    return 0


if __name__ == '__main__':
    sys.exit(main())
