#!/usr/bin/env python3
"""
Tumor Growth Inhibition analysis for one preclinical study export.

This script:
1. Loads a CSV or Excel export (one row per animal x study day)
2. Consolidates rows into per-animal time series
3. Computes growth-rate TGI over time for every treatment group
4. Runs the simple-ratio endpoint analysis (t-test, Mann-Whitney U,
   Cohen's d, bootstrap CI)
5. Builds the per-animal waterfall at the endpoint
6. Writes tables and run metadata to the output directory

Usage:
    python Scripts/run_tgi_analysis.py data/study.csv --control Vehicle
    python Scripts/run_tgi_analysis.py data/study.xlsx --control Vehicle --endpoint-day 21
    python Scripts/run_tgi_analysis.py data/study.csv --config configs/study.yaml
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping

import pandas as pd

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tgi_utils.config import AnalysisConfig, save_analysis_metadata, set_all_seeds
from tgi_utils.consolidation import AnimalDataConsolidator
from tgi_utils.extraction import (
    available_groups,
    default_baseline_day,
    detect_tumor_volume_column,
    group_animals,
    study_days,
)
from tgi_utils.tgi import calculate_advanced_tgi, format_tgi_table, tgi_over_time
from tgi_utils.waterfall import summarize_waterfall, waterfall_analysis


def load_rows(path: Path) -> List[Dict[str, Any]]:
    """Read a CSV/TSV/Excel export into row dicts."""
    suffix = path.suffix.lower()
    if suffix in ('.xlsx', '.xls'):
        df = pd.read_excel(path)
    elif suffix in ('.tsv', '.txt'):
        df = pd.read_csv(path, sep='\t')
    else:
        df = pd.read_csv(path)
    return df.to_dict(orient='records')


def print_phase(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def run_analysis(rows: List[Mapping[str, Any]], config: AnalysisConfig) -> Dict[str, pd.DataFrame]:
    """
    Run all analyses on raw rows.

    Returns:
        Dict of table name -> DataFrame
    """
    print_phase("PHASE 1: Consolidating Data")
    consolidator = AnimalDataConsolidator(config.columns)
    animals = consolidator.consolidate(rows)
    print(f"  {len(animals)} animals, {consolidator.dropped_rows} rows dropped")

    parameter = config.parameter or detect_tumor_volume_column(rows, config.columns.tumor_volume)
    if parameter is None:
        raise ValueError(
            f"No tumor volume column found. Expected one of: {', '.join(config.columns.tumor_volume)}"
        )

    groups = available_groups(animals, config.group_field)
    if config.control_group not in groups:
        raise ValueError(f"Control group {config.control_group!r} not found. Available: {groups}")

    days = study_days(animals, parameter)
    if not days:
        raise ValueError(f"No study day has a numeric {parameter!r} value")
    baseline_day = config.baseline_day if config.baseline_day is not None else default_baseline_day(animals, parameter)
    endpoint_day = config.endpoint_day if config.endpoint_day is not None else days[-1]
    print(f"  Parameter: {parameter}")
    print(f"  Groups: {', '.join(groups)}")
    print(f"  Study days: {days} (baseline {baseline_day}, endpoint {endpoint_day})")

    print_phase("PHASE 2: TGI Over Time (growth-rate formula)")
    curves = tgi_over_time(
        animals,
        control_group=config.control_group,
        parameter=parameter,
        group_field=config.group_field,
        baseline_day=baseline_day,
        config=config.statistics
    )
    for group, points in curves.items():
        print(f"\n  {group} vs {config.control_group}")
        if points:
            print(format_tgi_table(points))
        else:
            print(f"    No timepoint with >= {config.statistics.min_group_size} matched animals per group")

    print_phase("PHASE 3: Endpoint Analysis (simple-ratio formula)")
    partition = group_animals(animals, config.group_field)
    treatments = {name: members for name, members in partition.items() if name != config.control_group}
    advanced = calculate_advanced_tgi(
        partition[config.control_group],
        treatments,
        days,
        parameter,
        config=config.statistics,
        seed=config.seed
    )
    endpoint = advanced.endpoint(endpoint_day)
    if endpoint is not None:
        for analysis in endpoint.treatments:
            print(f"  {analysis!r}")
    for summary in advanced.overall_analysis.values():
        print(f"  {summary}")

    print_phase("PHASE 4: Waterfall")
    entries = waterfall_analysis(
        animals,
        parameter,
        baseline_day=baseline_day,
        target_day=endpoint_day,
        mode='timepoint',
        group_field=config.group_field
    )
    for summary in summarize_waterfall(entries).values():
        print(f"  {summary!r}")

    return {
        'tgi_over_time': pd.DataFrame([p.to_dict() for points in curves.values() for p in points]),
        'endpoint_analysis': pd.DataFrame([
            dict(study_day=tp.study_day, **analysis.to_row())
            for tp in advanced.timepoints
            for analysis in tp.treatments
        ]),
        'waterfall': pd.DataFrame([e.to_dict() for e in entries]),
    }


def main():
    parser = argparse.ArgumentParser(
        description="Compute tumor growth inhibition statistics from a study export"
    )
    parser.add_argument("input", type=Path, help="CSV, TSV or Excel file")
    parser.add_argument("--config", type=Path, default=None, help="YAML analysis configuration")
    parser.add_argument("--control", type=str, default=None, help="Control group label")
    parser.add_argument("--group-field", type=str, default=None, help="Grouping field (default: group)")
    parser.add_argument("--parameter", type=str, default=None, help="Tumor volume column (default: detect)")
    parser.add_argument("--baseline-day", type=int, default=None, help="Baseline study day (default: earliest with a volume)")
    parser.add_argument("--endpoint-day", type=int, default=None, help="Endpoint study day (default: last)")
    parser.add_argument("--seed", type=int, default=None, help="Bootstrap seed")
    parser.add_argument("--output", type=Path, default=None, help="Output directory")
    parser.add_argument("--verbose", action="store_true", help="Log dropped rows and other details")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    config = AnalysisConfig.from_yaml(args.config) if args.config else AnalysisConfig()
    overrides = {
        'control_group': args.control,
        'group_field': args.group_field,
        'parameter': args.parameter,
        'baseline_day': args.baseline_day,
        'endpoint_day': args.endpoint_day,
        'seed': args.seed,
        'output_dir': str(args.output) if args.output else None,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(config, key, value)

    if config.control_group is None:
        parser.error("a control group is required (--control or control_group in --config)")
    if config.seed is not None:
        set_all_seeds(config.seed)

    rows = load_rows(args.input)
    print(f"Loaded {len(rows)} rows from {args.input}")

    try:
        tables = run_analysis(rows, config)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    output_dir = Path(config.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    for name, df in tables.items():
        df.to_csv(output_dir / f"{name}.csv", index=False)
        print(f"  Saved {len(df)} records to {name}.csv")

    metadata_path = save_analysis_metadata(config, str(output_dir), extra_info={'input': str(args.input)})
    print(f"  Saved metadata to {metadata_path}")
    print("\nAnalysis complete!")


if __name__ == "__main__":
    main()
