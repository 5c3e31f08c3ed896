#!/usr/bin/env python3
"""
Build the flattened LAPSE compendium from the four source tables.

Usage:
    python scripts/build_compendium.py data/ --output LAPSE_compendium.xlsx
    python scripts/build_compendium.py data/ --output fisheries.csv --domain "Fisheries"
"""
import argparse
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from lapse.config import load_config
from lapse.domain.filters import FilterState
from lapse.logging_config import get_logger, setup_logging
from lapse.services.explorer_service import LegislationExplorer


def main() -> int:
    parser = argparse.ArgumentParser(description='Join the LAPSE source tables and write the compendium')
    parser.add_argument('data_dir', help='Directory containing the four source tables')
    parser.add_argument('--output', '-o', default=None,
                        help='Output file (.xlsx or .csv); defaults to the configured file name')
    parser.add_argument('--jurisdiction', default='All', help='Only export this jurisdiction')
    parser.add_argument('--domain', default='All', help='Only export sections of this management domain')
    parser.add_argument('--search', default='', help='Only export sections containing this text')
    parser.add_argument('--dev-mode', action='store_true',
                        help='Enable developer mode logging')

    args = parser.parse_args()

    if args.dev_mode:
        os.environ['LAPSE_DEV_MODE'] = '1'
    setup_logging()
    logger = get_logger('build_compendium')

    config = load_config()
    output = Path(args.output or config.export.default_filename)
    fmt = output.suffix.lower().lstrip('.')

    explorer = LegislationExplorer(config)
    try:
        result = explorer.load_directory(args.data_dir)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Could not load source tables: {e}")
        return 1

    state = (
        FilterState()
        .with_change('jurisdiction', args.jurisdiction)
        .with_change('management_domain', args.domain)
        .with_change('search_term', args.search)
    )

    try:
        content = explorer.export(state, fmt)
    except ValueError as e:
        logger.error(str(e))
        return 1

    output.write_bytes(content)
    items = explorer.items(state)

    print("\n" + "=" * 72)
    print("COMPENDIUM SUMMARY")
    print("=" * 72)
    print(f"Paragraphs joined: {result.paragraph_count}")
    print(f"Items exported:    {len(items)}")
    print(f"Skipped:           {len(result.diagnostics)} (unresolved legislation)")
    print(f"Output:            {output}")
    print("=" * 72)
    return 0


if __name__ == '__main__':
    sys.exit(main())
