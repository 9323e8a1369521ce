#!/usr/bin/env python3
"""
CLI interface for the feature store.

Provides command-line interface to:
- Resolve a feature into its ordered dependency closure
- Show a single feature
- Search feature metadata by name pattern

Usage:
    python scripts/resolve_features.py --fixtures features.yaml resolve python-app
    python scripts/resolve_features.py --store-path ./feature_store resolve python-app --names-only
    python scripts/resolve_features.py --config featurestore.yaml show base-image --format json
    python scripts/resolve_features.py --store-path ./feature_store search --pattern '^py' --limit 10
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

# Add repository root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.featurestore.config import (
    ConfigManager,
    ResolverConfig,
    StoreConfig,
    build_resolver,
)
from src.featurestore.core import FeatureResolver, FeatureStoreError, SearchParams
from src.featurestore.utils.logging import get_logger

logger = get_logger("src.featurestore.cli")


def build_from_args(args) -> FeatureResolver:
    """Build a resolver from --config, --store-path or --fixtures."""
    if args.config:
        config = ConfigManager.load(args.config)
    elif args.store_path:
        config = ResolverConfig(store=StoreConfig(backend="parquet", path=args.store_path))
    elif args.fixtures:
        config = ResolverConfig(store=StoreConfig(backend="memory", fixtures=args.fixtures))
    else:
        raise FeatureStoreError("One of --config, --store-path or --fixtures is required")

    if args.max_workers:
        config.max_workers = args.max_workers
    if args.verbose:
        config.logging.level = "DEBUG"
    return build_resolver(config)


def resolve_command(args, resolver: FeatureResolver) -> int:
    """Execute resolve command."""
    if args.names_only:
        names = resolver.resolve_names(args.name)
        if args.format == "json":
            print(json.dumps(names, indent=2))
        else:
            for name in names:
                print(name)
        return 0

    features = resolver.resolve(args.name)
    if args.format == "json":
        print(json.dumps([f.to_dict() for f in features], indent=2))
    else:
        for position, feature in enumerate(features, start=1):
            print(f"# [{position}/{len(features)}] {feature.name}")
            print(feature.snippet)
    return 0


def show_command(args, resolver: FeatureResolver) -> int:
    """Execute show command."""
    feature = resolver.storage.get(args.name)
    if args.format == "json":
        print(json.dumps(feature.to_dict(), indent=2))
        return 0

    meta = feature.meta
    print(f"Name:         {meta.name}")
    print(f"Author:       {meta.author or 'unknown'}")
    print(f"Created:      {meta.created_at.isoformat()}")
    print(f"Updated:      {meta.updated_at.isoformat()}")
    print(f"Dependencies: {', '.join(meta.dependencies) or 'none'}")
    print()
    print(feature.snippet)
    return 0


def search_command(args, resolver: FeatureResolver) -> int:
    """Execute search command."""
    params = SearchParams(name=args.pattern, limit=args.limit, offset=args.offset)
    metas = resolver.storage.search_meta(params)

    if args.format == "json":
        print(json.dumps([m.to_dict() for m in metas], indent=2))
        return 0

    if not metas:
        print("No features found")
        return 0
    for meta in metas:
        deps = ", ".join(meta.dependencies) or "-"
        print(f"{meta.name:<40} {meta.author or '-':<20} {deps}")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Feature store dependency resolver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--config", type=Path, help="YAML configuration file")
    source.add_argument("--store-path", type=Path, help="Parquet feature store directory")
    source.add_argument("--fixtures", type=Path, help="YAML fixture file (memory backend)")
    parser.add_argument("--max-workers", type=int, help="Parallel content fetch threads")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Resolve command
    resolve_parser = subparsers.add_parser("resolve", help="Resolve a feature")
    resolve_parser.add_argument("name", help="Feature name")
    resolve_parser.add_argument("--names-only", action="store_true",
                                help="Print the order only (no content fetch)")
    resolve_parser.add_argument("--format", choices=["text", "json"], default="text")

    # Show command
    show_parser = subparsers.add_parser("show", help="Show a single feature")
    show_parser.add_argument("name", help="Feature name")
    show_parser.add_argument("--format", choices=["text", "json"], default="text")

    # Search command
    search_parser = subparsers.add_parser("search", help="Search feature metadata")
    search_parser.add_argument("--pattern", help="Regular expression for names")
    search_parser.add_argument("--limit", type=int, default=50)
    search_parser.add_argument("--offset", type=int, default=0)
    search_parser.add_argument("--format", choices=["text", "json"], default="text")

    return parser


COMMANDS = {
    "resolve": resolve_command,
    "show": show_command,
    "search": search_command,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        resolver = build_from_args(args)
        return COMMANDS[args.command](args, resolver)
    except FeatureStoreError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
