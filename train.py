#!/usr/bin/env python3
"""
N-gram Text Generation Script

Build a word-level n-gram transition table from a directory of plain-text
documents (or NLTK's State of the Union addresses) and generate text from
it with terminal output.

Usage:
    python train.py --state-union --n 3 --generate 40 --seed 7
    python train.py --corpus-dir speeches/ --by-year --min-year 1950 --save table.json
    python train.py --load table.json --interactive
"""

import argparse
import logging
import sys

from rich.markup import escape

from wordchain.config import ModelConfig
from wordchain.errors import WordchainError
from wordchain.training import (
    build_model_cli, console, generate_cli, interactive_demo,
    load_corpus_cli, load_model_cli, setup_logging
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build an n-gram transition table and generate text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --state-union --n 2 --lowercase --generate 30
  %(prog)s --corpus-dir speeches/ --by-year --min-year 1950 --n 3
  %(prog)s --corpus-dir speeches/ --no-cross-documents --save table.json
  %(prog)s --load table.json --generate 50 --start "the people"
  %(prog)s --load table.json --interactive
        """
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument('--corpus-dir', type=str, default=None,
                        help='Directory of plain-text documents')
    source.add_argument('--state-union', action='store_true',
                        help="Use NLTK's State of the Union corpus")
    source.add_argument('--load', type=str, default=None,
                        help='Path to load a saved transition table')

    parser.add_argument('--config', type=str, default=None,
                        help='JSON file with default settings')
    parser.add_argument('-n', '--n', type=int, default=None,
                        help='Order of the n-gram model (default: 2)')
    parser.add_argument('--pattern', type=str, default=None,
                        help='Glob pattern for corpus files (default: *.txt)')
    parser.add_argument('--by-year', action='store_true',
                        help='Use the year in each file name as its document id')
    parser.add_argument('--lowercase', action='store_true',
                        help='Case-fold every token')
    parser.add_argument('--no-cross-documents', action='store_true',
                        help='Do not let n-grams span two documents')
    parser.add_argument('--min-year', type=int, default=None,
                        help='Drop documents before this year')
    parser.add_argument('--max-year', type=int, default=None,
                        help='Drop documents after this year')
    parser.add_argument('--skip-unreadable', action='store_true',
                        help='Skip documents that cannot be read')
    parser.add_argument('--workers', type=int, default=1,
                        help='Threads used to read documents (default: 1)')
    parser.add_argument('--save', type=str, default=None,
                        help='Path to save the transition table as JSON')
    parser.add_argument('-g', '--generate', type=int, default=None, metavar='LENGTH',
                        help='Generate LENGTH words after building')
    parser.add_argument('--start', type=str, default=None,
                        help='Start words (default: the most frequent context)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducible generation')
    parser.add_argument('-i', '--interactive', action='store_true',
                        help='Run interactive demo after building')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show debug logging')
    return parser


def resolve_config(args: argparse.Namespace) -> ModelConfig:
    """Merge the optional config file with command line overrides."""
    config = ModelConfig.from_file(args.config) if args.config else ModelConfig()
    return config.replace(
        order=args.n,
        pattern=args.pattern,
        id_rule='year' if (args.by_year or args.state_union
                           or args.min_year is not None or args.max_year is not None) else None,
        lowercase=True if args.lowercase else None,
        cross_documents=False if args.no_cross_documents else None,
        min_year=args.min_year,
        max_year=args.max_year,
        length=args.generate,
        seed=args.seed
    )


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if not (args.load or args.corpus_dir or args.state_union):
        parser.error("one of --corpus-dir, --state-union or --load is required")

    try:
        config = resolve_config(args)

        if args.load:
            table = load_model_cli(args.load)
            config = config.replace(order=table.order, lowercase=table.lowercase)
        else:
            corpus = load_corpus_cli(
                config,
                corpus_dir=args.corpus_dir,
                state_union=args.state_union,
                skip_unreadable=args.skip_unreadable,
                workers=args.workers
            )
            table = build_model_cli(corpus, config, save_path=args.save)

        if args.generate is not None:
            start = args.start.split() if args.start else None
            if start:
                start = table.normalize(start)
            generate_cli(table, config, start=start)

        if args.interactive:
            interactive_demo(table, config)

    except (WordchainError, OSError, ValueError) as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
