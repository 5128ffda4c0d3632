#!/usr/bin/env python3
"""
Paste fragmentary BLAST alignments into longer alignments.

The input must be BLAST tabular output with the columns
    qseqid sseqid qstart qend sstart send nident mismatch gapopen gaps qlen slen qseq sseq

Usage:
    python scripts/run_paste_alignments.py hits.tsv pasted.tsv \
        --db_size 3000000000 --gap_tolerance 8 \
        --stats_file stats.tsv --summary_file summary.json

Options given on the command line override values from --config.
"""

import argparse
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from paste_alignments import __version__
from paste_alignments.exceptions import PasteAlignmentsError
from paste_alignments.paste_parameters import PasteParameters, load_paste_parameters
from paste_alignments.pipeline import run_paste_alignments

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Paste collinear BLAST alignment fragments into longer alignments",
    )
    parser.add_argument("input", help="BLAST tabular input file")
    parser.add_argument(
        "output", nargs="?", default=None,
        help="Output file for pasted alignments (default: stdout)",
    )
    parser.add_argument(
        "--db_size", type=int, default=None,
        help="Database size used for e-value computation (required)",
    )
    parser.add_argument(
        "-g", "--gap_tolerance", type=int, default=None,
        help="Maximum gap introduced or bridged by pasting (default: 4)",
    )
    parser.add_argument(
        "--final_pident", type=float, default=None,
        help="Minimum percent identity of reported alignments (default: 0)",
    )
    parser.add_argument(
        "--final_score", type=float, default=None,
        help="Minimum raw score of reported alignments (default: 0)",
    )
    parser.add_argument(
        "--intermediate_pident", type=float, default=None,
        help="Minimum percent identity after every paste (default: 0)",
    )
    parser.add_argument(
        "--intermediate_score", type=float, default=None,
        help="Minimum raw score after every paste (default: 0)",
    )
    parser.add_argument("-r", "--reward", type=int, default=None,
                        help="Match reward (default: 1)")
    parser.add_argument("-p", "--penalty", type=int, default=None,
                        help="Mismatch penalty (default: 2)")
    parser.add_argument("-o", "--gapopen", type=int, default=None,
                        help="Gap open cost (default: 0)")
    parser.add_argument("-e", "--gapextend", type=int, default=None,
                        help="Gap extension cost (default: 0)")
    parser.add_argument("-y", "--summary_file", default=None,
                        help="Write a JSON summary of the run to this file")
    parser.add_argument("-s", "--stats_file", default=None,
                        help="Write per-batch statistics to this file")
    parser.add_argument("-c", "--config", default=None,
                        help="JSON file with PasteParameters values")
    parser.add_argument("--float_epsilon", type=float, default=None,
                        help="Relative tolerance for float comparisons (default: 0.01)")
    parser.add_argument("--double_epsilon", type=float, default=None,
                        help="Relative tolerance for e-value comparisons (default: 0.01)")
    parser.add_argument("--enforce_average_score", action="store_true", default=None,
                        help="Pasted score must be at least the mean of the pasted scores")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log every paste")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    return parser


def parameters_from_args(args: argparse.Namespace) -> PasteParameters:
    """Combine defaults, the optional config file and command line options."""
    if args.config:
        parameters = load_paste_parameters(args.config)
    else:
        parameters = PasteParameters()
    return parameters.updated(
        input_filename=args.input,
        output_filename=args.output,
        db_size=args.db_size,
        gap_tolerance=args.gap_tolerance,
        final_pident_threshold=args.final_pident,
        final_score_threshold=args.final_score,
        intermediate_pident_threshold=args.intermediate_pident,
        intermediate_score_threshold=args.intermediate_score,
        reward=args.reward,
        penalty=args.penalty,
        open_cost=args.gapopen,
        extend_cost=args.gapextend,
        summary_filename=args.summary_file,
        stats_filename=args.stats_file,
        float_epsilon=args.float_epsilon,
        double_epsilon=args.double_epsilon,
        enforce_average_score=args.enforce_average_score,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        parameters = parameters_from_args(args)
    except (OSError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return 1
    if parameters.db_size is None:
        logger.error("Database size is required (--db_size or 'db_size' in --config)")
        return 1

    try:
        stats = run_paste_alignments(parameters)
    except PasteAlignmentsError as e:
        logger.error("%s", e)
        return 1

    logger.info(
        "Done. Reported %d alignments (%d pastings), average pident %.2f",
        stats.num_alignments, stats.num_pastings, stats.average_pident,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
