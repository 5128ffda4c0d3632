"""
End-to-end pasting run: read BLAST tabular input, paste every batch, write
the pasted alignments and (optionally) per-batch statistics and a summary.
"""

import logging
import sys
from typing import TextIO

from paste_utils.parsers import AlignmentReader
from paste_utils.writers import write_batch, write_summary

from .exceptions import ReadError
from .paste_parameters import PasteParameters
from .scoring_system import ScoringSystem
from .stats_collector import PasteStats, StatsCollector

logger = logging.getLogger(__name__)


def paste_stream(reader: AlignmentReader, output: TextIO,
                 scoring_system: ScoringSystem,
                 parameters: PasteParameters,
                 collector: StatsCollector):
    """Paste every batch of `reader` and write the results to `output`."""
    num_batches = num_alignments = num_written = 0
    for batch in reader.iter_batches(scoring_system, parameters):
        batch.paste_alignments(scoring_system, parameters)
        num_written += write_batch(batch, output)
        collector.collect_stats(batch)
        num_batches += 1
        num_alignments += len(batch)
    logger.info("Processed %d batches (%d alignments), wrote %d pasted alignments",
                num_batches, num_alignments, num_written)


def run_paste_alignments(parameters: PasteParameters) -> PasteStats:
    """
    Run pasting as configured by `parameters`.

    Output goes to parameters.output_filename, or stdout if it is None.

    Raises:
        ScoringError: If db_size is missing or the scoring set is unsupported
        ReadError, ParsingError: If the input is malformed
    """
    if parameters.input_filename is None:
        raise ReadError("No input file given")
    scoring_system = ScoringSystem.from_parameters(parameters)
    logger.info("Scoring: reward=%d penalty=%d open=%d extend=%s (lambda=%s, k=%s)",
                scoring_system.reward, scoring_system.penalty, scoring_system.open_cost,
                scoring_system.extend_cost, scoring_system.lambda_, scoring_system.k)

    collector = StatsCollector()
    with AlignmentReader.from_file(parameters.input_filename) as reader:
        if parameters.output_filename is None:
            paste_stream(reader, sys.stdout, scoring_system, parameters, collector)
        else:
            with open(parameters.output_filename, 'w') as output:
                paste_stream(reader, output, scoring_system, parameters, collector)
            logger.info("Wrote pasted alignments to %s", parameters.output_filename)

    if parameters.stats_filename is not None:
        with open(parameters.stats_filename, 'w') as f:
            global_stats = collector.write_data(f)
        logger.info("Wrote statistics for %d batches to %s",
                    len(collector), parameters.stats_filename)
    else:
        global_stats = collector.global_stats()

    if parameters.summary_filename is not None:
        with open(parameters.summary_filename, 'w') as f:
            write_summary(global_stats, f)
        logger.info("Wrote summary to %s", parameters.summary_filename)

    return global_stats
