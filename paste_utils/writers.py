"""
Writers for pasted alignments and run summaries.

Output rows are tab-delimited with the input columns, in input order, followed
by pident, raw score, bit-score, e-value and the comma-separated identifiers of
the alignments that were pasted together. On the minus strand the subject
coordinates are written in BLAST order (sstart > send).
"""

import json
from typing import List, TextIO

from paste_alignments.alignment import Alignment
from paste_alignments.alignment_batch import AlignmentBatch
from paste_alignments.stats_collector import PasteStats

OUTPUT_COLUMNS = (
    'qseqid', 'sseqid', 'qstart', 'qend', 'sstart', 'send', 'nident',
    'mismatch', 'gapopen', 'gaps', 'qlen', 'slen', 'qseq', 'sseq',
    'pident', 'score', 'bitscore', 'evalue', 'pasted_identifiers',
)


def format_alignment(qseqid: str, sseqid: str, alignment: Alignment) -> str:
    """Format one alignment as an output row (without newline)."""
    if alignment.plus_strand:
        sstart, send = alignment.sstart, alignment.send
    else:
        sstart, send = alignment.send, alignment.sstart
    fields: List[str] = [
        qseqid,
        sseqid,
        str(alignment.qstart),
        str(alignment.qend),
        str(sstart),
        str(send),
        str(alignment.nident),
        str(alignment.mismatch),
        str(alignment.gapopen),
        str(alignment.gaps),
        str(alignment.qlen),
        str(alignment.slen),
        alignment.qseq,
        alignment.sseq,
        f"{alignment.pident:g}",
        f"{alignment.raw_score:g}",
        f"{alignment.bitscore:g}",
        f"{alignment.evalue:g}",
        ','.join(str(i) for i in alignment.pasted_identifiers),
    ]
    return '\t'.join(fields)


def write_batch(batch: AlignmentBatch, handle: TextIO) -> int:
    """Write the batch's output alignments; returns the number of rows written."""
    count = 0
    for alignment in batch.output_alignments:
        handle.write(format_alignment(batch.qseqid, batch.sseqid, alignment) + '\n')
        count += 1
    return count


def write_summary(stats: PasteStats, handle: TextIO):
    """Write global statistics as a JSON object."""
    summary = stats.to_dict()
    del summary['qseqid']
    del summary['sseqid']
    json.dump(summary, handle, indent=2)
    handle.write('\n')
