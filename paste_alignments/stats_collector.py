"""
Statistics about pasted alignments.

StatsCollector records per-batch averages over the alignments selected for
output and combines them into global averages weighted by the number of
alignments per batch.
"""

from dataclasses import dataclass, asdict, fields
from typing import List, TextIO

import pandas as pd

from .alignment_batch import AlignmentBatch

AVERAGED_FIELDS = (
    'average_length',
    'average_pident',
    'average_score',
    'average_bitscore',
    'average_evalue',
)


@dataclass
class PasteStats:
    """Averages over the output alignments of one batch (or of all batches)."""
    qseqid: str = ""
    sseqid: str = ""
    num_alignments: int = 0
    num_pastings: int = 0
    average_length: float = 0.0
    average_pident: float = 0.0
    average_score: float = 0.0
    average_bitscore: float = 0.0
    average_evalue: float = 0.0

    def to_dict(self):
        return asdict(self)


STATS_COLUMNS = [f.name for f in fields(PasteStats)]


class StatsCollector:
    """Collects PasteStats for every batch with at least one output alignment."""

    def __init__(self):
        self.batch_stats: List[PasteStats] = []

    def __len__(self) -> int:
        return len(self.batch_stats)

    def collect_stats(self, batch: AlignmentBatch):
        stats = PasteStats(qseqid=batch.qseqid, sseqid=batch.sseqid)
        for alignment in batch.alignments:
            if not alignment.include_in_output:
                continue
            stats.num_alignments += 1
            stats.num_pastings += len(alignment.pasted_identifiers) - 1
            stats.average_length += alignment.length
            stats.average_pident += alignment.pident
            stats.average_score += alignment.raw_score
            stats.average_bitscore += alignment.bitscore
            stats.average_evalue += alignment.evalue
        if stats.num_alignments == 0:
            return
        for name in AVERAGED_FIELDS:
            setattr(stats, name, getattr(stats, name) / stats.num_alignments)
        self.batch_stats.append(stats)

    def global_stats(self) -> PasteStats:
        """Averages over all collected batches, weighted by alignment count."""
        total = PasteStats()
        for stats in self.batch_stats:
            total.num_alignments += stats.num_alignments
            total.num_pastings += stats.num_pastings
            for name in AVERAGED_FIELDS:
                setattr(total, name,
                        getattr(total, name) + getattr(stats, name) * stats.num_alignments)
        if total.num_alignments > 0:
            for name in AVERAGED_FIELDS:
                setattr(total, name, getattr(total, name) / total.num_alignments)
        return total

    def to_dataframe(self) -> pd.DataFrame:
        """One row per collected batch."""
        if not self.batch_stats:
            return pd.DataFrame(columns=STATS_COLUMNS)
        df = pd.DataFrame([s.to_dict() for s in self.batch_stats], columns=STATS_COLUMNS)
        df['num_alignments'] = df['num_alignments'].astype('int64')
        df['num_pastings'] = df['num_pastings'].astype('int64')
        return df

    def write_data(self, handle: TextIO) -> PasteStats:
        """Write one tab-delimited row per batch; return the global stats."""
        if self.batch_stats:
            self.to_dataframe().to_csv(handle, sep='\t', header=False,
                                       index=False, float_format='%g')
        return self.global_stats()
