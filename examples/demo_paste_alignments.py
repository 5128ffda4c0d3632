"""
Demo script showing how to paste alignment fragments

This demonstrates:
1. Pasting two fragments by hand with an AlignmentConfiguration
2. Pasting a whole batch with AlignmentBatch
3. Collecting statistics as a pandas DataFrame

Usage:
    python examples/demo_paste_alignments.py
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from paste_alignments import (
    Alignment,
    AlignmentBatch,
    AlignmentConfiguration,
    PasteParameters,
    ScoringSystem,
    StatsCollector,
)
from paste_utils.writers import format_alignment


def make_fragment(identifier, qstart, qend, sstart, send, scoring):
    """Gap-free, fully identical fragment."""
    length = qend - qstart + 1
    fields = [str(qstart), str(qend), str(sstart), str(send),
              str(length), "0", "0", "0", "1000", "2000",
              "A" * length, "A" * length]
    return Alignment.from_string_fields(identifier, fields, scoring)


def demo_manual_paste(scoring):
    print("=" * 70)
    print("DEMO 1: Pasting two fragments")
    print("=" * 70)

    left = make_fragment(0, 101, 150, 501, 550, scoring)
    # 3 query positions and 5 subject positions between the fragments
    right = make_fragment(1, 154, 200, 556, 602, scoring)

    config = AlignmentConfiguration.from_alignments(left, right)
    print(f"  query offset:   {config.query_offset}")
    print(f"  subject offset: {config.subject_offset}")
    print(f"  shift:          {config.shift}")
    print(f"  pasted length:  {config.pasted_length}")

    left.paste_right(right, config, scoring)
    print(f"\n  {format_alignment('query', 'subject', left)}")


def demo_batch(scoring):
    print("\n" + "=" * 70)
    print("DEMO 2: Pasting a batch")
    print("=" * 70)

    params = PasteParameters(gap_tolerance=5, db_size=scoring.db_size)
    fragments = [
        make_fragment(0, 1, 30, 1001, 1030, scoring),
        make_fragment(1, 33, 80, 1033, 1080, scoring),
        make_fragment(2, 82, 100, 1082, 1100, scoring),
        make_fragment(3, 500, 520, 3000, 3020, scoring),
    ]
    batch = AlignmentBatch("query", "subject")
    batch.reset_alignments(fragments, params)
    batch.paste_alignments(scoring, params)

    print(f"  {len(batch)} alignments, {batch.num_pastings} pastings")
    for alignment in batch.output_alignments:
        print(f"  ids={alignment.pasted_identifiers} "
              f"q={alignment.qstart}-{alignment.qend} "
              f"score={alignment.raw_score:g} pident={alignment.pident:.1f}")

    collector = StatsCollector()
    collector.collect_stats(batch)
    print("\n" + collector.to_dataframe().to_string(index=False))


if __name__ == "__main__":
    scoring_system = ScoringSystem.create(db_size=1000000, reward=1, penalty=2)
    demo_manual_paste(scoring_system)
    demo_batch(scoring_system)
