"""
Unit tests for the BLAST tabular parsers.

Tests cover:
- Grouping rows into batches by (qseqid, sseqid)
- Alignment numbering
- Skipping comments and blank lines, ignoring extra columns
- Errors for short rows, empty columns and reads past the end

Run with: python -m pytest tests/test_parsers.py -v
"""

import io
import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from paste_alignments.exceptions import ParsingError, ReadError
from paste_alignments.paste_parameters import PasteParameters
from paste_alignments.scoring_system import ScoringSystem
from paste_utils.parsers import (
    AlignmentReader,
    iter_alignment_batches,
    read_alignment_batches,
    split_row,
)

SCORING = ScoringSystem.create(100000, 1, 2, 1, 1)


def _row(qseqid, sseqid, qstart, qend, sstart, send, extra=()):
    length = qend - qstart + 1
    fields = [qseqid, sseqid, str(qstart), str(qend), str(sstart), str(send),
              str(length), "0", "0", "0", "1000", "2000", "A" * length, "A" * length]
    return "\t".join(fields + list(extra)) + "\n"


# ============================================
# Test Fixtures - Sample Files
# ============================================

@pytest.fixture
def sample_blast_file(tmp_path):
    """BLAST tabular file with three batches"""
    content = (
        "# BLASTN 2.13.0+\n"
        + _row("q1", "s1", 1, 10, 1, 10)
        + _row("q1", "s1", 11, 20, 11, 20)
        + "\n"
        + _row("q1", "s2", 5, 14, 30, 21)
        + "# comment between rows\n"
        + _row("q2", "s1", 1, 8, 1, 8, extra=("95.0", "1e-5"))
    )
    blast_file = tmp_path / "hits.tsv"
    blast_file.write_text(content)
    return str(blast_file)


class TestSplitRow:
    """Test splitting rows into columns."""

    def test_exact_columns(self):
        fields = split_row(_row("q", "s", 1, 4, 1, 4), 1)
        assert len(fields) == 14
        assert fields[0] == "q"
        assert fields[-1] == "AAAA"

    def test_extra_columns_ignored(self):
        fields = split_row(_row("q", "s", 1, 4, 1, 4, extra=("x", "y")), 1)
        assert len(fields) == 14

    def test_windows_line_ending(self):
        fields = split_row(_row("q", "s", 1, 4, 1, 4).replace("\n", "\r\n"), 1)
        assert fields[-1] == "AAAA"

    def test_too_few_columns(self):
        with pytest.raises(ReadError, match="Line 3"):
            split_row("q\ts\t1\t2\n", 3)

    def test_empty_column(self):
        row = _row("q", "", 1, 4, 1, 4)
        with pytest.raises(ReadError, match="sseqid"):
            split_row(row, 1)


class TestAlignmentReader:
    """Test reading batches."""

    def test_batches(self, sample_blast_file):
        batches = read_alignment_batches(sample_blast_file, SCORING)
        assert [(b.qseqid, b.sseqid, len(b)) for b in batches] == [
            ("q1", "s1", 2), ("q1", "s2", 1), ("q2", "s1", 1)]

    def test_alignment_ids(self, sample_blast_file):
        batches = read_alignment_batches(sample_blast_file, SCORING)
        ids = [a.id for b in batches for a in b.alignments]
        assert ids == [0, 1, 2, 3]
        assert batches[0].alignments[1].pasted_identifiers == [1]

    def test_minus_strand_row(self, sample_blast_file):
        batches = read_alignment_batches(sample_blast_file, SCORING)
        a = batches[1].alignments[0]
        assert not a.plus_strand
        assert (a.sstart, a.send) == (21, 30)
        assert (a.qlen, a.slen) == (1000, 2000)

    def test_batches_are_sorted(self, sample_blast_file):
        batches = read_alignment_batches(sample_blast_file, SCORING)
        assert batches[0].score_sorted == [0, 1]
        assert batches[0].qstart_sorted == [0, 1]

    def test_end_of_data(self):
        reader = AlignmentReader(io.StringIO(_row("q", "s", 1, 5, 1, 5)))
        assert not reader.end_of_data
        batch = reader.read_batch(SCORING)
        assert len(batch) == 1
        assert reader.end_of_data
        with pytest.raises(ReadError):
            reader.read_batch(SCORING)

    def test_empty_input(self):
        reader = AlignmentReader(io.StringIO("# only a comment\n\n"))
        assert reader.end_of_data
        assert list(reader.iter_batches(SCORING)) == []

    def test_same_pair_split_by_other_pair(self):
        content = (_row("q", "s", 1, 5, 1, 5)
                   + _row("q", "t", 1, 5, 1, 5)
                   + _row("q", "s", 10, 15, 10, 15))
        reader = AlignmentReader(io.StringIO(content))
        batches = list(reader.iter_batches(SCORING))
        assert [(b.qseqid, b.sseqid) for b in batches] == [("q", "s"), ("q", "t"), ("q", "s")]

    def test_short_row(self):
        content = _row("q", "s", 1, 5, 1, 5) + "q\ts\t1\n"
        reader = AlignmentReader(io.StringIO(content))
        with pytest.raises(ReadError):
            reader.read_batch(SCORING)

    def test_malformed_field(self):
        content = _row("q", "s", 1, 5, 1, 5).replace("\t1\t5\t1", "\t1\tfive\t1", 1)
        with pytest.raises(ParsingError):
            AlignmentReader(io.StringIO(content)).read_batch(SCORING)

    def test_parameters_passed_through(self, sample_blast_file):
        params = PasteParameters(float_epsilon=0.05)
        batches = list(iter_alignment_batches(sample_blast_file, SCORING, params))
        assert len(batches) == 3

    def test_context_manager_closes_file(self, sample_blast_file):
        with AlignmentReader.from_file(sample_blast_file) as reader:
            reader.read_batch(SCORING)
        assert reader._handle.closed
