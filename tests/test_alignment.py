"""
Unit tests for Alignment construction and AlignmentConfiguration.

Tests cover:
- Parsing the 12 alignment fields
- Strand normalization of subject coordinates
- Derived statistics and the ungapped region cache
- Rejection of malformed fields
- Offsets, overlaps, distances and pasted length of alignment pairs

Run with: python -m pytest tests/test_alignment.py -v
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from paste_alignments.alignment import Alignment, AlignmentConfiguration
from paste_alignments.exceptions import ParsingError
from paste_alignments.scoring_system import ScoringSystem

SCORING = ScoringSystem.create(100000, 1, 2, 1, 1)


def _fields(qstart="1", qend="10", sstart="101", send="110", nident="9",
            mismatch="1", gapopen="0", gaps="0", qlen="500", slen="1000",
            qseq="ACGTACGTAC", sseq="ACGTACGTAA"):
    return [qstart, qend, sstart, send, nident, mismatch, gapopen, gaps,
            qlen, slen, qseq, sseq]


# ============================================
# Construction
# ============================================

class TestFromStringFields:
    """Test building alignments from string fields."""

    def test_plus_strand(self):
        a = Alignment.from_string_fields(7, _fields(), SCORING)
        assert a.id == 7
        assert (a.qstart, a.qend, a.sstart, a.send) == (1, 10, 101, 110)
        assert a.plus_strand
        assert (a.nident, a.mismatch, a.gapopen, a.gaps) == (9, 1, 0, 0)
        assert (a.qlen, a.slen) == (500, 1000)
        assert a.length == 10
        assert a.pasted_identifiers == [7]
        assert a.include_in_output is False

    def test_minus_strand_is_normalized(self):
        a = Alignment.from_string_fields(0, _fields(sstart="110", send="101"), SCORING)
        assert not a.plus_strand
        assert (a.sstart, a.send) == (101, 110)

    def test_single_position_subject_is_plus_strand(self):
        a = Alignment.from_string_fields(
            0, _fields(qend="1", sstart="5", send="5", nident="1", mismatch="0",
                       qseq="A", sseq="A"), SCORING)
        assert a.plus_strand

    def test_statistics(self):
        a = Alignment.from_string_fields(0, _fields(), SCORING)
        assert a.pident == pytest.approx(90.0)
        assert a.raw_score == 9 - 2
        assert a.bitscore == pytest.approx(SCORING.bitscore(7))
        assert a.evalue == pytest.approx(SCORING.evalue(7, 500))

    def test_ungapped_cache(self):
        a = Alignment.from_string_fields(0, _fields(), SCORING)
        assert a.ungapped_prefix_end == 0
        assert a.ungapped_suffix_begin == a.length

    def test_gapped_alignment(self):
        a = Alignment.from_string_fields(
            0, _fields(qend="9", nident="9", mismatch="0", gapopen="1", gaps="1",
                       qseq="ACGT-ACGTA", sseq="ACGTTACGTA"), SCORING)
        assert a.length == 10
        assert not a.gap_free
        assert a.raw_score == 9 - 1 - 1

    def test_equality_ignores_id_and_output_flag(self):
        a = Alignment.from_string_fields(1, _fields(), SCORING)
        b = Alignment.from_string_fields(2, _fields(), SCORING)
        b.include_in_output = True
        b.pasted_identifiers = [1]
        assert a == b

    def test_equality_compares_sequences(self):
        a = Alignment.from_string_fields(1, _fields(), SCORING)
        b = Alignment.from_string_fields(1, _fields(sseq="ACGTACGTAG"), SCORING)
        assert a != b


class TestFromStringFieldsErrors:
    """Test rejection of malformed fields."""

    def test_too_few_fields(self):
        with pytest.raises(ParsingError):
            Alignment.from_string_fields(0, _fields()[:11], SCORING)

    def test_too_many_fields(self):
        with pytest.raises(ParsingError):
            Alignment.from_string_fields(0, _fields() + ["extra"], SCORING)

    @pytest.mark.parametrize("name", ["qstart", "qend", "sstart", "send", "nident",
                                      "mismatch", "gapopen", "gaps", "qlen", "slen"])
    @pytest.mark.parametrize("value", ["-1", "1.0", "", "x1", " 1"])
    def test_malformed_number(self, name, value):
        with pytest.raises(ParsingError):
            Alignment.from_string_fields(0, _fields(**{name: value}), SCORING)

    @pytest.mark.parametrize("name", ["qstart", "qend", "sstart", "send"])
    def test_zero_coordinate(self, name):
        with pytest.raises(ParsingError):
            Alignment.from_string_fields(0, _fields(**{name: "0"}), SCORING)

    def test_qstart_after_qend(self):
        with pytest.raises(ParsingError):
            Alignment.from_string_fields(0, _fields(qstart="11", qend="10"), SCORING)

    @pytest.mark.parametrize("name", ["qlen", "slen"])
    def test_zero_sequence_length(self, name):
        with pytest.raises(ParsingError):
            Alignment.from_string_fields(0, _fields(**{name: "0"}), SCORING)

    def test_empty_sequences(self):
        with pytest.raises(ParsingError):
            Alignment.from_string_fields(0, _fields(qseq="", sseq=""), SCORING)

    def test_sequence_length_mismatch(self):
        with pytest.raises(ParsingError):
            Alignment.from_string_fields(0, _fields(sseq="ACGTACGTA"), SCORING)


# ============================================
# Configuration
# ============================================

def _alignment(identifier, qstart, qend, sstart, send, length):
    fields = [str(qstart), str(qend), str(sstart), str(send), str(length),
              "0", "0", "0", "1000", "1000", "A" * length, "A" * length]
    return Alignment.from_string_fields(identifier, fields, SCORING)


class TestAlignmentConfiguration:
    """Test offsets between alignment pairs."""

    def test_adjacent(self):
        left = _alignment(0, 1, 10, 1, 10, 10)
        right = _alignment(1, 11, 20, 11, 20, 10)
        config = AlignmentConfiguration.from_alignments(left, right)
        assert config.query_offset == 0
        assert config.subject_offset == 0
        assert config.shift == 0
        assert config.pasted_length == 20

    def test_distance(self):
        left = _alignment(0, 1, 10, 1, 10, 10)
        right = _alignment(1, 14, 20, 16, 22, 7)
        config = AlignmentConfiguration.from_alignments(left, right)
        assert (config.query_offset, config.subject_offset) == (3, 5)
        assert (config.query_distance, config.subject_distance) == (3, 5)
        assert (config.query_overlap, config.subject_overlap) == (0, 0)
        assert config.shift == 2
        assert (config.left_length, config.right_length) == (10, 7)
        assert config.pasted_length == 22

    def test_overlap(self):
        left = _alignment(0, 1, 10, 1, 10, 10)
        right = _alignment(1, 8, 17, 9, 18, 10)
        config = AlignmentConfiguration.from_alignments(left, right)
        assert (config.query_offset, config.subject_offset) == (-3, -2)
        assert (config.query_overlap, config.subject_overlap) == (3, 2)
        assert (config.query_distance, config.subject_distance) == (0, 0)
        assert config.shift == 1
        assert config.pasted_length == 18

    def test_minus_strand(self):
        left = _alignment(0, 1, 10, 100, 91, 10)
        right = _alignment(1, 13, 22, 88, 79, 10)
        config = AlignmentConfiguration.from_alignments(left, right)
        assert config.query_offset == 2
        assert config.subject_offset == 91 - 88 - 1

    def test_direct_construction(self):
        config = AlignmentConfiguration(query_offset=-1, subject_offset=4,
                                        left_length=5, right_length=6)
        assert config.shift == 5
        assert config.pasted_length == 15

    def test_frozen(self):
        config = AlignmentConfiguration(0, 0, 1, 1)
        with pytest.raises(AttributeError):
            config.query_offset = 3
