"""
Alignment Module

Represents one local alignment between a query and a subject sequence
(as reported by BLAST) and implements pasting: merging two collinear
alignment fragments into one longer alignment with recomputed statistics.

Two fragments are related by an AlignmentConfiguration describing how far
apart (or how much overlapping) they are in query and subject coordinates.
Pasting fills the gap between the fragments with placeholder columns, or
trims the overlapping columns from the left fragment, and adds a gap of
length |query_offset - subject_offset| when the offsets differ.

Usage:
    from paste_alignments.alignment import Alignment, AlignmentConfiguration

    left = Alignment.from_string_fields(0, fields_a, scoring)
    right = Alignment.from_string_fields(1, fields_b, scoring)
    config = AlignmentConfiguration.from_alignments(left, right)
    left.paste_right(right, config, scoring)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .exceptions import ParsingError, PastingError
from .helpers import parse_count, parse_position
from .paste_parameters import PasteParameters
from .scoring_system import ScoringSystem

GAP_CHAR = '-'
PLACEHOLDER_CHAR = 'N'

NUM_ALIGNMENT_FIELDS = 12
ALIGNMENT_FIELD_NAMES = (
    'qstart', 'qend', 'sstart', 'send', 'nident', 'mismatch',
    'gapopen', 'gaps', 'qlen', 'slen', 'qseq', 'sseq',
)


# ============================================
# Configuration of an Alignment Pair
# ============================================

@dataclass(frozen=True)
class AlignmentConfiguration:
    """
    Relative position of a (left, right) alignment pair.

    Offsets are the number of unaligned positions between the end of the
    left alignment and the start of the right one; negative offsets are
    overlaps.
    """
    query_offset: int
    subject_offset: int
    left_length: int
    right_length: int

    @classmethod
    def from_alignments(cls, left: 'Alignment', right: 'Alignment') -> 'AlignmentConfiguration':
        query_offset = right.qstart - left.qend - 1
        if left.plus_strand:
            subject_offset = right.sstart - left.send - 1
        else:
            subject_offset = left.sstart - right.send - 1
        return cls(query_offset=query_offset,
                   subject_offset=subject_offset,
                   left_length=left.length,
                   right_length=right.length)

    @property
    def query_overlap(self) -> int:
        return abs(min(0, self.query_offset))

    @property
    def query_distance(self) -> int:
        return max(0, self.query_offset)

    @property
    def subject_overlap(self) -> int:
        return abs(min(0, self.subject_offset))

    @property
    def subject_distance(self) -> int:
        return max(0, self.subject_offset)

    @property
    def shift(self) -> int:
        return abs(self.query_offset - self.subject_offset)

    @property
    def pasted_length(self) -> int:
        return (self.left_length + self.right_length
                + max(self.query_offset, self.subject_offset))


# ============================================
# Alignment
# ============================================

@dataclass
class Alignment:
    """
    A local alignment with subject coordinates normalized to sstart <= send.

    Attributes:
        id (int): Identifier of the input record this alignment came from
        qstart, qend (int): 1-based inclusive query span
        sstart, send (int): 1-based inclusive subject span (sstart <= send)
        plus_strand (bool): False if the subject was reported in reverse
        nident, mismatch, gapopen, gaps (int): Alignment counts
        qlen, slen (int): Full query and subject sequence lengths
        qseq, sseq (str): Aligned sequences (equal length, may contain '-')
        pasted_identifiers (List[int]): Ids of every record merged into this one
        pident, raw_score, bitscore, evalue (float): Derived statistics
        ungapped_prefix_end (int): End of the leading region known to be gap-free
        ungapped_suffix_begin (int): Start of the trailing region known to be gap-free
        include_in_output (bool): Set by the batch when the alignment is reported

    Equality ignores id and include_in_output.
    """
    id: int = field(compare=False)
    qstart: int
    qend: int
    sstart: int
    send: int
    plus_strand: bool
    nident: int
    mismatch: int
    gapopen: int
    gaps: int
    qlen: int
    slen: int
    qseq: str
    sseq: str
    pasted_identifiers: List[int] = field(default_factory=list)
    pident: float = 0.0
    raw_score: float = 0.0
    bitscore: float = 0.0
    evalue: float = 0.0
    ungapped_prefix_end: int = 0
    ungapped_suffix_begin: int = 0
    include_in_output: bool = field(default=False, compare=False)

    @property
    def length(self) -> int:
        return len(self.qseq)

    @property
    def gap_free(self) -> bool:
        return self.gaps == 0

    @classmethod
    def from_string_fields(cls,
                           identifier: int,
                           fields: Sequence[str],
                           scoring_system: ScoringSystem,
                           parameters: Optional[PasteParameters] = None) -> 'Alignment':
        """
        Build an alignment from 12 string fields in the order
        qstart qend sstart send nident mismatch gapopen gaps qlen slen qseq sseq.

        Subject coordinates may be given in either order; a reversed pair
        marks the alignment as minus strand.

        Raises:
            ParsingError: If a field is missing, malformed, or inconsistent
        """
        if len(fields) != NUM_ALIGNMENT_FIELDS:
            raise ParsingError(
                f"Expected {NUM_ALIGNMENT_FIELDS} fields, got {len(fields)}")

        qstart = parse_position(fields[0], 'qstart')
        qend = parse_position(fields[1], 'qend')
        sstart = parse_position(fields[2], 'sstart')
        send = parse_position(fields[3], 'send')
        nident, mismatch, gapopen, gaps, qlen, slen = (
            parse_count(value, name)
            for value, name in zip(fields[4:10], ALIGNMENT_FIELD_NAMES[4:10])
        )
        qseq, sseq = fields[10], fields[11]

        if qstart > qend:
            raise ParsingError(f"qstart ({qstart}) is larger than qend ({qend})")
        if qlen == 0 or slen == 0:
            raise ParsingError("qlen and slen must be positive")
        if not qseq or not sseq:
            raise ParsingError("Aligned sequences must not be empty")
        if len(qseq) != len(sseq):
            raise ParsingError(
                f"qseq and sseq differ in length ({len(qseq)} vs {len(sseq)})")

        plus_strand = sstart <= send
        if not plus_strand:
            sstart, send = send, sstart

        alignment = cls(
            id=identifier,
            qstart=qstart,
            qend=qend,
            sstart=sstart,
            send=send,
            plus_strand=plus_strand,
            nident=nident,
            mismatch=mismatch,
            gapopen=gapopen,
            gaps=gaps,
            qlen=qlen,
            slen=slen,
            qseq=qseq,
            sseq=sseq,
            pasted_identifiers=[identifier],
            ungapped_prefix_end=0,
            ungapped_suffix_begin=len(qseq),
        )
        alignment.update_statistics(scoring_system, parameters)
        return alignment

    def update_statistics(self, scoring_system: ScoringSystem,
                          parameters: Optional[PasteParameters] = None):
        """Recompute pident, raw score, bit-score and e-value from the counts."""
        self.pident = 100.0 * self.nident / self.length
        self.raw_score = scoring_system.raw_score(self.nident, self.mismatch,
                                                  self.gapopen, self.gaps)
        self.bitscore = scoring_system.bitscore(self.raw_score, parameters)
        self.evalue = scoring_system.evalue(self.raw_score, self.qlen, parameters)

    # ------------------------------------------------------------------
    # Pasting
    # ------------------------------------------------------------------

    def paste_right(self, right: 'Alignment', config: AlignmentConfiguration,
                    scoring_system: ScoringSystem,
                    parameters: Optional[PasteParameters] = None):
        """Absorb `right` into this alignment. `right` is not modified."""
        _paste(self, right, config, self, scoring_system, parameters)

    def paste_left(self, left: 'Alignment', config: AlignmentConfiguration,
                   scoring_system: ScoringSystem,
                   parameters: Optional[PasteParameters] = None):
        """Absorb `left` into this alignment. `left` is not modified.

        `config` describes the (left, self) pair.
        """
        _paste(left, self, config, self, scoring_system, parameters)


def pasting_violation(left: Alignment, right: Alignment) -> Optional[str]:
    """
    Describe why `right` cannot be pasted onto the right end of `left`.

    Returns None if the pair can be pasted.
    """
    if left.plus_strand != right.plus_strand:
        return "alignments are on different strands"
    if _nested(left.qstart, left.qend, right.qstart, right.qend):
        return "query spans are nested or identical"
    if _nested(left.sstart, left.send, right.sstart, right.send):
        return "subject spans are nested or identical"
    if right.qstart <= left.qstart or right.qend <= left.qend:
        return "right alignment does not follow the left alignment in the query"
    if left.plus_strand:
        if right.sstart <= left.sstart or right.send <= left.send:
            return "right alignment does not follow the left alignment in the subject"
    elif right.sstart >= left.sstart or right.send >= left.send:
        return "right alignment does not follow the left alignment in the subject"
    return None


def _nested(start1: int, end1: int, start2: int, end2: int) -> bool:
    return ((start1 <= start2 and end2 <= end1)
            or (start2 <= start1 and end1 <= end2))


def _pasted_counts(left: Alignment, right: Alignment,
                   config: AlignmentConfiguration) -> Tuple[int, int, int, int]:
    """nident, mismatch, gapopen and gaps of the pasted alignment."""
    qo, so = config.query_offset, config.subject_offset
    shift = config.shift
    nident = left.nident + right.nident + min(qo, so, 0)
    mismatch = left.mismatch + right.mismatch + max(min(qo, so), 0)
    gapopen = left.gapopen + right.gapopen + (1 if shift > 0 else 0)
    gaps = left.gaps + right.gaps + shift
    return nident, mismatch, gapopen, gaps


def pasted_statistics(left: Alignment, right: Alignment,
                      config: AlignmentConfiguration,
                      scoring_system: ScoringSystem) -> Tuple[float, float]:
    """(pident, raw_score) the alignment would have after pasting the pair."""
    nident, mismatch, gapopen, gaps = _pasted_counts(left, right, config)
    pident = 100.0 * nident / config.pasted_length
    return pident, scoring_system.raw_score(nident, mismatch, gapopen, gaps)


def _merged_fields(left: Alignment, right: Alignment,
                   config: AlignmentConfiguration) -> Dict:
    """Field values of the pasted alignment. Raises PastingError if impossible."""
    violation = pasting_violation(left, right)
    if violation is not None:
        raise PastingError(
            f"Cannot paste alignments {left.pasted_identifiers} and "
            f"{right.pasted_identifiers}: {violation}")

    qo, so = config.query_offset, config.subject_offset
    shift = config.shift
    trim = -min(qo, so, 0)
    if trim >= left.length:
        raise PastingError(
            f"Overlap of {trim} columns covers the whole left alignment "
            f"({left.length} columns)")

    nident, mismatch, gapopen, gaps = _pasted_counts(left, right, config)
    if nident < 0:
        raise PastingError("Overlap removes more identities than the alignments have")

    kept = left.length - trim
    q_pad = qo + trim
    s_pad = so + trim
    if q_pad < s_pad:
        qseq = (left.qseq[:kept] + GAP_CHAR * shift
                + PLACEHOLDER_CHAR * q_pad + right.qseq)
        sseq = left.sseq[:kept] + PLACEHOLDER_CHAR * s_pad + right.sseq
    elif s_pad < q_pad:
        qseq = left.qseq[:kept] + PLACEHOLDER_CHAR * q_pad + right.qseq
        sseq = (left.sseq[:kept] + GAP_CHAR * shift
                + PLACEHOLDER_CHAR * s_pad + right.sseq)
    else:
        qseq = left.qseq[:kept] + PLACEHOLDER_CHAR * q_pad + right.qseq
        sseq = left.sseq[:kept] + PLACEHOLDER_CHAR * s_pad + right.sseq

    junction = kept + max(q_pad, s_pad)

    if not left.gap_free:
        prefix_end = min(left.ungapped_prefix_end, kept)
    elif shift > 0:
        prefix_end = kept
    elif right.gap_free:
        prefix_end = junction + right.length
    else:
        prefix_end = junction + right.ungapped_prefix_end

    if not right.gap_free:
        suffix_begin = junction + right.ungapped_suffix_begin
    elif shift > 0:
        # Placeholder columns after the gap are gap-free but left out of the suffix.
        suffix_begin = junction
    elif left.gap_free:
        suffix_begin = 0
    else:
        suffix_begin = min(left.ungapped_suffix_begin, kept)

    if left.plus_strand:
        sstart, send = left.sstart, right.send
    else:
        sstart, send = right.sstart, left.send

    return {
        'qstart': left.qstart,
        'qend': right.qend,
        'sstart': sstart,
        'send': send,
        'nident': nident,
        'mismatch': mismatch,
        'gapopen': gapopen,
        'gaps': gaps,
        'qseq': qseq,
        'sseq': sseq,
        'pasted_identifiers': left.pasted_identifiers + right.pasted_identifiers,
        'ungapped_prefix_end': prefix_end,
        'ungapped_suffix_begin': suffix_begin,
    }


def _paste(left: Alignment, right: Alignment, config: AlignmentConfiguration,
           target: Alignment, scoring_system: ScoringSystem,
           parameters: Optional[PasteParameters]):
    # Everything is computed before the target changes, so a failed paste
    # leaves both operands untouched.
    merged = _merged_fields(left, right, config)
    for name, value in merged.items():
        setattr(target, name, value)
    target.update_statistics(scoring_system, parameters)
