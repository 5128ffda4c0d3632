"""
Parsers for BLAST tabular output.

Reads the output of

    blastn -outfmt '6 qseqid sseqid qstart qend sstart send nident mismatch
                    gapopen gaps qlen slen qseq sseq'

and groups consecutive rows with the same (qseqid, sseqid) into
AlignmentBatch objects. Rows must be grouped by (qseqid, sseqid), which is
how BLAST writes them.

Usage:
    from paste_utils.parsers import iter_alignment_batches

    for batch in iter_alignment_batches("hits.tsv", scoring, params):
        batch.paste_alignments(scoring, params)
"""

import logging
from typing import Iterator, List, Optional, TextIO, Tuple

from paste_alignments.alignment import Alignment, NUM_ALIGNMENT_FIELDS
from paste_alignments.alignment_batch import AlignmentBatch
from paste_alignments.exceptions import ReadError
from paste_alignments.paste_parameters import PasteParameters
from paste_alignments.scoring_system import ScoringSystem

logger = logging.getLogger(__name__)

BLAST_COLUMNS = (
    'qseqid', 'sseqid', 'qstart', 'qend', 'sstart', 'send', 'nident',
    'mismatch', 'gapopen', 'gaps', 'qlen', 'slen', 'qseq', 'sseq',
)
NUM_COLUMNS = 2 + NUM_ALIGNMENT_FIELDS


def split_row(line: str, line_number: int) -> List[str]:
    """
    Split a data row into its first 14 tab-separated columns.

    Extra columns are ignored.

    Raises:
        ReadError: If the row has too few columns or an empty column
    """
    fields = line.rstrip('\r\n').split('\t')
    if len(fields) < NUM_COLUMNS:
        raise ReadError(
            f"Line {line_number}: expected {NUM_COLUMNS} tab-separated columns, "
            f"found {len(fields)}")
    fields = fields[:NUM_COLUMNS]
    for name, value in zip(BLAST_COLUMNS, fields):
        if not value:
            raise ReadError(f"Line {line_number}: empty '{name}' column")
    return fields


class AlignmentReader:
    """
    Reads alignment batches from a BLAST tabular stream.

    Alignments are numbered from 0 in the order their rows appear; the
    number becomes the alignment id. Blank lines and lines starting with
    '#' are skipped.
    """

    def __init__(self, handle: TextIO):
        self._handle = handle
        self._line_number = 0
        self._next_alignment_id = 0
        self._pending: Optional[Tuple[int, List[str]]] = self._next_row()

    @classmethod
    def from_file(cls, path: str) -> 'AlignmentReader':
        handle = open(path, 'r')
        try:
            return cls(handle)
        except Exception:
            handle.close()
            raise

    def close(self):
        self._handle.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def end_of_data(self) -> bool:
        return self._pending is None

    def _next_row(self) -> Optional[Tuple[int, List[str]]]:
        for line in self._handle:
            self._line_number += 1
            if not line.strip() or line.startswith('#'):
                continue
            return self._line_number, split_row(line, self._line_number)
        return None

    def read_batch(self, scoring_system: ScoringSystem,
                   parameters: Optional[PasteParameters] = None) -> AlignmentBatch:
        """
        Read all consecutive rows of the next (qseqid, sseqid) pair.

        Raises:
            ReadError: If the end of data was already reached
            ParsingError: If a row's alignment fields are malformed
        """
        if self._pending is None:
            raise ReadError(
                f"Attempted to read past the end of data (after line {self._line_number})")

        _, first = self._pending
        qseqid, sseqid = first[0], first[1]
        batch = AlignmentBatch(qseqid, sseqid)
        alignments: List[Alignment] = []
        while self._pending is not None:
            _, fields = self._pending
            if fields[0] != qseqid or fields[1] != sseqid:
                break
            alignments.append(Alignment.from_string_fields(
                self._next_alignment_id, fields[2:], scoring_system, parameters))
            self._next_alignment_id += 1
            self._pending = self._next_row()

        batch.reset_alignments(alignments, parameters)
        logger.debug("Read batch %s/%s with %d alignments", qseqid, sseqid, len(alignments))
        return batch

    def iter_batches(self, scoring_system: ScoringSystem,
                     parameters: Optional[PasteParameters] = None) -> Iterator[AlignmentBatch]:
        while not self.end_of_data:
            yield self.read_batch(scoring_system, parameters)


def iter_alignment_batches(input_path: str,
                           scoring_system: ScoringSystem,
                           parameters: Optional[PasteParameters] = None
                           ) -> Iterator[AlignmentBatch]:
    """Yield the batches of a BLAST tabular file one at a time."""
    with AlignmentReader.from_file(input_path) as reader:
        yield from reader.iter_batches(scoring_system, parameters)


def read_alignment_batches(input_path: str,
                           scoring_system: ScoringSystem,
                           parameters: Optional[PasteParameters] = None
                           ) -> List[AlignmentBatch]:
    """Read every batch of a BLAST tabular file into memory."""
    return list(iter_alignment_batches(input_path, scoring_system, parameters))
