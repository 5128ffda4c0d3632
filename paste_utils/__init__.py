# I/O helpers for paste_alignments

from .parsers import (
    AlignmentReader,
    iter_alignment_batches,
    read_alignment_batches,
    split_row,
)
from .writers import (
    format_alignment,
    write_batch,
    write_summary,
)
