# Paste Alignments core package

from .exceptions import (
    PasteAlignmentsError,
    ParsingError,
    ScoringError,
    PastingError,
    ReadError,
)
from .helpers import (
    fuzzy_float_equals,
    fuzzy_float_less,
)
from .paste_parameters import (
    PasteParameters,
    load_paste_parameters,
)
from .scoring_system import (
    ScoringSystem,
    ScoringParameters,
    BLAST_SUPPORTED_SCORING_PARAMETERS,
)
from .alignment import (
    Alignment,
    AlignmentConfiguration,
    pasting_violation,
    pasted_statistics,
)
from .alignment_batch import AlignmentBatch
from .stats_collector import (
    PasteStats,
    StatsCollector,
)

__version__ = "0.1.0"
