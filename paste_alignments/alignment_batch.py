"""
Alignment Batch Module

Groups all alignments between one query and one subject sequence and pastes
them greedily: alignments are visited from best to worst score, and each
unvisited alignment absorbs its best-scoring neighbours on either side until
no neighbour qualifies.

A neighbour qualifies when
- it passes the pasting preconditions (same strand, collinear, not nested),
- the bridged distance and the introduced gap are within gap_tolerance,
- an overlap only trims columns known to be gap-free,
- the pasted alignment meets the intermediate pident/score thresholds
  (and, with enforce_average_score, scores at least the mean of the two).
"""

import bisect
import logging
from typing import List, Optional, Tuple

from .alignment import (
    Alignment,
    AlignmentConfiguration,
    pasted_statistics,
    pasting_violation,
)
from .helpers import fuzzy_float_equals, fuzzy_float_less
from .paste_parameters import PasteParameters
from .scoring_system import ScoringSystem

logger = logging.getLogger(__name__)


class AlignmentBatch:
    """All alignments between one (qseqid, sseqid) pair."""

    def __init__(self, qseqid: str, sseqid: str):
        if not qseqid or not sseqid:
            raise ValueError("qseqid and sseqid must be non-empty")
        self.qseqid = qseqid
        self.sseqid = sseqid
        self.alignments: List[Alignment] = []
        self.score_sorted: List[int] = []
        self.qstart_sorted: List[int] = []
        self.qend_sorted: List[int] = []
        self.num_pastings = 0
        self._qstart_keys: List[int] = []
        self._qend_keys: List[int] = []

    def __len__(self) -> int:
        return len(self.alignments)

    def __repr__(self) -> str:
        return (f"AlignmentBatch(qseqid={self.qseqid!r}, sseqid={self.sseqid!r}, "
                f"alignments={len(self.alignments)})")

    def reset_alignments(self, alignments: List[Alignment],
                         parameters: Optional[PasteParameters] = None):
        """Replace the batch contents and rebuild the sort orders."""
        epsilon = (parameters or PasteParameters()).float_epsilon
        self.alignments = list(alignments)
        self.num_pastings = 0

        # Insertion sort keeps ties in input order and tolerates the
        # non-transitive fuzzy comparison.
        score_sorted: List[int] = []
        for i in range(len(self.alignments)):
            pos = len(score_sorted)
            while pos > 0 and self._ranks_before(i, score_sorted[pos - 1], epsilon):
                pos -= 1
            score_sorted.insert(pos, i)
        self.score_sorted = score_sorted

        self.qstart_sorted = sorted(range(len(self.alignments)),
                                    key=lambda i: self.alignments[i].qstart)
        self.qend_sorted = sorted(range(len(self.alignments)),
                                  key=lambda i: self.alignments[i].qend)
        self._qstart_keys = [self.alignments[i].qstart for i in self.qstart_sorted]
        self._qend_keys = [self.alignments[i].qend for i in self.qend_sorted]

    def _ranks_before(self, first: int, second: int, epsilon: float) -> bool:
        """True if alignment `first` strictly outranks `second`."""
        a, b = self.alignments[first], self.alignments[second]
        if fuzzy_float_equals(a.raw_score, b.raw_score, epsilon):
            return (a.pident > b.pident
                    and not fuzzy_float_equals(a.pident, b.pident, epsilon))
        return a.raw_score > b.raw_score

    # ------------------------------------------------------------------
    # Pasting
    # ------------------------------------------------------------------

    def paste_alignments(self, scoring_system: ScoringSystem,
                         parameters: Optional[PasteParameters] = None):
        """Paste alignments in score order and mark the ones to report."""
        parameters = parameters or PasteParameters()
        visited = set()
        self.num_pastings = 0

        for seed_index in self.score_sorted:
            if seed_index in visited:
                continue
            visited.add(seed_index)
            seed = self.alignments[seed_index]

            while True:
                best = self._best_candidate(seed, visited, scoring_system, parameters)
                if best is None:
                    break
                candidate_index, seed_is_left, config = best
                candidate = self.alignments[candidate_index]
                if seed_is_left:
                    seed.paste_right(candidate, config, scoring_system, parameters)
                else:
                    seed.paste_left(candidate, config, scoring_system, parameters)
                visited.add(candidate_index)
                self.num_pastings += 1
                logger.debug("%s/%s: pasted alignment %d into %d (score %s, pident %.2f)",
                             self.qseqid, self.sseqid, candidate.id, seed.id,
                             seed.raw_score, seed.pident)

            seed.include_in_output = self._passes_final_thresholds(seed, parameters)

        logger.debug("%s/%s: %d alignments, %d pastings",
                     self.qseqid, self.sseqid, len(self.alignments), self.num_pastings)

    def _best_candidate(self, seed: Alignment, visited: set,
                        scoring_system: ScoringSystem,
                        parameters: PasteParameters
                        ) -> Optional[Tuple[int, bool, AlignmentConfiguration]]:
        best = None
        best_key = None
        for index, seed_is_left in self._neighbours(seed, visited, parameters.gap_tolerance):
            candidate = self.alignments[index]
            if seed_is_left:
                left, right = seed, candidate
            else:
                left, right = candidate, seed
            result = self._evaluate(left, right, scoring_system, parameters)
            if result is None:
                continue
            config, pident, score = result
            if best_key is None or self._better(score, pident, best_key, parameters.float_epsilon):
                best = (index, seed_is_left, config)
                best_key = (score, pident)
        return best

    @staticmethod
    def _better(score: float, pident: float, best_key: Tuple[float, float],
                epsilon: float) -> bool:
        best_score, best_pident = best_key
        if fuzzy_float_equals(score, best_score, epsilon):
            return pident > best_pident and not fuzzy_float_equals(pident, best_pident, epsilon)
        return score > best_score

    def _neighbours(self, seed: Alignment, visited: set, gap_tolerance: int):
        """Unvisited alignments that may lie directly left or right of seed.

        Yields (index, seed_is_left) pairs.
        """
        # Left neighbours end at most gap_tolerance positions before the seed
        # starts and end before the seed ends.
        lo = bisect.bisect_left(self._qend_keys, seed.qstart - 1 - gap_tolerance)
        hi = bisect.bisect_left(self._qend_keys, seed.qend)
        for index in self.qend_sorted[lo:hi]:
            if index not in visited:
                yield index, False

        # Right neighbours start after the seed starts and at most
        # gap_tolerance positions after it ends.
        lo = bisect.bisect_right(self._qstart_keys, seed.qstart)
        hi = bisect.bisect_right(self._qstart_keys, seed.qend + 1 + gap_tolerance)
        for index in self.qstart_sorted[lo:hi]:
            if index not in visited:
                yield index, True

    @staticmethod
    def _evaluate(left: Alignment, right: Alignment,
                  scoring_system: ScoringSystem,
                  parameters: PasteParameters
                  ) -> Optional[Tuple[AlignmentConfiguration, float, float]]:
        """Configuration and pasted (pident, score) if the pair qualifies."""
        if pasting_violation(left, right) is not None:
            return None
        config = AlignmentConfiguration.from_alignments(left, right)
        tolerance = parameters.gap_tolerance
        if config.shift > tolerance:
            return None
        if max(config.query_distance, config.subject_distance) > tolerance:
            return None

        trim = -min(config.query_offset, config.subject_offset, 0)
        if left.gap_free:
            if trim >= left.length:
                return None
        elif trim > left.length - left.ungapped_suffix_begin:
            return None
        if min(config.query_offset, config.subject_offset, 0) + left.nident + right.nident < 0:
            return None

        pident, score = pasted_statistics(left, right, config, scoring_system)
        epsilon = parameters.float_epsilon
        if fuzzy_float_less(pident, parameters.intermediate_pident_threshold, epsilon):
            return None
        if fuzzy_float_less(score, parameters.intermediate_score_threshold, epsilon):
            return None
        if parameters.enforce_average_score:
            average = (left.raw_score + right.raw_score) / 2.0
            if fuzzy_float_less(score, average, epsilon):
                return None
        return config, pident, score

    @staticmethod
    def _passes_final_thresholds(alignment: Alignment, parameters: PasteParameters) -> bool:
        epsilon = parameters.float_epsilon
        return not (
            fuzzy_float_less(alignment.pident, parameters.final_pident_threshold, epsilon)
            or fuzzy_float_less(alignment.raw_score, parameters.final_score_threshold, epsilon)
        )

    @property
    def output_alignments(self) -> List[Alignment]:
        """Alignments marked for output, in query order."""
        return [self.alignments[i] for i in self.qstart_sorted
                if self.alignments[i].include_in_output]
