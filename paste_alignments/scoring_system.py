"""
Scoring System Module

Computes raw scores, bit-scores and e-values of nucleotide alignments the
way BLAST does, for the scoring parameter sets BLAST supports with
precomputed Karlin-Altschul statistics (lambda, k).

Usage:
    from paste_alignments.scoring_system import ScoringSystem

    scoring = ScoringSystem.create(db_size=100000, reward=1, penalty=2)
    score = scoring.raw_score(nident=48, mismatch=2, gapopen=0, gaps=0)
    print(scoring.bitscore(score), scoring.evalue(score, qlen=500))
"""

import math
from dataclasses import dataclass
from typing import Dict, NamedTuple, Optional, Tuple

from .exceptions import ScoringError
from .helpers import megablast_extend_cost, next_lower_even
from .paste_parameters import PasteParameters


class ScoringParameters(NamedTuple):
    """One supported (reward, penalty, open, extend) set and its statistics."""
    reward: int
    penalty: int
    open_cost: int
    extend_cost: int
    lambda_: float
    k: float


# Values from BLAST+ blast_stat.c. Open and extend of 0 denote the
# megablast (linear gap cost) sets.
BLAST_SUPPORTED_SCORING_PARAMETERS: Tuple[ScoringParameters, ...] = (
    ScoringParameters(1, 5, 0, 0, 1.39, 0.747),
    ScoringParameters(1, 5, 3, 3, 1.39, 0.747),
    ScoringParameters(1, 4, 0, 0, 1.383, 0.738),
    ScoringParameters(1, 4, 1, 2, 1.36, 0.67),
    ScoringParameters(1, 4, 0, 2, 1.26, 0.43),
    ScoringParameters(1, 4, 2, 1, 1.35, 0.61),
    ScoringParameters(1, 4, 1, 1, 1.22, 0.35),
    ScoringParameters(2, 7, 0, 0, 0.69, 0.73),
    ScoringParameters(2, 7, 2, 4, 0.68, 0.67),
    ScoringParameters(2, 7, 0, 4, 0.63, 0.43),
    ScoringParameters(2, 7, 4, 2, 0.675, 0.62),
    ScoringParameters(2, 7, 2, 2, 0.61, 0.35),
    ScoringParameters(1, 3, 0, 0, 1.374, 0.711),
    ScoringParameters(1, 3, 2, 2, 1.37, 0.70),
    ScoringParameters(1, 3, 1, 2, 1.35, 0.64),
    ScoringParameters(1, 3, 0, 2, 1.25, 0.42),
    ScoringParameters(1, 3, 2, 1, 1.34, 0.60),
    ScoringParameters(1, 3, 1, 1, 1.21, 0.34),
    ScoringParameters(2, 5, 0, 0, 0.675, 0.65),
    ScoringParameters(2, 5, 2, 4, 0.67, 0.59),
    ScoringParameters(2, 5, 0, 4, 0.62, 0.39),
    ScoringParameters(2, 5, 4, 2, 0.67, 0.61),
    ScoringParameters(2, 5, 2, 2, 0.56, 0.32),
    ScoringParameters(1, 2, 0, 0, 1.28, 0.46),
    ScoringParameters(1, 2, 2, 2, 1.33, 0.62),
    ScoringParameters(1, 2, 1, 2, 1.30, 0.52),
    ScoringParameters(1, 2, 0, 2, 1.19, 0.34),
    ScoringParameters(1, 2, 3, 1, 1.32, 0.57),
    ScoringParameters(1, 2, 2, 1, 1.29, 0.49),
    ScoringParameters(1, 2, 1, 1, 1.14, 0.26),
    ScoringParameters(2, 3, 0, 0, 0.55, 0.21),
    ScoringParameters(2, 3, 4, 4, 0.63, 0.42),
    ScoringParameters(2, 3, 2, 4, 0.615, 0.37),
    ScoringParameters(2, 3, 0, 4, 0.55, 0.21),
    ScoringParameters(2, 3, 3, 3, 0.615, 0.37),
    ScoringParameters(2, 3, 6, 2, 0.63, 0.42),
    ScoringParameters(2, 3, 5, 2, 0.625, 0.41),
    ScoringParameters(2, 3, 4, 2, 0.61, 0.35),
    ScoringParameters(2, 3, 2, 2, 0.515, 0.14),
    ScoringParameters(3, 4, 6, 3, 0.389, 0.25),
    ScoringParameters(3, 4, 5, 3, 0.375, 0.21),
    ScoringParameters(3, 4, 4, 3, 0.351, 0.14),
    ScoringParameters(3, 4, 6, 2, 0.362, 0.16),
    ScoringParameters(3, 4, 5, 2, 0.330, 0.092),
    ScoringParameters(3, 4, 4, 2, 0.281, 0.046),
    ScoringParameters(4, 5, 0, 0, 0.22, 0.061),
    ScoringParameters(4, 5, 6, 5, 0.28, 0.21),
    ScoringParameters(4, 5, 5, 5, 0.27, 0.17),
    ScoringParameters(4, 5, 4, 5, 0.25, 0.10),
    ScoringParameters(4, 5, 3, 5, 0.23, 0.065),
    ScoringParameters(1, 1, 3, 2, 1.09, 0.31),
    ScoringParameters(1, 1, 2, 2, 1.07, 0.27),
    ScoringParameters(1, 1, 1, 2, 1.02, 0.21),
    ScoringParameters(1, 1, 0, 2, 0.80, 0.064),
    ScoringParameters(1, 1, 4, 1, 1.08, 0.28),
    ScoringParameters(1, 1, 3, 1, 1.06, 0.25),
    ScoringParameters(1, 1, 2, 1, 0.99, 0.17),
    ScoringParameters(3, 2, 5, 5, 0.208, 0.030),
    ScoringParameters(5, 4, 10, 6, 0.163, 0.068),
    ScoringParameters(5, 4, 8, 6, 0.146, 0.039),
)

_PARAMETER_INDEX: Dict[Tuple[int, int, int, int], ScoringParameters] = {
    (p.reward, p.penalty, p.open_cost, p.extend_cost): p
    for p in BLAST_SUPPORTED_SCORING_PARAMETERS
}

# BLAST rounds raw scores down to even values for these reward/penalty pairs.
_EVEN_SCORE_PENALTIES = {2: (3, 5, 7)}


def find_scoring_parameters(reward: int, penalty: int,
                            open_cost: int, extend_cost: int) -> Optional[ScoringParameters]:
    """Exact table lookup; None if the set is not supported."""
    return _PARAMETER_INDEX.get((reward, penalty, open_cost, extend_cost))


@dataclass(frozen=True)
class ScoringSystem:
    """
    Immutable scoring parameters plus the database size.

    Create instances with ScoringSystem.create, which validates the
    parameter set against the supported table and looks up lambda and k.

    Attributes:
        reward (int): Score for an identical position
        penalty (int): Cost of a mismatch (positive number)
        open_cost (int): Cost of opening a gap
        extend_cost (float): Cost per gap position (reward / 2 + penalty for
            the megablast sets)
        lambda_ (float): Karlin-Altschul lambda
        k (float): Karlin-Altschul k
        db_size (int): Number of letters in the searched database
    """
    reward: int
    penalty: int
    open_cost: int
    extend_cost: float
    lambda_: float
    k: float
    db_size: int

    @classmethod
    def create(cls, db_size: int, reward: int = 1, penalty: int = 2,
               open_cost: int = 0, extend_cost: int = 0) -> 'ScoringSystem':
        """
        Look up the parameter set and build a scoring system.

        Raises:
            ScoringError: If db_size is not positive or the parameter set is
                not one BLAST supports
        """
        if db_size <= 0:
            raise ScoringError(f"Database size must be positive, got {db_size}")
        params = find_scoring_parameters(reward, penalty, open_cost, extend_cost)
        if params is None:
            raise ScoringError(
                f"Unsupported scoring parameters: reward={reward}, penalty={penalty}, "
                f"open={open_cost}, extend={extend_cost}"
            )
        effective_extend = extend_cost
        if open_cost == 0 and extend_cost == 0:
            effective_extend = megablast_extend_cost(reward, penalty)
        return cls(
            reward=reward,
            penalty=penalty,
            open_cost=open_cost,
            extend_cost=effective_extend,
            lambda_=params.lambda_,
            k=params.k,
            db_size=db_size,
        )

    @classmethod
    def from_parameters(cls, parameters: PasteParameters) -> 'ScoringSystem':
        if parameters.db_size is None:
            raise ScoringError("Database size is required to compute scores")
        return cls.create(parameters.db_size, parameters.reward, parameters.penalty,
                          parameters.open_cost, parameters.extend_cost)

    @property
    def rounds_to_even(self) -> bool:
        return self.penalty in _EVEN_SCORE_PENALTIES.get(self.reward, ())

    def raw_score(self, nident: int, mismatch: int, gapopen: int, gaps: int):
        return (self.reward * nident - self.penalty * mismatch
                - self.open_cost * gapopen - self.extend_cost * gaps)

    def _adjusted_score(self, raw_score: float, parameters: Optional[PasteParameters]) -> float:
        if not self.rounds_to_even:
            return raw_score
        epsilon = (parameters or PasteParameters()).float_epsilon
        return next_lower_even(raw_score, epsilon)

    def bitscore(self, raw_score: float, parameters: Optional[PasteParameters] = None) -> float:
        """Bit-score: (lambda * S - ln k) / ln 2."""
        score = self._adjusted_score(raw_score, parameters)
        return (self.lambda_ * score - math.log(self.k)) / math.log(2)

    def evalue(self, raw_score: float, qlen: int,
               parameters: Optional[PasteParameters] = None) -> float:
        """E-value: k * qlen * db_size * exp(-lambda * S)."""
        score = self._adjusted_score(raw_score, parameters)
        try:
            return self.k * qlen * self.db_size * math.exp(-self.lambda_ * score)
        except OverflowError:
            return math.inf
