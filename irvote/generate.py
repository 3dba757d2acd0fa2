"""Generate random rankings for election simulations.

The rankings are produced in the form accepted by
:meth:`irvote.election.Election.add_ballot`, i.e. as the ranks of the
candidate slots. Without weights, every permutation is equally likely
(the so-called impartial culture). With weights, the favourite is drawn
first with probability proportional to the weights, then the second
favourite from the rest, etc.
"""

import random
import string
from numbers import Number
from typing import List, Optional, Sequence, Tuple


def default_candidate_names(n: int) -> List[str]:
    """Return n candidate names A, B, C..."""
    if n > len(string.ascii_uppercase):
        raise NotImplementedError
    return list(string.ascii_uppercase[:n])


class RankingGenerator:
    """Generate random complete rankings of a candidate slate.

    :param n_candidates: Number of candidate slots to rank.
    :param weights: Relative popularity of the candidates in slot order.
        If not given, all rankings are equally likely.
    :param random_state: Seed for the random generator.
    """
    def __init__(self,
                 n_candidates: int,
                 weights: Optional[Sequence[Number]] = None,
                 random_state: Optional[int] = None,
                 ):
        if weights is not None:
            if len(weights) != n_candidates:
                raise ValueError(
                    f'got {len(weights)} weights for {n_candidates} candidates'
                )
            if any(weight <= 0 for weight in weights):
                raise ValueError(f'weights must be positive: {weights}')
        self.n_candidates = n_candidates
        self.weights = weights
        self.random_state = random_state
        self._random = random.Random(random_state)

    def generate(self, n: int) -> List[Tuple[int, ...]]:
        """Generate n rankings."""
        return [self.generate_one() for i in range(n)]

    def generate_one(self) -> Tuple[int, ...]:
        order = self._draw_order()
        ranks = [0] * self.n_candidates
        for rank, slot in enumerate(order, start=1):
            ranks[slot] = rank
        return tuple(ranks)

    def _draw_order(self) -> List[int]:
        slots = list(range(self.n_candidates))
        if self.weights is None:
            self._random.shuffle(slots)
            return slots
        weights = list(self.weights)
        order = []
        while slots:
            i = self._random.choices(range(len(slots)), weights=weights)[0]
            order.append(slots.pop(i))
            weights.pop(i)
        return order
