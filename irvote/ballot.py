'''Ranked ballots and their validation.

A ballot holds a complete ranking of the candidates on the slate: for each
candidate slot (the position of the candidate in the order of registration),
it gives the rank the voter assigned to them, 1 being the favourite and *n*
the least preferred of *n* candidates. A valid ranking is therefore
a permutation of the numbers 1 to *n*.

The ranking itself never changes once the ballot is created. What changes
during the tally is the set of slots that are no longer eligible on the
ballot because their candidates were eliminated; the top remaining candidate
is the eligible slot with the lowest rank.

Rankings are validated by :class:`RankingValidator` before a ballot is built.
If a ranking is invalid, it raises :class:`InvalidBallotError`.
'''

import abc
import collections.abc
from numbers import Integral
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from irvote.core import TallyStateError


RankingType = Tuple[int, ...]


class BallotError(Exception, metaclass=abc.ABCMeta):
    '''A ballot is invalid or unusable in the tally.'''
    pass


class InvalidBallotError(BallotError, ValueError):
    '''A ranking is not a permutation of 1 to n.

    :param ranks: The ranking that was found to be invalid.
    :param reason: What is wrong with the ranking.
    '''
    def __init__(self, ranks: Any, reason: Optional[str] = None):
        self.ranks = ranks
        self.reason = reason
        message = f'invalid ballot: {ranks!r}'
        if reason:
            message += f', {reason}'
        super().__init__(message)


class ExhaustedBallotError(BallotError, TallyStateError):
    '''A ballot has no eligible candidate left.

    :param ballot: The exhausted ballot.
    '''
    def __init__(self, ballot: 'Ballot'):
        self.ballot = ballot
        super().__init__(f'no eligible candidate remains on {ballot!r}')


class RankingValidator:
    '''Validate that a ranking is a permutation of 1 to n_candidates.

    :param n_candidates: Number of candidates on the slate, which is both
        the required length of the ranking and its highest allowed rank.
    '''
    def __init__(self, n_candidates: int):
        self.n_candidates = n_candidates

    def validate(self, ranks: Any) -> None:
        '''Check that the ranking is valid.

        :param ranks: A sequence of integer ranks, one per candidate slot.
        :raises InvalidBallotError: If the ranking is not a sequence of
            integers, has the wrong length, or is not a permutation.
        '''
        if isinstance(ranks, (str, bytes)) or not isinstance(
            ranks, collections.abc.Sequence
        ):
            raise InvalidBallotError(ranks, 'must be a sequence of ranks')
        if len(ranks) != self.n_candidates:
            raise InvalidBallotError(
                ranks, f'must rank exactly {self.n_candidates} candidates'
            )
        for rank in ranks:
            if isinstance(rank, bool) or not isinstance(rank, Integral):
                raise InvalidBallotError(ranks, f'non-integer rank {rank!r}')
            if not 1 <= rank <= self.n_candidates:
                raise InvalidBallotError(
                    ranks, f'rank {rank} out of range 1-{self.n_candidates}'
                )
        if len(set(ranks)) < len(ranks):
            raise InvalidBallotError(ranks, 'duplicated ranks')

    def is_valid(self, ranks: Any) -> bool:
        '''Return True if the ranking is valid, False otherwise.'''
        try:
            self.validate(ranks)
        except InvalidBallotError:
            return False
        return True


class Ballot:
    '''A single voter's ranking of all candidates.

    The ranking is assumed to be valid (see :class:`RankingValidator`).

    :param ranks: Ranks given to the candidate slots; ``ranks[i]`` is the
        rank of the candidate in slot ``i``.
    :param ballot_id: Identifier of the ballot within its election.
    '''
    def __init__(self, ranks: Sequence[int], ballot_id: int = 0):
        self.ranks: RankingType = tuple(int(rank) for rank in ranks)
        self.ballot_id = ballot_id
        self._eliminated: Set[int] = set()

    def __repr__(self) -> str:
        return f'<Ballot({self.ballot_id},{self.ranks})>'

    def __len__(self) -> int:
        return len(self.ranks)

    @property
    def eliminated(self) -> Set[int]:
        '''Slots no longer eligible to be the top choice of this ballot.'''
        return set(self._eliminated)

    @property
    def is_exhausted(self) -> bool:
        return len(self._eliminated) >= len(self.ranks)

    def mark_eliminated(self, slot: int) -> None:
        '''Make the candidate in the given slot ineligible on this ballot.

        Marking a slot more than once has no further effect.

        :raises IndexError: If the slot does not exist on the ballot.
        '''
        if not 0 <= slot < len(self.ranks):
            raise IndexError(f'no candidate slot {slot} on {self!r}')
        self._eliminated.add(slot)

    def top_candidate_slot(self) -> int:
        '''Return the slot of the best ranked candidate still eligible.

        :raises ExhaustedBallotError: If all slots have been eliminated.
        '''
        best_slot = None
        for slot, rank in enumerate(self.ranks):
            if slot in self._eliminated:
                continue
            if best_slot is None or rank < self.ranks[best_slot]:
                best_slot = slot
        if best_slot is None:
            raise ExhaustedBallotError(self)
        return best_slot

    def preference_order(self) -> List[int]:
        '''Return all slots ordered from the favourite to the last.'''
        return sorted(range(len(self.ranks)), key=self.ranks.__getitem__)

    def remaining_preferences(self) -> List[int]:
        '''Return the eligible slots ordered from the favourite.'''
        return [
            slot for slot in self.preference_order()
            if slot not in self._eliminated
        ]


def ranks_from_order(order: Iterable[str],
                     candidates: Sequence[str],
                     ) -> RankingType:
    '''Convert a preference order of candidate names to a ranking.

    :param order: Names of all candidates, the favourite first.
    :param candidates: Names of the candidates in slot order.
    :returns: Ranks for the candidate slots, as accepted by
        :meth:`irvote.election.Election.add_ballot`.
    :raises InvalidBallotError: If the order contains unknown or duplicated
        names or does not rank all candidates.
    '''
    order = list(order)
    slots: Dict[str, int] = {name: i for i, name in enumerate(candidates)}
    ranks = [0] * len(candidates)
    for rank, name in enumerate(order, start=1):
        if name not in slots:
            raise InvalidBallotError(order, f'unknown candidate {name!r}')
        slot = slots[name]
        if ranks[slot]:
            raise InvalidBallotError(order, f'{name!r} ranked twice')
        ranks[slot] = rank
    if len(order) != len(candidates):
        raise InvalidBallotError(
            order, f'must rank exactly {len(candidates)} candidates'
        )
    return tuple(ranks)


def order_from_ranks(ranks: Sequence[int],
                     candidates: Sequence[str],
                     ) -> List[str]:
    '''Convert a valid ranking to candidate names, the favourite first.'''
    return [
        candidates[slot]
        for slot in sorted(range(len(ranks)), key=ranks.__getitem__)
    ]
