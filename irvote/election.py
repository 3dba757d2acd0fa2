'''Instant-runoff election: candidate and ballot intake and the tally.

The :class:`Election` is set up with a fixed number of candidate slots,
filled by :meth:`Election.add_candidate` in slot order. Ballots are then added
as rankings of all slots; each is validated, built into a
:class:`irvote.ballot.Ballot` and put in the pool of its top choice.

:meth:`Election.select_winner` runs the counting rounds. In every round,
the ballots counting for each candidate still in the race are totalled:

1.  If a candidate holds a majority (``total // 2 + 1`` ballots or more),
    they are the sole winner.
2.  If there is no majority but every candidate below the highest count has
    no ballots at all, no elimination can separate the leaders; all
    candidates at the highest count are tied winners. This includes the
    full tie where all candidates have the same count.
3.  Otherwise the candidate with the fewest ballots is eliminated (the first
    one in slot order if several share the lowest count) and each of their
    ballots moves to its next preference still in the race.

Exactly one candidate is eliminated per round, so the tally decides after at
most one round per candidate. Elimination is destructive: the election keeps
its eliminated candidates out of any later tally.
'''

import collections
import dataclasses
import enum
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from irvote.ballot import Ballot, RankingValidator, ranks_from_order
from irvote.candidate import Candidate, DuplicateCandidateError
from irvote.core import TallyStateError, ElectionSetupError

logger = logging.getLogger(__name__)


class CandidateCapacityExceededError(ValueError):
    '''More candidates were added than the election has slots for.

    :param name: Name of the candidate that did not fit.
    :param capacity: Number of candidate slots in the election.
    '''
    def __init__(self, name: str, capacity: int):
        self.name = name
        self.capacity = capacity
        super().__init__(
            f'cannot add candidate {name!r}: all {capacity} slots filled'
        )


class ElectionState(enum.Enum):
    COLLECTING = 'collecting'
    TALLYING = 'tallying'
    DECIDED = 'decided'


class RoundOutcome(enum.Enum):
    MAJORITY = 'majority'
    TIE = 'tie'
    ELIMINATION = 'elimination'


@dataclasses.dataclass
class TallyRound:
    '''A record of a single counting round.'''
    number: int
    counts: Dict[str, int]
    total: int
    threshold: int
    outcome: RoundOutcome
    winners: List[str] = dataclasses.field(default_factory=list)
    eliminated: Optional[str] = None
    transfers: Dict[str, int] = dataclasses.field(default_factory=dict)


def votes_to_win(total: int) -> int:
    '''Return the number of ballots constituting a majority of total.'''
    return total // 2 + 1


class Election:
    '''A single-winner instant-runoff election.

    :param n_candidates: Number of candidate slots. Every ballot must rank
        exactly this many candidates.
    :param check_invariants: Whether to verify after every elimination that
        no ballot was lost or duplicated during the redistribution.
    '''
    def __init__(self, n_candidates: int, check_invariants: bool = True):
        if isinstance(n_candidates, bool) or not isinstance(n_candidates, int):
            raise ElectionSetupError(
                f'candidate count must be an integer, got {n_candidates!r}'
            )
        if n_candidates < 1:
            raise ElectionSetupError(
                f'election needs at least one candidate, got {n_candidates}'
            )
        self.n_candidates = n_candidates
        self.check_invariants = check_invariants
        self.validator = RankingValidator(n_candidates)
        self.state = ElectionState.COLLECTING
        self.rounds: List[TallyRound] = []
        self._candidates: List[Candidate] = []
        self._ballots: List[Ballot] = []
        self._eliminated: List[Candidate] = []
        self._winners: Optional[List[str]] = None

    def __repr__(self) -> str:
        return (
            f'<Election({len(self._candidates)}/{self.n_candidates},'
            f'{len(self._ballots)} ballots,{self.state.value})>'
        )

    @property
    def candidates(self) -> List[Candidate]:
        '''All registered candidates in slot order, eliminated included.'''
        return list(self._candidates)

    @property
    def n_ballots(self) -> int:
        return len(self._ballots)

    @property
    def winners(self) -> Optional[List[str]]:
        '''Names of the winners of the last decided tally, if any.'''
        if self._winners is None:
            return None
        return list(self._winners)

    @property
    def is_slate_complete(self) -> bool:
        return len(self._candidates) == self.n_candidates

    def candidate_names(self) -> List[str]:
        return [cand.name for cand in self._candidates]

    def active_candidates(self) -> List[Candidate]:
        '''Candidates still in the race, in slot order.'''
        return [cand for cand in self._candidates if not cand.eliminated]

    def eliminated_candidates(self) -> List[Candidate]:
        '''Eliminated candidates in the order of their elimination.'''
        return list(self._eliminated)

    def vote_counts(self) -> Dict[str, int]:
        '''Return current ballot counts of the active candidates by name.'''
        return {
            cand.name: cand.vote_count for cand in self.active_candidates()
        }

    def add_candidate(self, name: str) -> None:
        '''Register a candidate in the next free slot.

        :raises CandidateCapacityExceededError: If all slots are filled.
        :raises irvote.candidate.DuplicateCandidateError: If a candidate with
            the same name is already registered.
        '''
        if self.is_slate_complete:
            raise CandidateCapacityExceededError(name, self.n_candidates)
        if name in self.candidate_names():
            raise DuplicateCandidateError(name)
        candidate = Candidate(name)
        candidate.assign_slot(len(self._candidates))
        self._candidates.append(candidate)
        logger.debug('registered %r', candidate)

    def add_ballot(self, ranks: Sequence[int]) -> None:
        '''Accept a ballot and count it for its top choice.

        Candidates already eliminated by a previous tally are skipped, so the
        ballot counts for its favourite candidate still in the race.

        :param ranks: Rank of every candidate slot, a permutation of
            1 to n_candidates; 1 marks the favourite.
        :raises irvote.ballot.InvalidBallotError: If the ranking is invalid.
            No ballot is recorded in that case.
        :raises ElectionSetupError: If not all candidates were added yet.
        '''
        self._check_slate()
        self.validator.validate(ranks)
        ballot = Ballot(ranks, ballot_id=len(self._ballots))
        for cand in self._eliminated:
            ballot.mark_eliminated(cand.slot)
        self._candidates[ballot.top_candidate_slot()].receive_ballot(ballot)
        self._ballots.append(ballot)
        if self.state is ElectionState.DECIDED:
            self.state = ElectionState.COLLECTING

    def add_ballots(self, rankings: Iterable[Sequence[int]]) -> None:
        '''Add ballots one by one.

        Stops at the first invalid ranking; ballots added before it remain.
        '''
        for ranks in rankings:
            self.add_ballot(ranks)

    def add_ranked_order(self, order: Iterable[str]) -> None:
        '''Add a ballot given as candidate names, the favourite first.'''
        self._check_slate()
        self.add_ballot(ranks_from_order(order, self.candidate_names()))

    def select_winner(self) -> List[str]:
        '''Run the tally until a winner or a tie emerges.

        :returns: A list with the name of the winner, or with the names of
            all tied candidates in slot order.
        :raises ElectionSetupError: If not all candidates were added yet.
        '''
        self._check_slate()
        self.state = ElectionState.TALLYING
        for _ in range(len(self.active_candidates())):
            tally_round = self.next_round()
            if tally_round.outcome is not RoundOutcome.ELIMINATION:
                self._winners = tally_round.winners
                self.state = ElectionState.DECIDED
                return list(self._winners)
        raise TallyStateError(
            'no decision reached after eliminating all but one candidate'
        )

    def next_round(self) -> TallyRound:
        '''Perform a single counting round and return its record.

        If no candidate wins and the race is not tied, the weakest candidate
        is eliminated and their ballots transferred.
        '''
        self._check_slate()
        active = self.active_candidates()
        counts = {cand.name: cand.vote_count for cand in active}
        total = sum(counts.values())
        threshold = votes_to_win(total)
        number = len(self.rounds) + 1
        logger.info('round %d vote totals: %s, %d to win',
                    number, counts, threshold)
        top_count = max(counts.values())
        leaders = [
            cand.name for cand in active if cand.vote_count == top_count
        ]
        if top_count >= threshold:
            logger.info('%s has a majority, elected', leaders[0])
            tally_round = TallyRound(
                number, counts, total, threshold, RoundOutcome.MAJORITY,
                winners=leaders[:1],
            )
        elif all(count == 0 for count in counts.values()
                 if count != top_count):
            logger.info('%s tied, no elimination can separate them', leaders)
            tally_round = TallyRound(
                number, counts, total, threshold, RoundOutcome.TIE,
                winners=leaders,
            )
        else:
            loser = min(active, key=lambda cand: cand.vote_count)
            transfers = self._eliminate(loser)
            tally_round = TallyRound(
                number, counts, total, threshold, RoundOutcome.ELIMINATION,
                eliminated=loser.name, transfers=transfers,
            )
        self.rounds.append(tally_round)
        return tally_round

    def _eliminate(self, loser: Candidate) -> Dict[str, int]:
        logger.info('eliminating %s with %d ballots',
                    loser.name, loser.vote_count)
        released = loser.eliminate()
        self._eliminated.append(loser)
        transfers = collections.Counter()
        for ballot in released:
            for cand in self._eliminated:
                ballot.mark_eliminated(cand.slot)
            recipient = self._candidates[ballot.top_candidate_slot()]
            recipient.receive_ballot(ballot)
            transfers[recipient.name] += 1
        logger.debug('transferred from %s: %s', loser.name, dict(transfers))
        if self.check_invariants:
            self._check_conservation()
        return dict(transfers)

    def _check_conservation(self) -> None:
        n_counted = sum(cand.vote_count for cand in self.active_candidates())
        if n_counted != len(self._ballots):
            raise TallyStateError(
                f'{n_counted} ballots counted for active candidates, '
                f'{len(self._ballots)} accepted'
            )

    def _check_slate(self) -> None:
        if not self.is_slate_complete:
            raise ElectionSetupError(
                f'only {len(self._candidates)} of {self.n_candidates}'
                ' candidates added'
            )
