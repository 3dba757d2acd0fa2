'''Candidates and the pools of ballots counting for them.

A :class:`Candidate` is identified by its name and by the slot it was given
when registered in an election. During the tally, it holds the ballots that
currently rank it highest among the candidates still in the race; its vote
count is the size of that pool. On elimination, the pool is handed back to
the election for redistribution and the candidate never receives a ballot
again.
'''

from typing import Any, Dict, List, Optional

from irvote.ballot import Ballot
from irvote.core import TallyStateError


class CandidateError(Exception):
    '''A candidate is invalid or was used inconsistently.

    :param candidate: Candidate that the error concerns.
    :param message: Description of the problem.
    '''
    def __init__(self, candidate: Any, message: Optional[str] = None):
        self.candidate = candidate
        if message is None:
            message = f'invalid candidate: {candidate}'
        super().__init__(message)


class DuplicateCandidateError(CandidateError, ValueError):
    '''A candidate with the same name is already registered.'''
    def __init__(self, candidate: Any):
        super().__init__(
            candidate, f'candidate {candidate!r} is already registered'
        )


class AlreadyEliminatedError(CandidateError, TallyStateError):
    '''A candidate was eliminated for the second time.'''
    def __init__(self, candidate: 'Candidate'):
        super().__init__(candidate, f'{candidate!r} is already eliminated')


class EliminatedCandidateError(CandidateError, TallyStateError):
    '''A ballot was given to a candidate that is out of the race.'''
    def __init__(self, candidate: 'Candidate', ballot: Ballot):
        self.ballot = ballot
        super().__init__(
            candidate, f'{candidate!r} eliminated, cannot receive {ballot!r}'
        )


class MisallocatedBallotError(CandidateError, TallyStateError):
    '''A ballot was given to a candidate it does not currently count for.'''
    def __init__(self, candidate: 'Candidate', ballot: Ballot, reason: str):
        self.ballot = ballot
        super().__init__(
            candidate, f'{ballot!r} misallocated to {candidate!r}: {reason}'
        )


class Candidate:
    '''A candidate accumulating the ballots that currently count for them.

    :param name: Name of the candidate, as reported in the election result.
    '''
    def __init__(self, name: str):
        self.name = name
        self.slot: Optional[int] = None
        self.eliminated = False
        self._pool: Dict[int, Ballot] = {}

    def __repr__(self) -> str:
        return (
            f'<Candidate({self.name}'
            + (f',{self.slot}' if self.slot is not None else '')
            + (',eliminated' if self.eliminated else '')
            + ')>'
        )

    def assign_slot(self, slot: int) -> None:
        '''Fix the slot of the candidate in the election.

        :raises CandidateError: If a different slot was already assigned.
        '''
        if self.slot is not None and self.slot != slot:
            raise CandidateError(
                self, f'{self!r} already registered in slot {self.slot}'
            )
        self.slot = slot

    @property
    def vote_count(self) -> int:
        return len(self._pool)

    def current_vote_count(self) -> int:
        '''Return the number of ballots currently counting for them.'''
        return len(self._pool)

    def ballots(self) -> List[Ballot]:
        '''Return the ballots in the pool, in the order they were received.'''
        return list(self._pool.values())

    def receive_ballot(self, ballot: Ballot) -> None:
        '''Add a ballot to the pool of the candidate.

        The ballot must currently rank this candidate highest of all eligible
        candidates.

        :raises EliminatedCandidateError: If the candidate is eliminated.
        :raises MisallocatedBallotError: If the ballot is already in the pool
            or its top choice is another candidate.
        '''
        if self.eliminated:
            raise EliminatedCandidateError(self, ballot)
        if ballot.ballot_id in self._pool:
            raise MisallocatedBallotError(self, ballot, 'already in pool')
        top_slot = ballot.top_candidate_slot()
        if top_slot != self.slot:
            raise MisallocatedBallotError(
                self, ballot, f'top choice is slot {top_slot}'
            )
        self._pool[ballot.ballot_id] = ballot

    def eliminate(self) -> List[Ballot]:
        '''Remove the candidate from the race and release their ballots.

        :returns: The ballots that were counting for the candidate; the pool
            is left empty.
        :raises AlreadyEliminatedError: If the candidate was eliminated before.
        '''
        if self.eliminated:
            raise AlreadyEliminatedError(self)
        self.eliminated = True
        released = list(self._pool.values())
        self._pool.clear()
        return released
