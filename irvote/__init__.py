'''Irvote - an instant-runoff voting tally engine.

An instant-runoff (ranked-choice) election is run on a fixed slate of
candidates. Every voter ranks all of them; a ballot counts for its highest
ranked candidate still in the race. When no candidate holds a majority of the
ballots, the weakest candidate is eliminated and their ballots move on to
their next preference, until a candidate wins or the remaining leaders are
tied.

The package is organized bottom-up:

-   The :mod:`ballot` module holds the :class:`Ballot` object (a fixed ranking
    with its own elimination state) and the validation of rankings.
-   The :mod:`candidate` module holds the :class:`Candidate` accumulating the
    ballots currently counting for it.
-   The :mod:`election` module holds the :class:`Election` that accepts
    candidates and ballots and runs the elimination rounds.
-   The :mod:`generate` module produces random rankings for simulations.
'''

from irvote.ballot import Ballot, InvalidBallotError, ExhaustedBallotError
from irvote.candidate import Candidate, AlreadyEliminatedError
from irvote.core import TallyStateError, ElectionSetupError
from irvote.election import Election, CandidateCapacityExceededError

__all__ = [
    'Ballot',
    'Candidate',
    'Election',
    'InvalidBallotError',
    'ExhaustedBallotError',
    'AlreadyEliminatedError',
    'CandidateCapacityExceededError',
    'TallyStateError',
    'ElectionSetupError',
]
