'''Errors shared by the ballot, candidate and election modules.'''


class TallyStateError(Exception):
    '''An election with valid input ended up in an inconsistent state.

    Raised (through its subclasses) when an internal invariant of the tally
    is violated - a ballot with no remaining preference, a candidate
    eliminated twice, a ballot counted for the wrong candidate or ballots lost
    during redistribution. These are not input errors and signal a bug in the
    orchestration; they should not be caught and recovered from.
    '''
    pass


class ElectionSetupError(ValueError):
    '''The election is not set up for the requested operation.

    E.g. ballots added before all candidate slots have been filled.
    '''
    pass
