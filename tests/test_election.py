import sys
import os
import logging

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import irvote.ballot
import irvote.candidate
import irvote.core
import irvote.election
import irvote.generate
from irvote.election import ElectionState, RoundOutcome


def make_election(candidates, ballots=(), **kwargs):
    election = irvote.election.Election(len(candidates), **kwargs)
    for name in candidates:
        election.add_candidate(name)
    for ranks in ballots:
        election.add_ballot(ranks)
    return election


def test_majority():
    election = make_election(['Alice', 'Bob'], [(1, 2), (1, 2), (2, 1)])
    assert election.select_winner() == ['Alice']


def test_majority_short_circuit():
    election = make_election(
        ['A', 'B', 'C'],
        [(1, 2, 3)] * 3 + [(2, 1, 3), (3, 2, 1)],
    )
    assert election.select_winner() == ['A']
    assert election.eliminated_candidates() == []
    assert len(election.rounds) == 1
    assert election.rounds[0].outcome is RoundOutcome.MAJORITY


def test_single_elimination_then_winner():
    election = make_election(
        ['A', 'B', 'C'],
        [(1, 2, 3)] * 2 + [(2, 1, 3)] * 2 + [(3, 2, 1)],
    )
    assert election.select_winner() == ['B']
    first, second = election.rounds
    assert first.counts == {'A': 2, 'B': 2, 'C': 1}
    assert first.total == 5
    assert first.threshold == 3
    assert first.outcome is RoundOutcome.ELIMINATION
    assert first.eliminated == 'C'
    assert first.transfers == {'B': 1}
    assert second.counts == {'A': 2, 'B': 3}
    assert second.outcome is RoundOutcome.MAJORITY
    assert second.winners == ['B']


def test_two_way_tie():
    election = make_election(['A', 'B'], [(1, 2), (2, 1)])
    assert election.select_winner() == ['A', 'B']
    assert election.rounds[0].outcome is RoundOutcome.TIE
    assert election.eliminated_candidates() == []


def test_three_way_full_tie():
    election = make_election(
        ['A', 'B', 'C'],
        [(1, 2, 3), (2, 1, 3), (3, 2, 1)],
    )
    assert election.select_winner() == ['A', 'B', 'C']


def test_tie_order_follows_slots():
    election = make_election(['Zed', 'Amy'], [(2, 1), (1, 2)])
    assert election.select_winner() == ['Zed', 'Amy']


def test_exhausted_field_tie():
    # C has no first preferences, the leaders cannot be separated
    election = make_election(
        ['A', 'B', 'C'],
        [(1, 2, 3), (1, 3, 2), (2, 1, 3), (3, 1, 2)],
    )
    assert election.select_winner() == ['A', 'B']
    assert election.eliminated_candidates() == []


def test_tie_after_elimination():
    election = make_election(
        ['A', 'B', 'C', 'D'],
        [(1, 2, 3, 4)] * 2 + [(2, 1, 3, 4)] * 2 + [(4, 3, 2, 1)] + [(3, 4, 1, 2)],
    )
    # round 1: A=2, B=2, C=1, D=1 - C is first of the lowest in slot order
    assert election.select_winner() == ['A', 'B', 'D']
    assert [c.name for c in election.eliminated_candidates()] == ['C']
    assert election.rounds[-1].counts == {'A': 2, 'B': 2, 'D': 2}


def test_elimination_leads_to_tie():
    election = make_election(
        ['A', 'B', 'C'],
        [(1, 2, 3)] * 3 + [(2, 1, 3)] * 2 + [(3, 1, 2)] * 2 + [(2, 3, 1)],
    )
    # no majority of 8 (5 to win): A=3, B=4, C=1 -> C out, its ballot to A
    assert election.select_winner() == ['A', 'B']
    assert election.rounds[1].counts == {'A': 4, 'B': 4}


def test_multiple_eliminations():
    election = make_election(
        ['A', 'B', 'C', 'D'],
        [(1, 2, 3, 4)] * 4
        + [(2, 1, 3, 4)] * 3
        + [(3, 2, 1, 4)] * 2
        + [(4, 2, 3, 1)],
    )
    # 10 ballots, 6 to win; D out -> B=4, then C out -> B=6
    winners = election.select_winner()
    assert [c.name for c in election.eliminated_candidates()] == ['D', 'C']
    assert election.rounds[1].counts == {'A': 4, 'B': 4, 'C': 2}
    assert election.rounds[2].counts == {'A': 4, 'B': 6}
    assert winners == ['B']


def test_no_ballots():
    election = make_election(['A', 'B', 'C'])
    assert election.select_winner() == ['A', 'B', 'C']


def test_single_candidate():
    election = make_election(['A'], [(1,), (1,)])
    assert election.select_winner() == ['A']


@pytest.mark.parametrize('ranks', [
    (1, 2),
    (1, 2, 3, 4),
    (1, 1, 2),
    (0, 1, 2),
    (2, 3, 4),
    (),
])
def test_invalid_ballot_leaves_state(ranks):
    election = make_election(['A', 'B', 'C'], [(1, 2, 3)])
    with pytest.raises(irvote.ballot.InvalidBallotError):
        election.add_ballot(ranks)
    assert election.n_ballots == 1
    assert election.vote_counts() == {'A': 1, 'B': 0, 'C': 0}


def test_add_ballots_stops_at_invalid():
    election = make_election(['A', 'B'])
    with pytest.raises(irvote.ballot.InvalidBallotError):
        election.add_ballots([(1, 2), (2, 1), (2, 2), (1, 2)])
    assert election.n_ballots == 2


def test_capacity_exceeded():
    election = make_election(['A', 'B'])
    with pytest.raises(irvote.election.CandidateCapacityExceededError):
        election.add_candidate('C')
    assert election.candidate_names() == ['A', 'B']


def test_duplicate_candidate():
    election = irvote.election.Election(2)
    election.add_candidate('A')
    with pytest.raises(irvote.candidate.DuplicateCandidateError):
        election.add_candidate('A')
    assert election.candidate_names() == ['A']


def test_slots_assigned_in_order():
    election = make_election(['A', 'B', 'C'])
    assert [c.slot for c in election.candidates] == [0, 1, 2]


@pytest.mark.parametrize('n_candidates', [0, -1, 1.5, True, None])
def test_invalid_candidate_count(n_candidates):
    with pytest.raises(irvote.core.ElectionSetupError):
        irvote.election.Election(n_candidates)


def test_ballot_before_slate_complete():
    election = irvote.election.Election(3)
    election.add_candidate('A')
    with pytest.raises(irvote.core.ElectionSetupError):
        election.add_ballot((1, 2, 3))
    with pytest.raises(irvote.core.ElectionSetupError):
        election.select_winner()
    assert election.n_ballots == 0


def test_add_ranked_order():
    election = make_election(['Alice', 'Bob', 'Carol'])
    election.add_ranked_order(['Carol', 'Alice', 'Bob'])
    assert election.vote_counts() == {'Alice': 0, 'Bob': 0, 'Carol': 1}
    with pytest.raises(irvote.ballot.InvalidBallotError):
        election.add_ranked_order(['Carol', 'Dave', 'Bob'])
    assert election.n_ballots == 1


def test_states():
    election = make_election(['A', 'B'], [(1, 2)])
    assert election.state is ElectionState.COLLECTING
    assert election.winners is None
    election.select_winner()
    assert election.state is ElectionState.DECIDED
    assert election.winners == ['A']
    election.add_ballot((2, 1))
    assert election.state is ElectionState.COLLECTING


def test_repeated_selection():
    election = make_election(
        ['A', 'B', 'C'],
        [(1, 2, 3)] * 2 + [(2, 1, 3)] * 2 + [(3, 2, 1)],
    )
    assert election.select_winner() == ['B']
    assert election.select_winner() == ['B']
    assert len(election.eliminated_candidates()) == 1


def test_ballot_after_elimination_skips_eliminated():
    election = make_election(
        ['A', 'B', 'C'],
        [(1, 2, 3)] * 2 + [(2, 1, 3)] * 2 + [(3, 2, 1)],
    )
    election.select_winner()
    election.add_ballot((2, 3, 1))
    assert election.vote_counts() == {'A': 3, 'B': 3}
    assert election.select_winner() == ['A', 'B']


def test_conservation_and_monotonic_elimination():
    gen = irvote.generate.RankingGenerator(6, random_state=1711)
    election = make_election(
        irvote.generate.default_candidate_names(6), gen.generate(101)
    )
    n_active = 6
    while True:
        assert sum(election.vote_counts().values()) == 101
        tally_round = election.next_round()
        if tally_round.outcome is not RoundOutcome.ELIMINATION:
            break
        n_active -= 1
        assert len(election.active_candidates()) == n_active
        assert tally_round.eliminated not in election.vote_counts()
        assert sum(tally_round.transfers.values()) == tally_round.counts[
            tally_round.eliminated
        ]
    assert tally_round.outcome is RoundOutcome.MAJORITY
    assert len(election.rounds) <= 6


@pytest.mark.parametrize('seed', range(10))
def test_random_elections_terminate(seed):
    gen = irvote.generate.RankingGenerator(5, random_state=seed)
    election = make_election(list('ABCDE'), gen.generate(seed * 3))
    winners = election.select_winner()
    assert winners
    assert len(election.eliminated_candidates()) <= 4
    eliminated = [c.name for c in election.eliminated_candidates()]
    assert len(set(eliminated)) == len(eliminated)
    assert not set(winners) & set(eliminated)


def test_conservation_violation_detected():
    election = make_election(
        ['A', 'B', 'C'],
        [(1, 2, 3)] * 2 + [(2, 1, 3)] * 2 + [(3, 2, 1)],
    )
    # a ballot lost outside of the tally
    election._ballots.append(irvote.ballot.Ballot((1, 2, 3), ballot_id=99))
    with pytest.raises(irvote.core.TallyStateError):
        election.select_winner()


def test_votes_to_win():
    assert irvote.election.votes_to_win(0) == 1
    assert irvote.election.votes_to_win(5) == 3
    assert irvote.election.votes_to_win(6) == 4


def test_logs_rounds(caplog):
    election = make_election(
        ['A', 'B', 'C'],
        [(1, 2, 3)] * 2 + [(2, 1, 3)] * 2 + [(3, 2, 1)],
    )
    with caplog.at_level(logging.INFO, logger='irvote.election'):
        election.select_winner()
    assert 'eliminating C' in caplog.text
    assert 'B has a majority' in caplog.text


def test_transfer_skips_earlier_eliminated():
    election = make_election(
        ['A', 'B', 'C', 'D'],
        [(1, 2, 3, 4)] * 3
        + [(3, 1, 2, 4)]
        + [(2, 3, 1, 4)] * 2
        + [(4, 2, 3, 1)] * 2,
    )
    # B goes first; D's ballots then pass over B to reach C
    assert election.select_winner() == ['C']
    first, second, third = election.rounds
    assert first.eliminated == 'B'
    assert first.transfers == {'C': 1}
    assert second.counts == {'A': 3, 'C': 3, 'D': 2}
    assert second.eliminated == 'D'
    assert second.transfers == {'C': 2}
    assert third.counts == {'A': 3, 'C': 5}
    assert third.outcome is RoundOutcome.MAJORITY
    assert [c.name for c in election.eliminated_candidates()] == ['B', 'D']


def test_next_round_before_slate_complete():
    election = irvote.election.Election(2)
    with pytest.raises(irvote.core.ElectionSetupError):
        election.next_round()
    assert election.rounds == []
