import sys
import os
import collections

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import irvote.ballot
import irvote.generate


def test_rankings_valid():
    gen = irvote.generate.RankingGenerator(5, random_state=1711)
    validator = irvote.ballot.RankingValidator(5)
    rankings = gen.generate(200)
    assert len(rankings) == 200
    for ranks in rankings:
        validator.validate(ranks)


def test_reproducible():
    first = irvote.generate.RankingGenerator(4, random_state=42).generate(20)
    second = irvote.generate.RankingGenerator(4, random_state=42).generate(20)
    assert first == second


def test_weighted_favourite():
    gen = irvote.generate.RankingGenerator(
        3, weights=[20, 1, 1], random_state=1711
    )
    favourites = collections.Counter(
        ranks.index(1) for ranks in gen.generate(500)
    )
    assert favourites.most_common(1)[0][0] == 0


def test_weighted_rankings_valid():
    gen = irvote.generate.RankingGenerator(
        4, weights=[1, 2, 3, 4], random_state=3
    )
    validator = irvote.ballot.RankingValidator(4)
    for ranks in gen.generate(50):
        validator.validate(ranks)


@pytest.mark.parametrize('weights', [[1, 2], [1, 0, 1], [1, -1, 1]])
def test_invalid_weights(weights):
    with pytest.raises(ValueError):
        irvote.generate.RankingGenerator(3, weights=weights)


def test_default_names():
    assert irvote.generate.default_candidate_names(3) == ['A', 'B', 'C']
