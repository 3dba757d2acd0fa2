"""A commandline tool for quick evaluation of instant-runoff elections.

Candidates are given in slot order; every ballot is given as the ranks of the
candidates in that order, separated by commas (``2,1,3`` ranks the second
candidate first). Random ballots can be generated instead for simulations.
"""

import argparse
import logging
import sys
from typing import List, Optional, Sequence, Tuple

import irvote.generate
from irvote.ballot import InvalidBallotError
from irvote.candidate import DuplicateCandidateError
from irvote.election import Election, RoundOutcome, TallyRound


def ranking(text: str) -> Tuple[int, ...]:
    try:
        return tuple(int(part) for part in text.split(','))
    except ValueError as e:
        raise argparse.ArgumentTypeError(
            f'ballot must be comma-separated integer ranks: {text!r}'
        ) from e


argparser = argparse.ArgumentParser(
    prog='irvote',
    description=__doc__,
    formatter_class=argparse.ArgumentDefaultsHelpFormatter,
)
argparser.add_argument(
    '-c', '--candidates',
    nargs='+',
    help='names of the candidates, in slot order',
)
argparser.add_argument(
    '-b', '--ballot',
    dest='ballots',
    type=ranking,
    action='append',
    default=[],
    help='a ballot as comma-separated ranks; repeat for more ballots',
)
argparser.add_argument(
    '-g', '--generate',
    type=int,
    default=0,
    help='add this many uniformly random ballots',
)
argparser.add_argument(
    '-s', '--seed',
    type=int,
    help='random seed for generated ballots',
)
argparser.add_argument(
    '-r', '--show-rounds',
    action='store_true',
    help='show vote totals of every counting round',
)
argparser.add_argument(
    '-v', '--verbose',
    action='store_true',
    help='show all tally log messages',
)
argparser.add_argument(
    '-q', '--quiet',
    action='store_true',
    help='do not show any tally log messages',
)


def main(candidates: List[str],
         ballots: Sequence[Tuple[int, ...]] = (),
         generate: int = 0,
         seed: Optional[int] = None,
         show_rounds: bool = False,
         verbose: bool = False,
         quiet: bool = False,
         ) -> int:
    logging.basicConfig(
        level=(
            logging.DEBUG if verbose
            else (logging.WARNING if quiet else logging.INFO)
        ),
        format='%(levelname)-10s %(message)s'
    )
    election = Election(len(candidates))
    try:
        for name in candidates:
            election.add_candidate(name)
    except DuplicateCandidateError as e:
        print(f'error: {e}', file=sys.stderr)
        return 2
    if generate:
        gen = irvote.generate.RankingGenerator(
            len(candidates), random_state=seed
        )
        ballots = list(ballots) + gen.generate(generate)
    try:
        election.add_ballots(ballots)
    except InvalidBallotError as e:
        print(f'error: {e}', file=sys.stderr)
        return 2
    print(f'Received {election.n_ballots} ballots'
          f' for {len(candidates)} candidates')
    winners = election.select_winner()
    if show_rounds:
        print()
        for tally_round in election.rounds:
            show_round(tally_round)
    print()
    if len(winners) == 1:
        print('Elected', ' ', winners[0])
    else:
        print('Tied', ' ', ', '.join(winners))
    return 0


def show_round(tally_round: TallyRound) -> None:
    print(f'Round {tally_round.number}'
          f' ({tally_round.total} ballots, {tally_round.threshold} to win)')
    n_just_chars = len(max(tally_round.counts.keys(), key=len))
    for name, count in tally_round.counts.items():
        print(' ' * 4 + name.ljust(n_just_chars), ' ', count)
    if tally_round.outcome is RoundOutcome.ELIMINATION:
        transfers = ', '.join(
            f'{n} to {name}' for name, n in tally_round.transfers.items()
        )
        print(f'    {tally_round.eliminated} eliminated'
              + (f', ballots transferred: {transfers}' if transfers else ''))


def run() -> None:
    args = argparser.parse_args()
    if not args.candidates:
        argparser.print_usage()
    else:
        sys.exit(main(**vars(args)))


if __name__ == '__main__':
    run()
