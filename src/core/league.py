"""
League table simulation over a generated round.
"""
from typing import List, Dict

from core.elimination import NO_MATCHES_ERROR
from core.models import Match, BYE

POINTS_WIN = 3
POINTS_DRAW = 1


def _empty_record(name: str) -> Dict:
    return {'name': name, 'points': 0, 'wins': 0, 'draws': 0, 'losses': 0}


def build_league_table(matches: List[Match], outcomes,
                       home_win_probability: float = 0.45,
                       away_win_probability: float = 0.45) -> List[Dict]:
    """
    Play every match once and rank the teams by points.

    A bye counts as a win for the home team. Ties on points keep the order in
    which the teams first appear in ``matches``.
    """
    if not matches:
        raise ValueError(NO_MATCHES_ERROR)

    table = {}
    for match in matches:
        for team in match.teams():
            if team != BYE and team not in table:
                table[team] = _empty_record(team)

    for match in matches:
        home = table[match.home]
        if match.is_bye:
            home['points'] += POINTS_WIN
            home['wins'] += 1
            continue

        away = table[match.away]
        r = outcomes.roll()
        if r < home_win_probability:
            winner, loser = home, away
        elif r < home_win_probability + away_win_probability:
            winner, loser = away, home
        else:
            for record in (home, away):
                record['points'] += POINTS_DRAW
                record['draws'] += 1
            continue
        winner['points'] += POINTS_WIN
        winner['wins'] += 1
        loser['losses'] += 1

    return sorted(table.values(), key=lambda row: row['points'], reverse=True)
