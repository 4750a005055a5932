"""
Single elimination (cup) bracket simulation.
"""
import math
from typing import List, Dict

from core.models import Match

NO_MATCHES_ERROR = "No matches generated yet"
ROUND_LABEL_STYLES = ('neutral', 'legacy')


def count_rounds(first_round_size: int) -> int:
    """Number of rounds needed when the first round has ``first_round_size`` matches."""
    if first_round_size <= 0:
        return 0
    return 1 + math.ceil(math.log2(first_round_size))


def get_round_name(round_number: int, total_rounds: int, style: str = 'neutral') -> str:
    """
    Get the display name of a round (1-based).

    ``neutral`` names rounds by their distance from the final, so the labels are
    right for any bracket size. ``legacy`` reproduces the old fixed labels:
    SEMIFINAL, FINAL, then ROUND <n>.
    """
    if style == 'legacy':
        if round_number == 1:
            return "SEMIFINAL"
        elif round_number == 2:
            return "FINAL"
        return f"ROUND {round_number}"

    remaining = total_rounds - round_number
    if remaining == 0:
        return "Final"
    elif remaining == 1:
        return "Semifinal"
    elif remaining == 2:
        return "Quarterfinal"
    return f"Round {round_number}"


def _first_round_entries(matches: List[Match], outcomes) -> List[Dict]:
    entries = []
    for match in matches:
        if match.is_bye:
            winner, confidence = match.home, 100
        elif match.prediction is not None:
            winner, confidence = match.prediction.winner, match.prediction.confidence
        else:
            # Round handed in without predictions: decide it here
            winner = outcomes.pick_winner(match.home, match.away)
            confidence = outcomes.confidence()
        entries.append({
            'home': match.home,
            'away': match.away,
            'winner': winner,
            'confidence': confidence,
        })
    return entries


def play_next_round(current_round: List[Dict], outcomes) -> List[Dict]:
    """Pair consecutive winners of ``current_round``; an unpaired winner advances."""
    next_round = []
    for i in range(0, len(current_round), 2):
        team1 = current_round[i]['winner']
        team2 = current_round[i + 1]['winner'] if i + 1 < len(current_round) else None
        if team2 is None:
            next_round.append({'home': team1, 'away': None, 'winner': team1, 'confidence': 100})
            continue
        next_round.append({
            'home': team1,
            'away': team2,
            'winner': outcomes.pick_winner(team1, team2),
            'confidence': outcomes.confidence(),
        })
    return next_round


def build_cup_bracket(matches: List[Match], outcomes, label_style: str = 'neutral') -> Dict:
    """
    Simulate a cup from a generated first round.

    The first round keeps its predicted winners; each later round pairs the
    previous winners until one team is left.

    Returns:
        {'bracket': [{'name': ..., 'matches': [...]}, ...], 'winner': team_name}
    """
    if not matches:
        raise ValueError(NO_MATCHES_ERROR)
    if label_style not in ROUND_LABEL_STYLES:
        raise ValueError(f"Unknown round label style: {label_style}")

    total_rounds = count_rounds(len(matches))
    current_round = _first_round_entries(matches, outcomes)
    bracket = [{'name': get_round_name(1, total_rounds, label_style), 'matches': current_round}]

    while len(current_round) > 1:
        current_round = play_next_round(current_round, outcomes)
        bracket.append({
            'name': get_round_name(len(bracket) + 1, total_rounds, label_style),
            'matches': current_round,
        })

    return {'bracket': bracket, 'winner': current_round[0]['winner']}
