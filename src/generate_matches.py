import argparse
import json
import os
from core.models import Match, Prediction, BYE
from core.outcomes import RandomOutcomes


def load_team_names(file_path):
    """Team names from a teams.json store, in file order. A missing file means no teams."""
    if not os.path.exists(file_path):
        return []
    with open(file_path, mode='r', encoding='utf-8') as file:
        teams_data = json.load(file)
    return list(teams_data.keys()) if teams_data else []


def generate_first_round(team_names, outcomes):
    """
    Randomly pair teams into a single round.

    An odd field gets the ``Bye`` sentinel appended after shuffling; whoever is
    paired with it advances without a prediction. Every other match gets a
    predicted winner and confidence from ``outcomes``.
    """
    entrants = outcomes.shuffle(team_names)
    if len(entrants) % 2 != 0:
        entrants.append(BYE)

    matches = []
    for i in range(0, len(entrants), 2):
        home, away = entrants[i], entrants[i + 1]
        if away == BYE:
            matches.append(Match(home=home))
            continue
        prediction = Prediction(outcomes.pick_winner(home, away), outcomes.confidence())
        matches.append(Match(home=home, away=away, prediction=prediction))
    return matches


def format_match(match):
    if match.is_bye:
        return f"{match.home} advances automatically"
    return (f"{match.home} vs {match.away} -> Predicted Winner: "
            f"{match.prediction.winner} ({match.prediction.confidence}%)")


def main(argv=None):
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description='Generate a random first round from a teams file.')
    parser.add_argument('teams_file', nargs='?', default=os.path.join(base_dir, 'data', 'teams.json'))
    parser.add_argument('--seed', type=int, default=None, help='Seed for reproducible pairings')
    args = parser.parse_args(argv)

    team_names = load_team_names(args.teams_file)
    if not team_names:
        print(f"No teams loaded. Check {args.teams_file}")
        return 1

    matches = generate_first_round(team_names, RandomOutcomes(seed=args.seed))
    for match in matches:
        print(format_match(match))
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
