#!/usr/bin/env python3
"""
Football Match Manager command-line client

Talks to a running server: lists teams, generates a round and runs the cup or
league simulation over it.

Usage:
    python scripts/match_client.py teams
    python scripts/match_client.py generate --password <admin password>
    python scripts/match_client.py cup --url http://localhost:3000
    python scripts/match_client.py league

    # Simulate the same round more than once
    python scripts/match_client.py generate --password <admin password> --round-file round.json
    python scripts/match_client.py cup --round-file round.json
    python scripts/match_client.py league --round-file round.json

Exit codes:
    0: Success
    1: Login failed
    2: Request failed
"""
import argparse
import json
import os
import sys

import requests

DEFAULT_URL = 'http://localhost:3000'
TIMEOUT_SECONDS = 10


class ClientError(Exception):
    """Server request failed or returned an error status."""


def login(http, base_url: str, password: str) -> bool:
    """Log in as admin. Returns True if the server accepted the password."""
    try:
        response = http.post(f"{base_url}/api/login", json={'password': password}, timeout=TIMEOUT_SECONDS)
    except requests.RequestException as e:
        raise ClientError(f"Login request failed: {e}") from e
    return response.status_code == 200 and response.json().get('ok') is True


def request_json(http, method: str, url: str, **kwargs):
    """Send a request and return the decoded JSON body, raising ClientError on failure."""
    try:
        response = http.request(method, url, timeout=TIMEOUT_SECONDS, **kwargs)
    except requests.RequestException as e:
        raise ClientError(f"{method} {url} failed: {e}") from e
    if response.status_code != 200:
        try:
            body = response.json()
            detail = body.get('error') or body.get('message') or response.text
        except ValueError:
            detail = response.text
        raise ClientError(f"{method} {url} returned {response.status_code}: {detail}")
    return response.json()


def format_teams(teams: dict) -> list:
    lines = []
    for team_name, players in teams.items():
        lines.append(f"{team_name} ({len(players)} players)")
        for p in players:
            lines.append(f"  {p.get('name', '')} - {p.get('position', '')} ({p.get('rating', '')})")
    return lines


def format_matches(matches: list) -> list:
    lines = []
    for m in matches:
        if m.get('away'):
            pred = m.get('prediction') or {}
            lines.append(f"{m['home']} vs {m['away']} -> Predicted Winner: "
                         f"{pred.get('winner')} ({pred.get('confidence')}%)")
        else:
            lines.append(f"{m['home']} advances automatically")
    return lines


def format_cup(data: dict) -> list:
    lines = []
    for r in data['bracket']:
        lines.append(f"{r['name']}:")
        for m in r['matches']:
            if m.get('away'):
                lines.append(f"  {m['home']} vs {m['away']} -> Winner: {m['winner']} ({m['confidence']}%)")
            else:
                lines.append(f"  {m['home']} advances automatically")
    lines.append(f"Winner: {data['winner']}")
    return lines


def ordinal(n: int) -> str:
    """1 -> '1st', 2 -> '2nd', 11 -> '11th', 22 -> '22nd'."""
    if 10 <= n % 100 <= 13:
        suffix = 'th'
    else:
        suffix = {1: 'st', 2: 'nd', 3: 'rd'}.get(n % 10, 'th')
    return f"{n}{suffix}"


def format_league(rows: list) -> list:
    lines = []
    for i, team in enumerate(rows):
        lines.append(f"{ordinal(i + 1)} {team['name']} - {team['points']} pts "
                     f"(W:{team['wins']}, D:{team['draws']}, L:{team['losses']})")
    return lines


def load_round(path: str) -> list:
    """Read a round saved by ``generate --round-file``."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            matches = json.load(f)
    except (OSError, ValueError) as e:
        raise ClientError(f"Could not read round file {path}: {e}") from e
    if not isinstance(matches, list):
        raise ClientError(f"Round file {path} does not contain a list of matches")
    return matches


def save_round(path: str, matches: list):
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(matches, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise ClientError(f"Could not write round file {path}: {e}") from e


def run(command: str, base_url: str, password: str = None, http=None, round_file: str = None) -> int:
    """Run one client command and print its output. Returns the exit code.

    With ``round_file``, ``generate`` saves the round there, and ``cup`` or
    ``league`` simulate the saved round without logging in. If the file does
    not exist yet, a new round is generated and saved first.
    """
    http = http or requests.Session()
    base_url = base_url.rstrip('/')

    try:
        if command == 'teams':
            lines = format_teams(request_json(http, 'GET', f"{base_url}/api/teams"))
        elif command != 'generate' and round_file and os.path.exists(round_file):
            matches = load_round(round_file)
            result = request_json(http, 'POST', f"{base_url}/{command}", json={'matches': matches})
            lines = format_cup(result) if command == 'cup' else format_league(result)
        else:
            if not login(http, base_url, password or ''):
                print("Error: Login failed. Check the admin password.", file=sys.stderr)
                return 1
            generated = request_json(http, 'POST', f"{base_url}/api/generate")
            if round_file:
                save_round(round_file, generated['matches'])
            if command == 'generate':
                lines = format_matches(generated['matches'])
            elif command == 'cup':
                lines = format_cup(request_json(http, 'GET', f"{base_url}/cup"))
            else:
                lines = format_league(request_json(http, 'GET', f"{base_url}/league"))
    except ClientError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    for line in lines:
        print(line)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Command-line client for the Football Match Manager',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('command', choices=['teams', 'generate', 'cup', 'league'])
    parser.add_argument('--url', default=os.environ.get('MATCH_SERVER_URL', DEFAULT_URL),
                        help=f'Server base URL (default: {DEFAULT_URL})')
    parser.add_argument('--password', default=os.environ.get('ADMIN_PASSWORD'),
                        help='Admin password (default: $ADMIN_PASSWORD)')
    parser.add_argument('--round-file',
                        help='JSON file holding a generated round; cup and league reuse it')
    args = parser.parse_args(argv)
    return run(args.command, args.url, args.password, round_file=args.round_file)


if __name__ == '__main__':
    sys.exit(main())
