POSITIONS = ('Forward', 'Midfielder', 'Defender', 'Goalkeeper')
DEFAULT_RATING = 75
BYE = 'Bye'


class Player:
    def __init__(self, name, position=POSITIONS[0], rating=DEFAULT_RATING):
        self.name = name
        self.position = position
        self.rating = rating

    @classmethod
    def from_dict(cls, data):
        """Build a player from a roster entry, filling in editor defaults."""
        if not isinstance(data, dict):
            raise ValueError(f"Player entry must be an object, got {type(data).__name__}")
        position = data.get('position')
        if position not in POSITIONS:
            position = POSITIONS[0]
        try:
            rating = int(data.get('rating'))
        except (TypeError, ValueError):
            rating = DEFAULT_RATING
        rating = max(0, min(100, rating))
        return cls(name=str(data.get('name') or ''), position=position, rating=rating)

    def to_dict(self):
        return {'name': self.name, 'position': self.position, 'rating': self.rating}

    def __repr__(self):
        return f"Player(name={self.name}, position={self.position}, rating={self.rating})"


class Team:
    def __init__(self, name, players=None):
        self.name = name
        self.players = players if players else []

    @classmethod
    def from_dict(cls, name, roster):
        if not isinstance(roster, list):
            raise ValueError(f'Roster for team "{name}" must be a list')
        return cls(name=name, players=[Player.from_dict(p) for p in roster])

    def to_dict(self):
        return [p.to_dict() for p in self.players]

    def __repr__(self):
        return f"Team(name={self.name}, players={len(self.players)})"


class Prediction:
    def __init__(self, winner, confidence):
        self.winner = winner
        self.confidence = confidence

    def to_dict(self):
        return {'winner': self.winner, 'confidence': self.confidence}

    def __repr__(self):
        return f"Prediction(winner={self.winner}, confidence={self.confidence})"


class Match:
    def __init__(self, home, away=None, prediction=None):
        self.home = home
        self.away = away  # None means the home team has a bye
        self.prediction = prediction

    @property
    def is_bye(self):
        return self.away is None

    def teams(self):
        return [self.home] if self.is_bye else [self.home, self.away]

    @classmethod
    def from_dict(cls, data):
        """Read a match in wire form. Accepts the older ``"away": "Bye"`` spelling."""
        if not isinstance(data, dict) or not data.get('home'):
            raise ValueError('Match must be an object with a "home" team')
        home = data['home']
        away = data.get('away')
        if not isinstance(home, str) or not (away is None or isinstance(away, str)):
            raise ValueError('Team names in a match must be strings')
        if away == BYE:
            away = None
        if home == BYE:
            raise ValueError('A bye cannot be the home team')
        prediction = None
        pred = data.get('prediction')
        if away is not None and isinstance(pred, dict):
            winner = pred.get('winner', pred.get('result'))
            if winner not in (home, away):
                raise ValueError(f'Predicted winner "{winner}" is not playing in {home} vs {away}')
            try:
                confidence = int(pred.get('confidence'))
            except (TypeError, ValueError):
                raise ValueError(f'Invalid confidence for {home} vs {away}')
            if not 50 <= confidence <= 100:
                raise ValueError(f'Confidence must be between 50 and 100, got {confidence}')
            prediction = Prediction(winner, confidence)
        return cls(home=home, away=away, prediction=prediction)

    def to_dict(self):
        return {
            'home': self.home,
            'away': self.away,
            'prediction': self.prediction.to_dict() if self.prediction else None,
        }

    def __repr__(self):
        return f"Match(home={self.home}, away={self.away}, prediction={self.prediction})"


def validate_round(matches):
    """Check that a round plays each team once and has at most one bye."""
    seen = set()
    byes = 0
    for match in matches:
        if match.is_bye:
            byes += 1
        for team in match.teams():
            if team in seen:
                raise ValueError(f'Team "{team}" appears in more than one match')
            seen.add(team)
    if byes > 1:
        raise ValueError(f'A round can have at most one bye, got {byes}')
    return matches
