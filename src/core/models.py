MIN_PARTICIPANTS = 2

# Reserved identity for the third-place playoff; it lives outside the main tree.
THIRD_PLACE_MATCH_ID = 999
THIRD_PLACE_ROUND_INDEX = -1


class Entrant:
    def __init__(self, id, name, score=None, seed=0):
        self.id = id
        self.name = name
        self.score = score  # None until a qualification score is submitted
        self.seed = seed  # 0 until seeded

    def replace(self, **changes):
        values = {'id': self.id, 'name': self.name, 'score': self.score, 'seed': self.seed}
        values.update(changes)
        return Entrant(**values)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'score': self.score, 'seed': self.seed}

    @classmethod
    def from_dict(cls, data):
        return cls(id=data['id'], name=data['name'], score=data.get('score'), seed=data.get('seed', 0))

    def __eq__(self, other):
        if not isinstance(other, Entrant):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Entrant(id={self.id}, name={self.name}, score={self.score}, seed={self.seed})"


def same_entrant(a, b) -> bool:
    """True when both entrants are present and share an id."""
    return a is not None and b is not None and a.id == b.id


class Match:
    def __init__(self, id, round_index, match_index, participant1=None, participant2=None,
                 winner=None, next_match_id=None):
        self.id = id
        self.round_index = round_index
        self.match_index = match_index
        self.participant1 = participant1
        self.participant2 = participant2
        self.winner = winner
        self.next_match_id = next_match_id  # None for the final and the third-place match

    @property
    def is_decided(self) -> bool:
        return self.winner is not None

    @property
    def is_playable(self) -> bool:
        """Both slots filled and no winner yet."""
        return self.participant1 is not None and self.participant2 is not None and not self.is_decided

    def has_participant(self, entrant) -> bool:
        return same_entrant(self.participant1, entrant) or same_entrant(self.participant2, entrant)

    def slot_entrant(self, entrant_id):
        """Return the slot occupant with the given id, or None."""
        for participant in (self.participant1, self.participant2):
            if participant is not None and participant.id == entrant_id:
                return participant
        return None

    def loser(self):
        """The non-winner slot of a decided match (None for undecided or bye matches)."""
        if not self.is_decided:
            return None
        if same_entrant(self.participant1, self.winner):
            return self.participant2
        return self.participant1

    def replace(self, **changes):
        values = {
            'id': self.id,
            'round_index': self.round_index,
            'match_index': self.match_index,
            'participant1': self.participant1,
            'participant2': self.participant2,
            'winner': self.winner,
            'next_match_id': self.next_match_id,
        }
        values.update(changes)
        return Match(**values)

    def to_dict(self):
        def entrant(e):
            return e.to_dict() if e is not None else None
        return {
            'id': self.id,
            'roundIndex': self.round_index,
            'matchIndex': self.match_index,
            'participant1': entrant(self.participant1),
            'participant2': entrant(self.participant2),
            'winner': entrant(self.winner),
            'nextMatchId': self.next_match_id,
        }

    @classmethod
    def from_dict(cls, data):
        def entrant(value):
            return Entrant.from_dict(value) if value is not None else None
        return cls(
            id=data['id'],
            round_index=data['roundIndex'],
            match_index=data['matchIndex'],
            participant1=entrant(data.get('participant1')),
            participant2=entrant(data.get('participant2')),
            winner=entrant(data.get('winner')),
            next_match_id=data.get('nextMatchId'),
        )

    def __eq__(self, other):
        if not isinstance(other, Match):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"Match(id={self.id}, round={self.round_index}, index={self.match_index}, "
                f"p1={self.participant1 and self.participant1.name}, "
                f"p2={self.participant2 and self.participant2.name}, "
                f"winner={self.winner and self.winner.name})")


class ChampionshipStanding:
    def __init__(self, id, name, points_per_competition=None):
        self.id = id
        self.name = name
        self.points_per_competition = list(points_per_competition) if points_per_competition else []

    @property
    def total(self):
        return sum(self.points_per_competition)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'pointsPerCompetition': list(self.points_per_competition)}

    @classmethod
    def from_dict(cls, data):
        return cls(id=data['id'], name=data['name'], points_per_competition=data.get('pointsPerCompetition', []))

    def __eq__(self, other):
        if not isinstance(other, ChampionshipStanding):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"ChampionshipStanding(id={self.id}, name={self.name}, points={self.points_per_competition})"


class ValidationError:
    """A validation failure returned to the caller instead of raised."""

    def __init__(self, code, message):
        self.code = code
        self.message = message

    def __repr__(self):
        return f"ValidationError(code={self.code}, message={self.message})"
