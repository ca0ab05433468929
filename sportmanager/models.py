from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy

from shared.state_machine import MatchState

db = SQLAlchemy()


# Composite primary key: a player appears on a roster at most once.
match_players = db.Table(
    'match_players',
    db.Column('match_id', db.Integer, db.ForeignKey('matches.id'), primary_key=True),
    db.Column('player_id', db.Integer, db.ForeignKey('players.id'), primary_key=True),
)


class Player(db.Model):
    __tablename__ = 'players'

    id = db.Column(db.Integer, primary_key=True)
    external_id = db.Column(db.BigInteger, nullable=True)  # Telegram user id
    name = db.Column(db.String(100), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    matches = db.relationship('Match', secondary=match_players, back_populates='players')

    def to_dict(self):
        return {
            'id': self.id,
            'telegramId': self.external_id,
            'name': self.name,
        }


class Match(db.Model):
    __tablename__ = 'matches'

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.DateTime, nullable=False)
    location = db.Column(db.String(200), nullable=False, default='')
    venue_name = db.Column(db.String(200), nullable=False)
    map_link = db.Column(db.String(500), nullable=True)
    min_players = db.Column(db.Integer, default=10)
    max_players = db.Column(db.Integer, default=12)
    state = db.Column(db.String(20), nullable=False, default=MatchState.ACTIVE.value)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    players = db.relationship(
        'Player',
        secondary=match_players,
        back_populates='matches',
        order_by='Player.id'
    )

    @property
    def active(self) -> bool:
        return self.state == MatchState.ACTIVE.value

    def has_player(self, player: Player) -> bool:
        return any(p is player or (p.id is not None and p.id == player.id) for p in self.players)

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date.replace(tzinfo=timezone.utc).isoformat() if self.date else None,
            'location': self.location,
            'venueName': self.venue_name,
            'mapLink': self.map_link or '',
            'minPlayers': self.min_players,
            'maxPlayers': self.max_players,
            'players': [p.to_dict() for p in self.players],
            'active': self.active,
            'state': self.state,
        }
