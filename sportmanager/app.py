import logging
import os
from datetime import datetime

from flask import Flask, request, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from shared.errors import RosterError
from .bot_commands import BotCommandHandler
from .config import config
from .logging_config import setup_logging
from .match_catalog import MatchCatalog
from .match_roster import MatchRoster
from .models import db
from .player_directory import PlayerDirectory
from .store import SqlAlchemyStore, enable_sqlite_savepoints

logger = logging.getLogger(__name__)

# Player counts are INTEGER columns, telegramId is BIGINT.
INT32_MAX = 2 ** 31 - 1
INT64_MAX = 2 ** 63 - 1


def create_app(config_name: str = None) -> Flask:
    """Application factory for the roster service."""
    if config_name is None:
        config_name = os.getenv('ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config.get(config_name, config['default']))

    setup_logging(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)

    # Initialize services
    store = SqlAlchemyStore(db)
    directory = PlayerDirectory(store)
    catalog = MatchCatalog(store, default_venue=app.config['DEFAULT_VENUE_NAME'])
    roster = MatchRoster(store, directory)

    # Create tables
    with app.app_context():
        if db.engine.dialect.name == 'sqlite':
            enable_sqlite_savepoints(db.engine)
        db.create_all()

    # Store services on app for access in routes
    app.store = store
    app.directory = directory
    app.catalog = catalog
    app.roster = roster
    app.bot = BotCommandHandler(catalog, roster)

    register_cors(app)
    register_health_route(app)
    register_api_routes(app)

    logger.info(f"Roster service configured ({config_name})")
    return app


def error_response(e: RosterError):
    if e.status_code >= 500:
        logger.error(f"{request.method} {request.path} failed: {e.message}")
    else:
        logger.warning(f"{request.method} {request.path} rejected: {e.message}")
    return jsonify({'error': e.message}), e.status_code


def invalid_body():
    return jsonify({'error': 'Invalid request body'}), 400


def player_name(data):
    if not isinstance(data, dict):
        return None
    name = data.get('name')
    return name if isinstance(name, str) and name else None


def parse_date(value) -> datetime:
    if not isinstance(value, str) or not value:
        raise ValueError("date is required")
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


def optional_int(value, limit: int = INT32_MAX) -> int:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("expected an integer")
    if not -limit - 1 <= value <= limit:
        raise ValueError(f"{value} out of range")
    return value


def optional_str(value) -> str:
    if value is not None and not isinstance(value, str):
        raise ValueError("expected a string")
    return value


def register_cors(app: Flask):
    """Allow the web frontend to call the API from any origin."""

    @app.before_request
    def cors_preflight():
        if request.method == 'OPTIONS':
            return '', 204

    @app.after_request
    def cors_headers(response):
        response.headers['Access-Control-Allow-Origin'] = '*'
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, PUT, DELETE, OPTIONS'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization'
        return response


def register_health_route(app: Flask):

    @app.route(app.config['HEALTH_CHECK_PATH'])
    def health_check():
        """Health check endpoint."""
        try:
            db.session.execute(text('SELECT 1'))
        except SQLAlchemyError as e:
            logger.error(f"Failed to ping database: {e}")
            return jsonify({
                'status': 'unavailable',
                'reason': 'database connection error'
            }), 503

        return jsonify({'status': 'healthy'})


def register_api_routes(app: Flask):
    """Register API routes."""

    # ==================== Matches ====================

    @app.route('/api/matches', methods=['GET'])
    def api_list_matches():
        """List all matches, cancelled included."""
        try:
            matches = app.catalog.list_matches()
        except RosterError as e:
            return error_response(e)

        return jsonify([m.to_dict() for m in matches])

    @app.route('/api/matches', methods=['POST'])
    def api_create_match():
        """Create a new match."""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return invalid_body()

        try:
            date = parse_date(data.get('date'))
            min_players = optional_int(data.get('minPlayers'))
            max_players = optional_int(data.get('maxPlayers'))
            location = optional_str(data.get('location'))
            venue_name = optional_str(data.get('venueName'))
            map_link = optional_str(data.get('mapLink'))
        except (TypeError, ValueError):
            return invalid_body()

        try:
            match = app.catalog.create_match(
                date=date,
                location=location or '',
                venue_name=venue_name,
                map_link=map_link,
                min_players=min_players,
                max_players=max_players
            )
        except RosterError as e:
            return error_response(e)

        return jsonify(match.to_dict()), 201

    @app.route('/api/matches/<int:match_id>/join', methods=['POST'])
    def api_join_match(match_id: int):
        """Add a player to a match roster."""
        data = request.get_json(silent=True)
        name = player_name(data)
        if not name:
            return invalid_body()

        try:
            app.roster.join(match_id, name)
        except RosterError as e:
            return error_response(e)

        return jsonify({'message': 'Successfully joined match'})

    @app.route('/api/matches/<int:match_id>/leave', methods=['DELETE'])
    def api_leave_match(match_id: int):
        """Remove a player from a match roster."""
        # Unknown match is reported before a malformed body.
        try:
            app.catalog.get_match(match_id)
        except RosterError as e:
            return error_response(e)

        data = request.get_json(silent=True)
        name = player_name(data)
        if not name:
            return invalid_body()

        try:
            app.roster.leave(match_id, name)
        except RosterError as e:
            return error_response(e)

        return jsonify({'message': 'Successfully left match'})

    @app.route('/api/matches/<int:match_id>', methods=['DELETE'])
    def api_cancel_match(match_id: int):
        """Cancel a match. The match and its roster are kept."""
        try:
            app.roster.cancel(match_id)
        except RosterError as e:
            return error_response(e)

        return jsonify({'message': 'Match successfully cancelled'})

    @app.route('/api/matches/<int:match_id>/restore', methods=['POST'])
    def api_restore_match(match_id: int):
        """Reactivate a cancelled match."""
        try:
            app.roster.restore(match_id)
        except RosterError as e:
            return error_response(e)

        return jsonify({'message': 'Match successfully restored'})

    # ==================== Players ====================

    @app.route('/api/players', methods=['GET'])
    def api_list_players():
        try:
            players = app.directory.list_players()
        except RosterError as e:
            return error_response(e)

        return jsonify([p.to_dict() for p in players])

    @app.route('/api/players', methods=['POST'])
    def api_create_player():
        data = request.get_json(silent=True)
        name = player_name(data)
        if not name:
            return invalid_body()

        try:
            external_id = optional_int(data.get('telegramId'), limit=INT64_MAX)
        except (TypeError, ValueError):
            return invalid_body()

        try:
            player = app.directory.register(name, external_id=external_id)
        except RosterError as e:
            return error_response(e)

        return jsonify(player.to_dict()), 201
