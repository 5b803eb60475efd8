"""
Game Controller

Handles all game-related HTTP endpoints.
"""

from flask import Blueprint, request, jsonify
from dataclasses import asdict
from ..errors import (
    DataLoadError, GameOverError, InvalidSettingsError, NoPuzzleAvailableError,
    SessionNotFoundError, ShareUnavailableError, UserCorrectableError
)
from ..models.game import GameSettings
from ..services.game_service import get_game_service
from ..services.stats_service import get_stats_service
from ..utils.game_logger import game_logger

game_bp = Blueprint('game', __name__)


def _service_unavailable():
    return jsonify({
        'success': False,
        'error': 'Game service unavailable'
    }), 500


def _json_body():
    """The request JSON object, or an empty dict for anything else."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _error_status(error: Exception) -> int:
    """HTTP status for an engine error."""
    if isinstance(error, NoPuzzleAvailableError):
        return 404
    if isinstance(error, DataLoadError):
        return 503
    if isinstance(error, SessionNotFoundError):
        return 404
    if isinstance(error, (UserCorrectableError, GameOverError, InvalidSettingsError,
                          ShareUnavailableError, ValueError)):
        return 400
    return 500


def _error_response(action, error, player_id=None, **extra):
    """Log a failed request and build its JSON response."""
    status = _error_status(error)
    if status == 500:
        game_logger.log_error(request, error, action, player_id)

    message = error.args[0] if isinstance(error, SessionNotFoundError) and error.args else str(error)
    error_response = {
        'success': False,
        'error': message,
        **extra
    }
    game_logger.log_server_response(request, action, False, error_response, player_id)
    return jsonify(error_response), status


@game_bp.route('/game/load', methods=['POST'])
def load_game():
    """Load (or resume) the player's puzzle."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable()

    data = _json_body()
    player_id = data.get('player_id')
    try:
        if not player_id:
            raise ValueError('player_id is required')

        game_logger.log_user_action(request, 'load_game', player_id,
                                    settings=data.get('settings'), date=data.get('date'))

        settings = GameSettings.from_dict(data['settings']) if data.get('settings') is not None else None
        session = game_service.load_game(player_id, settings, archive_date=data.get('date'))

        response_data = {
            'success': True,
            'state': game_service.session_view(session)
        }
        game_logger.log_server_response(
            request, 'load_game', True, response_data, player_id,
            restored=session.restored, word_length=session.state.word_length
        )
        return jsonify(response_data)

    except Exception as e:
        return _error_response('load_game', e, player_id)


@game_bp.route('/game/<player_id>', methods=['GET'])
def get_state(player_id):
    """Get current game state."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable()

    try:
        game_logger.log_user_action(request, 'get_state', player_id)

        session = game_service.get_session(player_id)
        response_data = {
            'success': True,
            'state': game_service.session_view(session)
        }
        game_logger.log_server_response(request, 'get_state', True, response_data, player_id)
        return jsonify(response_data)

    except Exception as e:
        return _error_response('get_state', e, player_id)


@game_bp.route('/game/<player_id>/guess', methods=['POST'])
def submit_guess(player_id):
    """Submit a guess for validation and evaluation."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable()

    data = _json_body()
    guess = data.get('guess')
    try:
        game_logger.log_user_action(request, 'submit_guess', player_id, guess=guess)

        result = game_service.submit_guess(player_id, guess)
        session = game_service.get_session(player_id)

        response_data = {
            'success': True,
            'result': {
                'guess': result.guess,
                'evaluation': [status.value for status in result.evaluation],
                'newly_locked': result.newly_locked,
                'timeline': result.timeline
            },
            'state': game_service.session_view(session)
        }
        game_logger.log_server_response(
            request, 'submit_guess', True, response_data, player_id,
            attempt_index=result.attempt_index, game_status=result.game_status.value
        )
        return jsonify(response_data)

    except UserCorrectableError as e:
        # Show the message; the guess is not recorded
        session = game_service.sessions.get(player_id)
        extra = {'state': game_service.session_view(session)} if session else {}
        return _error_response('submit_guess', e, player_id, **extra)
    except Exception as e:
        return _error_response('submit_guess', e, player_id)


@game_bp.route('/game/<player_id>/letter', methods=['POST'])
def type_letter(player_id):
    """Type one letter into the input row."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable()

    data = _json_body()
    try:
        session = game_service.type_letter(player_id, data.get('letter'))
        return jsonify({'success': True, 'state': game_service.session_view(session)})
    except Exception as e:
        return _error_response('type_letter', e, player_id)


@game_bp.route('/game/<player_id>/backspace', methods=['POST'])
def delete_letter(player_id):
    """Delete the last typed letter."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable()

    try:
        session = game_service.delete_letter(player_id)
        return jsonify({'success': True, 'state': game_service.session_view(session)})
    except Exception as e:
        return _error_response('delete_letter', e, player_id)


@game_bp.route('/game/<player_id>/reveal', methods=['POST'])
def reveal_letter(player_id):
    """Use the one-time letter lifeline."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable()

    try:
        game_logger.log_user_action(request, 'reveal_letter', player_id)

        position = game_service.reveal_letter(player_id)
        session = game_service.get_session(player_id)
        response_data = {
            'success': True,
            'revealed': position is not None,
            'position': position,
            'message': f'Revealed letter at position {position + 1}!' if position is not None else None,
            'state': game_service.session_view(session)
        }
        game_logger.log_server_response(request, 'reveal_letter', True, response_data, player_id,
                                        position=position)
        return jsonify(response_data)

    except Exception as e:
        return _error_response('reveal_letter', e, player_id)


@game_bp.route('/game/<player_id>/keyboard', methods=['GET'])
def keyboard_state(player_id):
    """Letter states for the on-screen keyboard."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable()

    try:
        return jsonify({'success': True, 'keyboard': game_service.keyboard_state(player_id)})
    except Exception as e:
        return _error_response('keyboard_state', e, player_id)


@game_bp.route('/game/<player_id>/share', methods=['GET'])
def share(player_id):
    """Emoji result grid for the daily puzzle."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable()

    try:
        game_logger.log_user_action(request, 'share', player_id)
        return jsonify({'success': True, 'text': game_service.share_text(player_id)})
    except Exception as e:
        return _error_response('share', e, player_id)


@game_bp.route('/game/<player_id>/reset', methods=['POST'])
def reset_game(player_id):
    """Throw away the saved state and restart the puzzle."""
    game_service = get_game_service()
    if not game_service:
        return _service_unavailable()

    try:
        game_logger.log_user_action(request, 'reset_game', player_id)

        session = game_service.reset_game(player_id)
        response_data = {
            'success': True,
            'state': game_service.session_view(session)
        }
        game_logger.log_server_response(request, 'reset_game', True, response_data, player_id)
        return jsonify(response_data)

    except Exception as e:
        return _error_response('reset_game', e, player_id)


@game_bp.route('/game/<player_id>/stats', methods=['GET'])
def player_stats(player_id):
    """Recorded results of the player's finished daily puzzles."""
    stats_service = get_stats_service()
    if not stats_service:
        return _service_unavailable()

    return jsonify({
        'success': True,
        'results': [asdict(result) for result in stats_service.get_results(player_id)]
    })


@game_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    try:
        game_service = get_game_service()

        response_data = {
            'status': 'healthy',
            'active_games': len(game_service.sessions) if game_service else 0,
            'puzzle_date': game_service.today() if game_service else None,
            'log_stats': game_logger.get_log_stats()
        }
        game_logger.log_server_response(request, 'health_check', True, response_data)
        return jsonify(response_data)

    except Exception as e:
        game_logger.log_error(request, e, 'health_check')
        error_response = {
            'status': 'error',
            'error': str(e)
        }
        game_logger.log_server_response(request, 'health_check', False, error_response)
        return jsonify(error_response), 500
