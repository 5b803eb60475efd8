"""
WebSocket Event Handlers

Maps the discrete player actions (load, keypress, submit, reveal) to engine
operations. Every event answers the sender with the updated game state.
"""

from flask import request
from flask_socketio import emit
from ..errors import UserCorrectableError, WordibbleError
from ..models.game import GameSettings
from ..services.game_service import get_game_service
from ..utils.game_logger import game_logger


def register_websocket_handlers(socketio):
    """Register all WebSocket event handlers."""

    def emit_state(game_service, session):
        emit('game_state', {
            'success': True,
            'state': game_service.session_view(session)
        })

    def emit_error(action, error, player_id=None):
        if not isinstance(error, (WordibbleError, ValueError)):
            game_logger.log_error(request, error, action, player_id)
        emit('game_error', {
            'success': False,
            'action': action,
            'error': error.args[0] if error.args else str(error)
        })

    def resolve(data):
        game_service = get_game_service()
        if not game_service:
            emit('game_error', {'success': False, 'error': 'Game service unavailable'})
            return None, None
        if not isinstance(data, dict):
            emit('game_error', {'success': False, 'error': 'Event payload must be an object'})
            return game_service, None
        player_id = data.get('player_id')
        if not player_id:
            emit('game_error', {'success': False, 'error': 'player_id is required'})
            return game_service, None
        return game_service, player_id

    @socketio.on('load_game')
    def handle_load_game(data):
        """Load or resume the player's puzzle."""
        game_service, player_id = resolve(data)
        if not player_id:
            return
        try:
            game_logger.log_user_action(request, 'load_game', player_id, transport='websocket')
            settings = GameSettings.from_dict(data['settings']) if data.get('settings') is not None else None
            session = game_service.load_game(player_id, settings, archive_date=data.get('date'))
            emit_state(game_service, session)
        except Exception as e:
            emit_error('load_game', e, player_id)

    @socketio.on('type_letter')
    def handle_type_letter(data):
        game_service, player_id = resolve(data)
        if not player_id:
            return
        try:
            emit_state(game_service, game_service.type_letter(player_id, data.get('letter')))
        except Exception as e:
            emit_error('type_letter', e, player_id)

    @socketio.on('delete_letter')
    def handle_delete_letter(data):
        game_service, player_id = resolve(data)
        if not player_id:
            return
        try:
            emit_state(game_service, game_service.delete_letter(player_id))
        except Exception as e:
            emit_error('delete_letter', e, player_id)

    @socketio.on('submit_guess')
    def handle_submit_guess(data):
        """Commit a guess, then send the flip timeline for the client to play."""
        game_service, player_id = resolve(data)
        if not player_id:
            return
        try:
            game_logger.log_user_action(request, 'submit_guess', player_id,
                                        guess=data.get('guess'), transport='websocket')
            result = game_service.submit_guess(player_id, data.get('guess'))
            emit('guess_result', {
                'success': True,
                'guess': result.guess,
                'evaluation': [status.value for status in result.evaluation],
                'game_status': result.game_status.value,
                'timeline': result.timeline
            })
            emit_state(game_service, game_service.get_session(player_id))
        except UserCorrectableError as e:
            emit_error('submit_guess', e, player_id)
            session = game_service.sessions.get(player_id)
            if session:
                emit_state(game_service, session)
        except Exception as e:
            emit_error('submit_guess', e, player_id)

    @socketio.on('reveal_letter')
    def handle_reveal_letter(data):
        game_service, player_id = resolve(data)
        if not player_id:
            return
        try:
            position = game_service.reveal_letter(player_id)
            if position is not None:
                emit('letter_revealed', {
                    'position': position,
                    'message': f'Revealed letter at position {position + 1}!'
                })
            emit_state(game_service, game_service.get_session(player_id))
        except Exception as e:
            emit_error('reveal_letter', e, player_id)
