"""
Wordibble Server - Main Entry Point

This is the main entry point for the Wordibble puzzle server.
It initializes all services and starts the Flask-SocketIO application.
"""

import os
from wordibble import create_app
from wordibble.config import config
from wordibble.services.game_service import initialize_game_service
from wordibble.utils.game_logger import game_logger


def main():
    """Main function to initialize services and start the server."""
    config_class = config[os.getenv('WORDIBBLE_ENV', 'default')]
    try:
        print("Initializing services...")

        game_service = initialize_game_service(config_class)
        print(f"✓ Game service initialized (snapshots: {config_class.SNAPSHOT_BACKEND}, "
              f"puzzle date: {game_service.today()})")

        print("Creating Flask application...")
        app, socketio = create_app(config_class)
        print("✓ Flask application created successfully")

        game_logger.logger.info("Wordibble Server Starting")

        print(f"\nStarting Wordibble Server on {config_class.HOST}:{config_class.PORT}")
        print(f"Debug mode: {config_class.DEBUG}")
        print("=" * 50)

        socketio.run(app, host=config_class.HOST, port=config_class.PORT, debug=config_class.DEBUG)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("Wordibble Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise


if __name__ == '__main__':
    main()
