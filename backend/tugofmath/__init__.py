from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from tugofmath.config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One registry and state machine per app; handlers reach them via app.extensions
    from tugofmath.services.match import MatchStateMachine, RoomRegistry
    from tugofmath.services.match.broadcast import SocketIOBroadcaster
    from tugofmath.services.match.scheduler import SocketIOScheduler
    registry = RoomRegistry(ball_start=int(flask_app.config.get('BALL_START', 50)))
    flask_app.extensions['match'] = MatchStateMachine(
        registry,
        SocketIOBroadcaster(socketio),
        SocketIOScheduler(socketio, logger=flask_app.logger),
        config=flask_app.config,
        logger=flask_app.logger,
    )

    from tugofmath.routes import main
    flask_app.register_blueprint(main)

    from tugofmath.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from tugofmath.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    @click.command('sample-questions')
    @click.option('--count', default=5, show_default=True, help='How many questions to print.')
    def sample_questions_command(count):
        """Prints generated questions with their answer options."""
        from tugofmath.services.match import generate_question
        for _ in range(count):
            q = generate_question()
            options = ', '.join(str(o) for o in q.options)
            click.echo(f"{q.text:<16} answer={q.answer:<4} options=[{options}]")

    flask_app.cli.add_command(sample_questions_command)

    return flask_app
