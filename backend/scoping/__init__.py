import atexit

from flask import Flask, current_app
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config
from scoping.models import SESSION_DURATION_SEC

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from scoping.services.workshop import Broadcaster, EventRouter, RoomStore, Rules

    cfg = flask_app.config
    namespace = cfg.get('SOCKETIO_NAMESPACE', '/')
    budget = int(cfg.get('SESSION_DURATION_SEC', SESSION_DURATION_SEC))
    # Countdowns stay manual in tests unless explicitly enabled
    autostart = not cfg.get('TESTING') or bool(cfg.get('ENABLE_SCHEDULER_IN_TESTS'))
    router = EventRouter(
        RoomStore(session_budget=budget),
        Broadcaster(socketio, namespace=namespace, logger=flask_app.logger),
        socketio=socketio,
        rules=Rules(
            session_budget=budget,
            require_full_coverage=bool(cfg.get('REQUIRE_FULL_REVIEW_COVERAGE')),
        ),
        tick_interval=float(cfg.get('TICK_INTERVAL_SEC', 1)),
        heartbeat_sec=int(cfg.get('TIMER_HEARTBEAT_SEC', 0)),
        autostart_timers=autostart,
        logger=flask_app.logger,
    )
    flask_app.extensions['workshop'] = router
    atexit.register(router.shutdown)

    # Import and register blueprints here
    from scoping.routes import main
    flask_app.register_blueprint(main)

    from scoping.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from scoping.api.events import events
    # Same path the web client's fallback API used
    flask_app.register_blueprint(events, url_prefix='/api/socket')

    # Register Socket.IO event handlers
    from scoping.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    return flask_app


def get_router():
    return current_app.extensions['workshop']
