import os

# 30 minute workshop
DEFAULT_SESSION_DURATION_SEC = 1800


def _parse_origins(raw):
    return [x.strip() for x in raw.split(',') if x.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Workshop clock (seconds)
    SESSION_DURATION_SEC = int(os.environ.get('SESSION_DURATION_SEC', DEFAULT_SESSION_DURATION_SEC))
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1'))
    # Optional: log remaining time every N seconds. 0 disables.
    TIMER_HEARTBEAT_SEC = int(os.environ.get('TIMER_HEARTBEAT_SEC', '0'))
    # Require coder feedback and PM decisions for every wishlist id before leaving review
    REQUIRE_FULL_REVIEW_COVERAGE = os.environ.get('REQUIRE_FULL_REVIEW_COVERAGE', '0').lower() in ('1', 'true', 'yes')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    SOCKET_PORT = int(os.environ.get('SOCKET_PORT', '3001'))
    CORS_ORIGINS = _parse_origins(os.environ.get('CORS_ORIGINS', '')) or [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
