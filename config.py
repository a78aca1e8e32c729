import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name, default):
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Completion service credential; exchanges fail with UpstreamFailure without it
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
    OPENAI_MODEL = os.environ.get('OPENAI_MODEL', 'gpt-4o-mini')
    COMPLETION_TIMEOUT_SEC = float(os.environ.get('COMPLETION_TIMEOUT_SEC', '30'))
    # Join admission limit per room
    MAX_ROOM_SIZE = int(os.environ.get('MAX_ROOM_SIZE', '4'))
    # Idle expiry (seconds) and capacity bound for the session registry. 0 disables.
    SESSION_TTL_SEC = int(os.environ.get('SESSION_TTL_SEC', '3600'))
    MAX_SESSIONS = int(os.environ.get('MAX_SESSIONS', '1000'))
    # A new join puts a started session back into the lobby
    RESET_ON_JOIN = _flag('RESET_ON_JOIN', 'true')
    WELCOME_MESSAGE = os.environ.get('WELCOME_MESSAGE', 'Welcome to the game!')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3001'))
