from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config
from relay.services import CompletionBridge, SessionRegistry

registry = SessionRegistry()
bridge = CompletionBridge()
socketio = SocketIO(cors_allowed_origins='*', async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    registry.init_app(flask_app)
    bridge.init_app(flask_app)
    CORS(flask_app)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins='*')

    from relay.routes import main
    flask_app.register_blueprint(main)

    # Importing here ensures the handlers bind to the initialized socketio instance
    from relay.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    return flask_app
