import logging

from relay import create_app, socketio

logging.basicConfig(level=logging.INFO)
app = create_app()

if __name__ == '__main__':
    port = app.config['PORT']
    app.logger.info(f"listening on *:{port}")
    # Use SocketIO server to enable websockets
    socketio.run(app, host=app.config['HOST'], port=port, allow_unsafe_werkzeug=True)
