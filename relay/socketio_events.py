from flask import current_app, request
from flask_socketio import emit, join_room, rooms

from relay import bridge, registry, socketio
from relay.errors import InvalidPayload, RoomFull, SessionNotFound, UpstreamFailure


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _session_id_from(event: str, data) -> str:
    """Accept a bare id string or a ``{"sessionId": ...}`` object."""
    if isinstance(data, dict):
        data = data.get('sessionId')
    if not isinstance(data, str) or not data:
        raise InvalidPayload(event, 'a session id string is required')
    return data


def _room_size(room: str) -> int:
    """Number of connections currently in ``room`` on this namespace.

    Reads the room table of python-socketio 5.x (``BaseManager.rooms``, a
    ``{namespace: {room: bidict(sid -> eio_sid)}}`` map). The server exposes no
    public count, so this is the only place that depends on that layout.
    """
    namespace = request.namespace  # type: ignore
    participants = socketio.server.manager.rooms.get(namespace, {}).get(room)
    return len(participants) if participants else 0


def _messages_payload(session):
    return [m.to_dict() for m in session.messages()]


def _not_found(exc: SessionNotFound, event: str) -> None:
    cause = 'room-full' if isinstance(exc, RoomFull) else 'not-found'
    current_app.logger.info(f"[{event}] session={exc.session_id} sid={_get_sid()} rejected={cause}")
    emit('session-not-found', exc.session_id)


def _invalid(exc: InvalidPayload) -> None:
    current_app.logger.info(f"[invalid-payload] event={exc.event} sid={_get_sid()} reason={exc.reason}")
    emit('invalid-payload', {'event': exc.event, 'error': exc.reason})


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(*args):
    current_app.logger.info(f"[disconnect] sid={_get_sid()}")


def handle_create_session(data=None):
    session = registry.create()
    emit('session-created', session.id)


def _parse_join(data):
    session_id = _session_id_from('join-session', data)
    name = data.get('name') if isinstance(data, dict) else None
    if name is not None:
        if not isinstance(name, str) or not name.strip():
            raise InvalidPayload('join-session', 'name must be a non-empty string')
        name = name.strip()
    return session_id, name


def handle_join_session(data=None):
    try:
        session_id, name = _parse_join(data)
        session = registry.get(session_id)
    except InvalidPayload as exc:
        _invalid(exc)
        return
    except SessionNotFound as exc:
        _not_found(exc, 'join')
        return

    # Capacity check and room join are atomic per session
    with session.lock:
        if session_id in rooms():
            emit('session-joined', session.state.to_dict())
            return
        size = _room_size(session_id)
        if size >= current_app.config.get('MAX_ROOM_SIZE', 4):
            _not_found(RoomFull(session_id, size), 'join')
            return
        join_room(session_id)
        name = name or f"Player {len(session.state.players) + 1}"
        session.join(name)
        current_app.logger.info(f"[join] session={session_id} sid={_get_sid()} name={name} room_size={size + 1}")
        emit('session-joined', session.state.to_dict())
        emit('updated-messages', _messages_payload(session), to=session_id)


def handle_request_message_log(data=None):
    try:
        session = registry.get(_session_id_from('request-message-log', data))
    except InvalidPayload as exc:
        _invalid(exc)
        return
    except SessionNotFound as exc:
        _not_found(exc, 'message-log')
        return
    emit('message-log', _messages_payload(session))


def handle_post_message(data=None):
    try:
        if not isinstance(data, dict):
            raise InvalidPayload('post-message', 'expected {"sessionId": ..., "text": ...}')
        session_id = _session_id_from('post-message', data)
        text = data.get('text')
        if not isinstance(text, str) or not text.strip():
            raise InvalidPayload('post-message', 'text must be a non-empty string')
        session = registry.get(session_id)
    except InvalidPayload as exc:
        _invalid(exc)
        return
    except SessionNotFound as exc:
        _not_found(exc, 'post-message')
        return

    # Broadcast under the exchange lock so room members see snapshots in commit order
    with session.exchange_lock:
        try:
            bridge.exchange(session, text)
        except UpstreamFailure as exc:
            current_app.logger.warning(f"[post-message] session={session_id} sid={_get_sid()} upstream={exc.reason}")
            emit('message-failed', {'sessionId': session_id, 'error': exc.reason})
            return
        with session.lock:
            emit('updated-messages', _messages_payload(session), to=session_id)


def handle_start_session(data=None):
    try:
        session = registry.get(_session_id_from('start-session', data))
    except InvalidPayload as exc:
        _invalid(exc)
        return
    except SessionNotFound as exc:
        _not_found(exc, 'start')
        return
    session.start()
    current_app.logger.info(f"[start] session={session.id} players={len(session.state.players)}")
    emit('session-started', session.state.to_dict())


def register_socketio_handlers(namespace: str = '/') -> None:
    """Bind every relay event handler on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('create-session', handle_create_session, namespace=namespace)
    socketio.on_event('join-session', handle_join_session, namespace=namespace)
    socketio.on_event('request-message-log', handle_request_message_log, namespace=namespace)
    socketio.on_event('post-message', handle_post_message, namespace=namespace)
    socketio.on_event('start-session', handle_start_session, namespace=namespace)
