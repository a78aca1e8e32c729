"""Error types raised by the registry and the completion bridge.

The event router catches these and turns them into outbound events; none of
them ever reaches the transport as a protocol fault.
"""


class RelayError(Exception):
    pass


class SessionNotFound(RelayError):
    def __init__(self, session_id):
        super().__init__(f"session {session_id!r} not found")
        self.session_id = session_id


class RoomFull(SessionNotFound):
    """Join rejected for capacity. Reported on the wire as not-found."""

    def __init__(self, session_id, size):
        RelayError.__init__(self, f"session {session_id!r} is full ({size} connections)")
        self.session_id = session_id
        self.size = size


class UpstreamFailure(RelayError):
    def __init__(self, session_id, reason):
        super().__init__(f"completion failed for session {session_id!r}: {reason}")
        self.session_id = session_id
        self.reason = reason


class InvalidPayload(RelayError):
    def __init__(self, event, reason):
        super().__init__(f"{event}: {reason}")
        self.event = event
        self.reason = reason
