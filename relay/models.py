from dataclasses import dataclass, field
from typing import List, Optional
import threading
import time
import uuid


@dataclass
class Message:
    name: str
    text: str
    is_system_message: bool = False
    is_from_ai: bool = False

    def to_dict(self):
        return {
            'name': self.name,
            'text': self.text,
            'isSystemMessage': self.is_system_message,
            'isFromAI': self.is_from_ai,
        }


@dataclass
class SessionState:
    has_started: bool = False
    allow_message_sending: bool = False
    players: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            'hasStarted': self.has_started,
            'allowMessageSending': self.allow_message_sending,
            'players': list(self.players),
        }


def generate_session_id() -> str:
    return uuid.uuid4().hex


class Session:
    """One game room: roster, append-only message log and the completion
    service's continuation token.

    ``lock`` guards short state mutations and reads. ``exchange_lock`` is held
    across a completion round trip so exchanges on one session run one at a
    time without blocking joins, starts or log reads.
    """

    def __init__(self, welcome_message: str, reset_on_join: bool = True):
        self.id = generate_session_id()
        self.state = SessionState()
        self.continuation_token: Optional[str] = None
        self.reset_on_join = reset_on_join
        self.lock = threading.RLock()
        self.exchange_lock = threading.RLock()
        self.created_at = time.time()
        self.last_active = self.created_at
        self._messages: List[Message] = []
        self.append_message('System', welcome_message, is_system=True)

    def touch(self) -> None:
        self.last_active = time.time()

    def join(self, name: str) -> None:
        with self.lock:
            self.append_message('System', f'{name} has joined the game!', is_system=True)
            self.state.players.append(name)
            if self.reset_on_join:
                self.state.allow_message_sending = False
                self.state.has_started = False

    def start(self) -> None:
        with self.lock:
            self.state.has_started = True
            self.state.allow_message_sending = True
            self.touch()

    def append_message(self, name: str, text: str, is_system: bool = False, is_from_ai: bool = False) -> Message:
        message = Message(name=name, text=text, is_system_message=is_system, is_from_ai=is_from_ai)
        with self.lock:
            self._messages.append(message)
            self.touch()
        return message

    def messages(self) -> List[Message]:
        with self.lock:
            return list(self._messages)

    def latest_message(self) -> Optional[Message]:
        with self.lock:
            return self._messages[-1] if self._messages else None

    def to_dict(self):
        return {
            'id': self.id,
            'state': self.state.to_dict(),
            'messages': [m.to_dict() for m in self.messages()],
        }
