"""Relay domain services: the session registry and the completion bridge.

Socket handlers and HTTP routes import these; neither service knows about
the transport.
"""

from relay.services.completion import CompletionBridge
from relay.services.sessions import SessionRegistry

__all__ = ['CompletionBridge', 'SessionRegistry']
