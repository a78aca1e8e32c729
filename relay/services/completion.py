"""Bridge between a session's chat and the external completion service.

The service keeps the conversation on its side; every reply carries an id
that the next request passes back as ``previous_response_id``. That id is the
session's continuation token.
"""

from typing import Optional

import openai
from openai import OpenAI

from relay.errors import UpstreamFailure
from relay.models import Message, Session


class CompletionBridge:
    def __init__(self, app=None, client=None):
        self.client = client
        self.api_key: Optional[str] = None
        self.model = 'gpt-4o-mini'
        self.timeout = 30.0
        self.logger = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self.api_key = app.config.get('OPENAI_API_KEY')
        self.model = app.config.get('OPENAI_MODEL', self.model)
        self.timeout = float(app.config.get('COMPLETION_TIMEOUT_SEC', self.timeout))
        self.logger = app.logger
        app.extensions['completion_bridge'] = self

    def _get_client(self, session_id: str):
        if self.client is None:
            if not self.api_key:
                raise UpstreamFailure(session_id, 'OPENAI_API_KEY is not configured')
            self.client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        return self.client

    def exchange(self, session: Session, text: str) -> Message:
        """Send ``text`` to the service and append the reply to ``session``.

        Holds the session's exchange lock for the whole round trip, so a second
        exchange on the same session waits until this one has committed its
        token. The state lock is only taken to commit the reply.
        On failure nothing is appended and the token is left as it was.
        """
        with session.exchange_lock:
            client = self._get_client(session.id)
            request = {'model': self.model, 'input': text}
            if session.continuation_token:
                request['previous_response_id'] = session.continuation_token
            try:
                response = client.responses.create(**request)
            except openai.OpenAIError as exc:
                if self.logger is not None:
                    self.logger.warning(f"[upstream-fail] session={session.id} error={exc!r}")
                raise UpstreamFailure(session.id, str(exc) or exc.__class__.__name__) from exc

            reply = getattr(response, 'output_text', None)
            token = getattr(response, 'id', None)
            if not reply or not token:
                raise UpstreamFailure(session.id, 'empty response from completion service')

            with session.lock:
                session.continuation_token = token
                message = session.append_message('AI', reply, is_from_ai=True)
            if self.logger is not None:
                self.logger.info(f"[exchange] session={session.id} token={token} chars={len(reply)}")
            return message
