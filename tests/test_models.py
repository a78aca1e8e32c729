from relay.models import Session


def test_new_session_has_welcome_and_lobby_state():
    session = Session('Welcome!')
    assert len(session.id) == 32
    assert session.continuation_token is None
    assert session.state.to_dict() == {'hasStarted': False, 'allowMessageSending': False, 'players': []}
    [welcome] = session.messages()
    assert welcome.to_dict() == {'name': 'System', 'text': 'Welcome!', 'isSystemMessage': True, 'isFromAI': False}


def test_join_appends_notice_and_player_in_order():
    session = Session('Welcome!')
    session.join('Alice')
    session.join('Bob')
    assert session.state.players == ['Alice', 'Bob']
    texts = [m.text for m in session.messages()]
    assert texts == ['Welcome!', 'Alice has joined the game!', 'Bob has joined the game!']
    assert session.latest_message().text == 'Bob has joined the game!'


def test_start_is_idempotent():
    session = Session('Welcome!')
    session.start()
    session.start()
    assert session.state.has_started
    assert session.state.allow_message_sending


def test_join_after_start_reopens_lobby():
    session = Session('Welcome!')
    session.start()
    session.join('Carol')
    assert not session.state.has_started
    assert not session.state.allow_message_sending


def test_join_after_start_keeps_state_when_reset_disabled():
    session = Session('Welcome!', reset_on_join=False)
    session.start()
    session.join('Carol')
    assert session.state.has_started
    assert session.state.allow_message_sending


def test_append_message_returns_latest():
    session = Session('Welcome!')
    message = session.append_message('AI', 'hi there', is_from_ai=True)
    assert session.latest_message() is message
    assert message.is_from_ai and not message.is_system_message


def test_messages_returns_a_copy():
    session = Session('Welcome!')
    snapshot = session.messages()
    snapshot.clear()
    assert len(session.messages()) == 1
