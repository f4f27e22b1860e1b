from conftest import fire_tick


def named(received, name):
    return [pkt['args'][0] if pkt['args'] else None for pkt in received if pkt['name'] == name]


def create_room(sio_factory, name='Alice'):
    host = sio_factory()
    host.emit('create-room', {'playerName': name})
    created = named(host.get_received(), 'room-created')
    assert len(created) == 1
    return host, created[0]


def join(sio_factory, room_id, name):
    guest = sio_factory()
    guest.emit('join-room', {'roomId': room_id, 'playerName': name})
    return guest


def started_pair(sio_factory):
    host, created = create_room(sio_factory)
    guest = join(sio_factory, created['roomId'], 'Bob')
    host.emit('start-game')
    host.get_received()
    guest.get_received()
    return host, guest, created['roomId']


def test_create_room_returns_code_and_snapshot(sio_factory, app_registry):
    host, created = create_room(sio_factory)
    state = created['gameState']
    assert len(created['roomId']) == 6
    assert state['id'] == created['roomId']
    assert [p['name'] for p in state['players']] == ['Alice']
    assert state['gameStarted'] is False
    assert state['currentWord'] is None
    assert app_registry.get_room(created['roomId']) is not None


def test_join_broadcasts_player_joined(sio_factory):
    host, created = create_room(sio_factory)
    guest = join(sio_factory, created['roomId'].lower(), 'Bob')

    for sio in (host, guest):
        joined = named(sio.get_received(), 'player-joined')
        assert len(joined) == 1
        assert [p['name'] for p in joined[0]['players']] == ['Alice', 'Bob']


def test_join_errors_go_to_sender_only(sio_factory):
    stray = join(sio_factory, 'ZZZZZZ', 'Nobody')
    assert named(stray.get_received(), 'room-error') == [
        {'error': 'room_not_found', 'message': 'الغرفة غير موجودة'}
    ]

    host, created = create_room(sio_factory)
    guests = [join(sio_factory, created['roomId'], f'P{i}') for i in range(7)]
    host.get_received()
    ninth = join(sio_factory, created['roomId'], 'Ninth')
    errors = named(ninth.get_received(), 'room-error')
    assert [e['error'] for e in errors] == ['room_full']
    assert named(host.get_received(), 'player-joined') == []
    assert len(guests) == 7


def test_join_after_start_is_rejected(sio_factory):
    host, guest, room_id = started_pair(sio_factory)
    late = join(sio_factory, room_id, 'Late')
    errors = named(late.get_received(), 'room-error')
    assert [e['error'] for e in errors] == ['game_already_started']


def test_events_before_join_are_ignored(sio_factory):
    stray = sio_factory()
    stray.emit('start-game')
    stray.emit('chat-message', {'message': 'hi'})
    stray.emit('drawing-data', {'x': 1})
    stray.emit('clear-canvas')
    stray.emit('get-game-state')
    assert stray.get_received() == []


def test_start_game_needs_two_players(sio_factory):
    host, created = create_room(sio_factory)
    host.emit('start-game')
    assert named(host.get_received(), 'game-started') == []


def test_game_started_redacts_word_for_guessers(sio_factory, app_registry):
    host, created = create_room(sio_factory)
    guest = join(sio_factory, created['roomId'], 'Bob')
    host.get_received()
    guest.get_received()

    host.emit('start-game')
    room = app_registry.get_room(created['roomId'])

    host_view = named(host.get_received(), 'game-started')
    guest_view = named(guest.get_received(), 'game-started')
    assert len(host_view) == 1 and len(guest_view) == 1

    # The creator joined first, so they draw first.
    assert host_view[0]['currentWord'] == room.current_word
    assert guest_view[0]['currentWord'] is None
    assert guest_view[0]['wordLength'] == len(room.current_word)
    assert guest_view[0]['timeLeft'] == 80
    assert guest_view[0]['currentDrawer'] == host_view[0]['players'][0]['id']


def test_correct_guess_flow(sio_factory, app_registry, scheduler):
    host, guest, room_id = started_pair(sio_factory)
    room = app_registry.get_room(room_id)

    guest.emit('chat-message', {'message': f' {room.current_word} '})

    for sio in (host, guest):
        received = sio.get_received()
        chats = named(received, 'chat-message')
        assert len(chats) == 1
        assert chats[0]['isCorrect'] is True
        assert chats[0]['message'] is None
        assert chats[0]['playerName'] == 'Bob'
        updates = named(received, 'game-update')
        assert len(updates) == 1
        scores = {p['name']: p['score'] for p in updates[0]['players']}
        assert scores == {'Alice': 10, 'Bob': 80}

    assert len(scheduler.pending('_advance_after_grace')) == 1


def test_plain_chat_is_relayed(sio_factory):
    host, guest, room_id = started_pair(sio_factory)
    guest.emit('chat-message', 'hello there')
    chats = named(host.get_received(), 'chat-message')
    assert len(chats) == 1
    assert chats[0]['message'] == 'hello there'
    assert chats[0]['isCorrect'] is False
    assert named(guest.get_received(), 'game-update') == []


def test_strokes_relay_from_drawer_only(sio_factory, app_registry):
    host, guest, room_id = started_pair(sio_factory)

    host.emit('drawing-data', {'x': 1, 'y': 2, 'color': '#000'})
    assert named(guest.get_received(), 'drawing-data') == [{'x': 1, 'y': 2, 'color': '#000'}]
    assert named(host.get_received(), 'drawing-data') == []

    guest.emit('drawing-data', {'x': 9})
    assert named(host.get_received(), 'drawing-data') == []

    room = app_registry.get_room(room_id)
    assert room.strokes == [{'x': 1, 'y': 2, 'color': '#000'}]

    guest.emit('clear-canvas')
    assert host.get_received() == []
    assert len(room.strokes) == 1

    host.emit('clear-canvas')
    assert [pkt['name'] for pkt in guest.get_received()] == ['clear-canvas']
    assert [pkt['name'] for pkt in host.get_received()] == ['clear-canvas']
    assert room.strokes == []


def test_get_game_state_goes_to_sender(sio_factory):
    host, guest, room_id = started_pair(sio_factory)
    guest.emit('get-game-state')
    states = named(guest.get_received(), 'game-update')
    assert len(states) == 1
    assert states[0]['id'] == room_id
    assert states[0]['currentWord'] is None
    assert host.get_received() == []


def test_timer_updates_reach_the_room(sio_factory, app_registry):
    host, guest, room_id = started_pair(sio_factory)
    room = app_registry.get_room(room_id)

    fire_tick(app_registry, room)
    for sio in (host, guest):
        assert named(sio.get_received(), 'timer-update') == [{'timeLeft': 79, 'round': 1}]


def test_timeout_sends_new_turn(sio_factory, app_registry):
    host, guest, room_id = started_pair(sio_factory)
    room = app_registry.get_room(room_id)
    room.time_left = 1

    fire_tick(app_registry, room)
    guest_updates = named(guest.get_received(), 'game-update')
    assert len(guest_updates) == 1
    # Bob draws now and sees the word; Alice does not.
    assert guest_updates[0]['currentWord'] == room.current_word
    assert named(host.get_received(), 'game-update')[0]['currentWord'] is None


def test_drawer_disconnect_assigns_new_drawer(sio_factory, app_registry):
    host, created = create_room(sio_factory)
    room_id = created['roomId']
    bob = join(sio_factory, room_id, 'Bob')
    cara = join(sio_factory, room_id, 'Cara')
    host.emit('start-game')
    room = app_registry.get_room(room_id)
    bob.get_received()
    cara.get_received()
    old_drawer = room.current_drawer_id

    host.disconnect()

    left = named(bob.get_received(), 'player-left')
    assert len(left) == 1
    assert [p['name'] for p in left[0]['players']] == ['Bob', 'Cara']
    assert left[0]['currentDrawer'] is not None
    assert left[0]['currentDrawer'] != old_drawer
    assert len(named(cara.get_received(), 'player-left')) == 1


def test_last_player_leaving_deletes_room(sio_factory, app_registry):
    host, created = create_room(sio_factory)
    host.emit('leave-room')
    assert app_registry.get_room(created['roomId']) is None
    assert app_registry.stats() == {'rooms': 0, 'players': 0}
