import pytest

from doodleduel.game.errors import RoomNotFound
from doodleduel.game.registry import CODE_ALPHABET, normalize_code


def test_codes_are_unique_and_readable(registry):
    codes = {registry.create_room().code for _ in range(50)}
    assert len(codes) == 50
    assert len(registry) == 50
    for code in codes:
        assert len(code) == 6
        assert set(code) <= set(CODE_ALPHABET)
        assert not set(code) & set('0O1I')


def test_normalize_code():
    assert normalize_code('  abc123 ') == 'ABC123'
    assert normalize_code(None) == ''


def test_require_room_is_case_insensitive(registry, room):
    assert registry.require_room(room.code.lower()) is room
    with pytest.raises(RoomNotFound):
        registry.require_room('ZZZZZZ')


def test_find_by_connection(registry, lobby):
    other = registry.create_room()
    other.join('sid-cara', 'Cara', '')

    assert registry.find_by_connection('sid-bob') is lobby
    assert registry.find_by_connection('sid-cara') is other
    assert registry.find_by_connection('sid-nobody') is None

    lobby.disconnect('sid-bob')
    assert registry.find_by_connection('sid-bob') is None


def test_empty_room_is_torn_down_after_grace(registry, room, scheduler):
    room.join('sid-alice', 'Alice', '')
    room.disconnect('sid-alice')

    scheduler.advance(299)
    assert registry.get_room(room.code) is room

    scheduler.advance(1)
    assert registry.get_room(room.code) is None
    assert room.closed
    assert scheduler.pending() == 0


def test_rejoin_cancels_teardown(registry, room, scheduler):
    room.join('sid-alice', 'Alice', '')
    room.disconnect('sid-alice')
    scheduler.advance(200)

    room.join('sid-alice-2', 'Alice', '')
    scheduler.advance(300)
    assert registry.get_room(room.code) is room
    assert not room.closed


def test_abandoned_game_cancels_every_timer(registry, drawing_round, scheduler):
    drawing_round.disconnect('sid-alice')
    drawing_round.disconnect('sid-bob')

    scheduler.advance(301)

    assert registry.get_room(drawing_round.code) is None
    assert scheduler.pending() == 0


def test_closed_room_rejects_operations(registry, lobby):
    assert registry.delete_room(lobby.code)
    assert not registry.delete_room(lobby.code)

    with pytest.raises(RoomNotFound):
        lobby.join('sid-cara', 'Cara', '')
    with pytest.raises(RoomNotFound):
        registry.require_room(lobby.code)
