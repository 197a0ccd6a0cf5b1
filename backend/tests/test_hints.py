import random

from doodleduel.game.hints import can_reveal, hidden_indices, pick_hint_index
from doodleduel.game.timers import Countdown


def test_hints_keep_two_letters_hidden():
    rng = random.Random(3)
    word = 'hot air balloon'
    revealed = set()
    while True:
        idx = pick_hint_index(word, revealed, rng)
        if idx is None:
            break
        assert word[idx] != ' '
        assert idx not in revealed
        revealed.add(idx)
    assert len(hidden_indices(word, revealed)) == 2


def test_short_words_get_no_hints():
    assert pick_hint_index('ox', set()) is None
    assert not can_reveal('ox', set())


def test_three_letter_word_gets_one_hint():
    idx = pick_hint_index('cat', set(), random.Random(0))
    assert idx in (0, 1, 2)
    assert not can_reveal('cat', {idx})


def test_countdown_reports_half_mark_once():
    clock = Countdown(90)
    halves = []
    while True:
        tick = clock.tick()
        if tick.reached_half:
            halves.append(tick.remaining)
        if tick.expired:
            break
    assert halves == [45]
    assert clock.remaining == 0


def test_countdown_reset():
    clock = Countdown(10)
    clock.tick()
    clock.reset()
    assert clock.remaining == 10
