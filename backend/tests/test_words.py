import logging
import random

from doodleduel.game.words import FALLBACK_WORDS, WordBank


def test_pick_choices_are_distinct():
    bank = WordBank(['a', 'b', 'c', 'd', 'e'], rng=random.Random(1))
    choices = bank.pick_choices(3)
    assert len(choices) == 3
    assert len(set(choices)) == 3


def test_pick_more_than_corpus_returns_whole_corpus():
    bank = WordBank(['a', 'b'])
    assert sorted(bank.pick_choices(5)) == ['a', 'b']


def test_blank_and_duplicate_lines_are_dropped():
    bank = WordBank(['cat', '', '  ', 'Cat', 'dog '])
    assert bank.words == ('cat', 'dog')


def test_load_reads_one_word_per_line(tmp_path):
    path = tmp_path / 'words.txt'
    path.write_text('apple\nice cream\n\nzebra\n', encoding='utf-8')
    bank = WordBank.load(path)
    assert bank.words == ('apple', 'ice cream', 'zebra')


def test_missing_file_falls_back_with_warning(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        bank = WordBank.load(tmp_path / 'nope.txt')
    assert bank.words == FALLBACK_WORDS
    assert 'fallback' in caplog.text


def test_empty_file_falls_back(tmp_path):
    path = tmp_path / 'words.txt'
    path.write_text('\n\n', encoding='utf-8')
    assert WordBank.load(path).words == FALLBACK_WORDS


def test_packaged_word_list_loads():
    from doodleduel.config import Config

    bank = WordBank.load(Config.WORDS_PATH)
    assert len(bank) > len(FALLBACK_WORDS)
