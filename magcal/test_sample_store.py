"""
Test sample file loading and saving.

Loading is all-or-nothing: a malformed file must leave the store untouched.
"""

import numpy as np
import pytest

from magcal.errors import FormatError, IoError
from magcal.sample_store import SampleStore, parse_sample_line
from magcal.schema import Sample


def write(tmp_path, text, name='samples.txt'):
    path = tmp_path / name
    path.write_text(text)
    return path


def test_load_three_lines_in_order(tmp_path):
    path = write(tmp_path, "1 2 3\n4 5 6\n7 8 9")
    store = SampleStore()

    assert store.load_from_text(path) == 3
    assert store.samples == [Sample(1, 2, 3), Sample(4, 5, 6), Sample(7, 8, 9)]


def test_load_accepts_any_whitespace(tmp_path):
    path = write(tmp_path, "1.5\t-2e1   3\n  4 5\t\t6  \n")
    store = SampleStore()
    store.load_from_text(path)

    assert store.samples == [Sample(1.5, -20.0, 3.0), Sample(4.0, 5.0, 6.0)]


def test_load_replaces_existing_samples(tmp_path):
    path = write(tmp_path, "1 2 3\n")
    store = SampleStore([(9, 9, 9), (8, 8, 8)])
    store.load_from_text(path)

    assert store.samples == [Sample(1, 2, 3)]


def test_two_token_line_keeps_previous_contents(tmp_path):
    path = write(tmp_path, "1 2 3\n4 5\n7 8 9\n")
    store = SampleStore([(10, 20, 30)])

    with pytest.raises(FormatError) as excinfo:
        store.load_from_text(path)

    assert excinfo.value.line_number == 2
    assert store.samples == [Sample(10, 20, 30)]


def test_non_numeric_token_rejected(tmp_path):
    path = write(tmp_path, "1 2 3\n4 five 6\n")
    store = SampleStore()

    with pytest.raises(FormatError, match="five"):
        store.load_from_text(path)
    assert len(store) == 0


def test_non_finite_token_rejected():
    with pytest.raises(FormatError):
        parse_sample_line("1 nan 3", 1)
    with pytest.raises(FormatError):
        parse_sample_line("inf 2 3", 1)


def test_four_tokens_rejected():
    with pytest.raises(FormatError):
        parse_sample_line("1 2 3 4", 7)


def test_missing_file_raises_io_error(tmp_path):
    store = SampleStore([(1, 2, 3)])

    with pytest.raises(IoError):
        store.load_from_text(tmp_path / 'missing.txt')
    assert store.samples == [Sample(1, 2, 3)]


def test_save_writes_tab_separated_lines(tmp_path):
    store = SampleStore([(1, 2, 3), (-4.25, 5, 6)])
    path = tmp_path / 'out.txt'
    store.save_to_text(path)

    lines = path.read_text().splitlines()
    assert lines == ["1.0\t2.0\t3.0", "-4.25\t5.0\t6.0"]


def test_save_then_load_round_trip(tmp_path):
    rng = np.random.default_rng(3)
    original = SampleStore(rng.normal(0.0, 50.0, size=(40, 3)))
    path = tmp_path / 'round_trip.txt'
    original.save_to_text(path)

    loaded = SampleStore()
    loaded.load_from_text(path)

    assert loaded.samples == original.samples


def test_save_to_unwritable_path_raises_io_error(tmp_path):
    store = SampleStore([(1, 2, 3)])

    with pytest.raises(IoError):
        store.save_to_text(tmp_path)  # a directory
    with pytest.raises(IoError):
        store.save_to_text(tmp_path / 'no_such_dir' / 'out.txt')


def test_add_preserves_order_and_duplicates():
    store = SampleStore()
    store.add((1, 1, 1))
    store.add([2, 2, 2])
    store.add((1, 1, 1))

    assert len(store) == 3
    assert store[0] == store[2] == Sample(1, 1, 1)
    np.testing.assert_array_equal(store.as_array()[1], [2, 2, 2])


def test_clear_and_empty_array():
    store = SampleStore([(1, 2, 3)])
    store.clear()

    assert len(store) == 0
    assert store.as_array().shape == (0, 3)
