import pytest

from backend.src.services.bubble_sizing import bubble_size, longest_word_length


@pytest.mark.parametrize(
    "label,expected",
    [
        ("Photosynthesis", 14),
        ("Long-term Memory", 6),
        ("spaced   repetition", 10),
        ("", 0),
    ],
)
def test_longest_word_length(label, expected):
    assert longest_word_length(label) == expected


@pytest.mark.parametrize(
    "label,index,expanded,expected",
    [
        ("Sun", 0, False, 57.0),
        ("Sun", 1, False, 69.0),
        ("Sun", 4, False, 57.0),
        ("Long-term Memory", 2, False, 74.0),
        ("Photosynthesis", 0, False, 90.0),
        ("", 0, False, 55.0),
        ("Sun", 0, True, 82.0),
        ("Sun", 3, True, 86.0),
        ("Photosynthesis", 0, True, 120.0),
        ("", 0, True, 70.0),
    ],
)
def test_bubble_size(label, index, expanded, expected):
    assert bubble_size(label, index, expanded=expanded) == expected


def test_sizes_stay_within_mode_bounds():
    labels = ["a", "Metacognition", "Interdisciplinarity-focused", "x y z"]
    for index in range(12):
        for label in labels:
            assert 55.0 <= bubble_size(label, index) <= 90.0
            assert 70.0 <= bubble_size(label, index, expanded=True) <= 120.0
