import pytest

from quiz_engine.helpers.session_statistics import exact_percent


@pytest.mark.parametrize(
    "correct, total, expected",
    [
        (1, 8, 13),
        (3, 8, 38),
        (1, 3, 33),
        (2, 3, 67),
        (0, 5, 0),
        (4, 4, 100),
    ],
)
def test_exact_percent_rounds_half_up(correct, total, expected):
    assert exact_percent({"total_answers": total, "correct_count": correct}) == expected


def test_exact_percent_without_answers():
    assert exact_percent({"total_answers": 0, "correct_count": 0}) is None
