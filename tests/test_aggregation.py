import pytest

from book_catalog_api.app.services.aggregation import (
    average_rating,
    display_rating,
    page_offset,
    star_rating,
    total_pages,
)


def test_average_rating():
    assert average_rating([5, 3, 4]) == 4.0
    assert average_rating([]) == 0
    assert average_rating(r for r in [1, 2]) == 1.5


def test_display_rating_keeps_one_decimal():
    assert display_rating(average_rating([5, 4, 4])) == 4.3
    assert display_rating(0.0) == 0.0


@pytest.mark.parametrize("ratings,shown", [([4, 4, 4, 5], 4.3), ([2, 2, 2, 3], 2.3), ([1, 2], 1.5)])
def test_display_rating_rounds_half_up(ratings, shown):
    assert display_rating(average_rating(ratings)) == shown


@pytest.mark.parametrize(
    "mean,stars",
    [(0.0, 0), (1.49, 1), (2.5, 3), (3.5, 4), (4.0, 4), (4.67, 5)],
)
def test_star_rating_rounds_half_up(mean, stars):
    assert star_rating(mean) == stars


def test_pagination_arithmetic():
    assert page_offset(1) == 0
    assert page_offset(3) == 10
    assert total_pages(0) == 0
    assert total_pages(5) == 1
    assert total_pages(12) == 3
