"""Tests for 1-5 star ratings."""

import pytest

from aurora_music.domain.accounts import create_user
from aurora_music.domain.library.exceptions import NotFoundError, ValidationError
from aurora_music.domain.library.songs import insert_song
from aurora_music.domain.rating import (
    get_rating_stats_for_songs,
    get_song_ratings,
    get_top_rated_songs,
    get_user_ratings,
    save_rating,
    validate_rating,
)


@pytest.fixture
def setup(db, fake_mp3):
    alice = create_user(db, "alice")
    bob = create_user(db, "bob")
    first = insert_song(db, "First", 120, fake_mp3, alice.id, [1])
    second = insert_song(db, "Second", 150, fake_mp3, alice.id, [2])
    return alice, bob, first, second


@pytest.mark.parametrize("value", [1, 3, 5])
def test_valid_ratings(value):
    assert validate_rating(value) == value


@pytest.mark.parametrize("value", [0, 6, -1, 2.5, "4", True, None])
def test_invalid_ratings(value):
    with pytest.raises(ValidationError):
        validate_rating(value)


def test_second_rating_replaces_first(db, setup):
    alice, _, first, _ = setup
    save_rating(db, alice.id, first.id, 2)
    save_rating(db, alice.id, first.id, 5)

    ratings = get_song_ratings(db, first.id)
    assert len(ratings) == 1
    assert ratings[0]["rating"] == 5
    assert get_user_ratings(db, alice.id) == {first.id: 5}


def test_rating_missing_song(db, setup):
    alice = setup[0]
    with pytest.raises(NotFoundError):
        save_rating(db, alice.id, 999, 3)


def test_stats_per_song(db, setup):
    alice, bob, first, second = setup
    save_rating(db, alice.id, first.id, 4)
    save_rating(db, bob.id, first.id, 5)

    stats = get_rating_stats_for_songs(db, [first.id, second.id])

    assert stats == {first.id: (4.5, 2)}
    assert get_rating_stats_for_songs(db, []) == {}


def test_top_rated_orders_by_average_then_count(db, setup, fake_mp3):
    alice, bob, first, second = setup
    third = insert_song(db, "Third", 90, fake_mp3, alice.id, [3])
    save_rating(db, alice.id, first.id, 4)
    save_rating(db, alice.id, second.id, 5)
    save_rating(db, alice.id, third.id, 5)
    save_rating(db, bob.id, third.id, 5)

    top = get_top_rated_songs(db, limit=10)

    assert [entry.track.id for entry in top] == [third.id, second.id, first.id]
    assert top[0].average_rating == 5.0
    assert top[0].rating_count == 2
    assert top[0].track.genres != ()


def test_top_rated_skips_unrated(db, setup):
    assert get_top_rated_songs(db) == []
