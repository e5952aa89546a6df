import random
from datetime import timedelta

import pytest

from vaultcards.models import StudySettings
from vaultcards.selector import (
    build_review_pool,
    random_subset,
    select_forced_review_cards,
    select_review_cards,
    sort_cards_for_listing,
)


@pytest.fixture
def not_due_cards(card_factory, now):
    """Two reviewed cards whose next review is in the future."""
    return [
        card_factory(
            f"Later {i}",
            last_reviewed=now - timedelta(days=i + 1),
            next_review=now + timedelta(days=5),
            ease_factor=2.5,
            interval=3,
            review_count=1,
        )
        for i in range(2)
    ]


class TestSelectReviewCards:
    def test_samples_session_from_never_reviewed_cards(
        self, new_cards, not_due_cards, now
    ):
        settings = StudySettings(new_cards_per_day=10, cards_per_session=3)

        selected = select_review_cards(new_cards + not_due_cards, now, settings)

        assert len(selected) == 3
        assert len({c.id for c in selected}) == 3
        assert {c.id for c in selected} <= {c.id for c in new_cards}

    def test_due_cards_are_capped_by_reviews_per_day(self, card_factory, now):
        due = [
            card_factory(f"Due {i}", next_review=now - timedelta(hours=i + 1))
            for i in range(10)
        ]
        settings = StudySettings(reviews_per_day=4, cards_per_session=10)

        selected = select_review_cards(due, now, settings)

        # Simple truncation in store order, no prioritisation.
        assert {c.id for c in selected} == {c.id for c in due[:4]}

    def test_card_due_exactly_now_is_due(self, card_factory, now):
        card = card_factory("Boundary", next_review=now)
        assert build_review_pool([card], now, StudySettings()) == [card]

    def test_falls_back_to_unreviewed_cards_when_nothing_due(
        self, card_factory, not_due_cards, now
    ):
        # Never reviewed, but carrying a future next review, so not due.
        pending = [
            card_factory(f"Pending {i}", next_review=now + timedelta(days=1))
            for i in range(4)
        ]
        settings = StudySettings(new_cards_per_day=2, cards_per_session=5)

        pool = build_review_pool(not_due_cards + pending, now, settings)

        assert pool == pending[:2]

    def test_nothing_available_returns_empty(self, not_due_cards, now):
        assert select_review_cards(not_due_cards, now, StudySettings()) == []

    def test_empty_store(self, now):
        assert select_review_cards([], now, StudySettings()) == []

    def test_session_never_exceeds_pool(self, new_cards, now):
        settings = StudySettings(cards_per_session=50)
        selected = select_review_cards(new_cards, now, settings)
        assert sorted(c.id for c in selected) == sorted(c.id for c in new_cards)

    def test_seeded_rng_is_reproducible(self, new_cards, now):
        settings = StudySettings(cards_per_session=3)
        first = select_review_cards(new_cards, now, settings, rng=random.Random(7))
        second = select_review_cards(new_cards, now, settings, rng=random.Random(7))
        assert [c.id for c in first] == [c.id for c in second]


def test_random_subset_is_roughly_uniform(new_cards):
    rng = random.Random(1234)
    counts = {card.id: 0 for card in new_cards}
    for _ in range(5000):
        for card in random_subset(new_cards, 2, rng):
            counts[card.id] += 1
    # Each of the 5 cards is expected in 2/5 of the draws (2000 times).
    assert all(1800 < count < 2200 for count in counts.values())


class TestForcedReview:
    def test_orders_never_reviewed_first_then_oldest_review(
        self, card_factory, now
    ):
        recent = card_factory("Recent", last_reviewed=now - timedelta(days=1))
        oldest = card_factory("Oldest", last_reviewed=now - timedelta(days=30))
        fresh_a = card_factory("Fresh A")
        middle = card_factory("Middle", last_reviewed=now - timedelta(days=7))
        fresh_b = card_factory("Fresh B")
        settings = StudySettings(cards_per_session=10)

        ordered = select_forced_review_cards(
            [recent, oldest, fresh_a, middle, fresh_b], settings
        )

        assert [c.front for c in ordered] == [
            "Fresh A",
            "Fresh B",
            "Oldest",
            "Middle",
            "Recent",
        ]

    def test_capped_at_cards_per_session(self, new_cards):
        settings = StudySettings(cards_per_session=2)
        assert select_forced_review_cards(new_cards, settings) == new_cards[:2]

    def test_ignores_due_dates(self, not_due_cards):
        selected = select_forced_review_cards(not_due_cards, StudySettings())
        # The card reviewed two days ago comes before the one reviewed yesterday.
        assert selected == [not_due_cards[1], not_due_cards[0]]


def test_sort_cards_for_listing(card_factory, now):
    later = card_factory("Later", next_review=now + timedelta(days=9))
    sooner = card_factory("Sooner", next_review=now + timedelta(days=1))
    unscheduled = card_factory("Unscheduled")

    ordered = sort_cards_for_listing([later, sooner, unscheduled])

    assert [c.front for c in ordered] == ["Unscheduled", "Sooner", "Later"]
