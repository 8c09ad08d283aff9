"""
Tests for the carousel CQRS APIs against an in-memory DynamoDB.
"""

import pytest

from portfolio_store import CarouselPosition
from portfolio_store.exceptions import AlreadyExistsError, ItemNotFoundError, ValidationError


def slide(api, title, **extra):
    return api.create_item({"title": title, **extra})


class TestCreateItem:
    """Test slide creation."""

    def test_positions_follow_last(self, carousel_write_api):
        created = [slide(carousel_write_api, f"Slide {n}") for n in range(1, 4)]

        assert [item.position for item in created] == [1, 2, 3]

    def test_defaults(self, carousel_write_api, sample_carousel_data):
        item = carousel_write_api.create_item(sample_carousel_data)

        assert item.item_id.startswith("slide-")
        assert item.button_text == "Learn More"
        assert item.display_duration == 5000
        assert item.overlay_opacity == 0.3
        assert item.view_count == 0
        assert item.click_count == 0

    def test_explicit_position(self, carousel_write_api):
        assert slide(carousel_write_api, "Late", position=40).position == 40
        assert slide(carousel_write_api, "Next").position == 41

    def test_duplicate_id(self, carousel_write_api):
        slide(carousel_write_api, "One", item_id="hero")

        with pytest.raises(AlreadyExistsError):
            slide(carousel_write_api, "Two", item_id="hero")

    def test_bad_schedule(self, carousel_write_api):
        with pytest.raises(ValidationError):
            slide(
                carousel_write_api, "Backwards",
                scheduled_start="2026-06-02T00:00:00Z",
                scheduled_end="2026-06-01T00:00:00Z",
            )

    def test_opacity_out_of_range(self, carousel_write_api):
        with pytest.raises(ValidationError):
            slide(carousel_write_api, "Dark", overlay_opacity=1.5)

    def test_position_out_of_range(self, carousel_write_api):
        with pytest.raises(ValidationError):
            slide(carousel_write_api, "Far", position=1000)


class TestCarouselQueries:
    """Test carousel listings and lookups."""

    def test_list_active(self, carousel_write_api, carousel_read_api):
        slide(carousel_write_api, "Second", status="active", position=2)
        slide(carousel_write_api, "Draft", position=3)
        slide(carousel_write_api, "First", status="active", position=1)
        slide(carousel_write_api, "Hidden", status="active", is_visible=False, position=4)

        assert [item.title for item in carousel_read_api.list_active()] == ["First", "Second"]

    def test_list_all(self, carousel_write_api, carousel_read_api):
        slide(carousel_write_api, "B", position=2)
        slide(carousel_write_api, "A", position=1, is_visible=False)

        assert [item.title for item in carousel_read_api.list_all()] == ["A", "B"]

    def test_get_by_id(self, carousel_write_api, carousel_read_api, sample_carousel_data):
        created = carousel_write_api.create_item(sample_carousel_data)

        item = carousel_read_api.get_by_id(created.item_id)

        assert item == created
        assert item.link_type == "project"

    def test_get_missing(self, carousel_read_api, portfolio_table):
        with pytest.raises(ItemNotFoundError):
            carousel_read_api.get_by_id("slide-missing")


class TestUpdateItem:
    """Test partial slide updates."""

    def test_activate(self, carousel_write_api, carousel_read_api):
        item = slide(carousel_write_api, "Draft")
        assert carousel_read_api.list_active() == []

        updated = carousel_write_api.update_item(item.item_id, {"status": "active", "subtitle": "Now live"})

        assert updated.status == "active"
        assert updated.subtitle == "Now live"
        assert [i.item_id for i in carousel_read_api.list_active()] == [item.item_id]

    def test_move_preserves_counters(self, carousel_write_api, carousel_read_api):
        item = slide(carousel_write_api, "Moving", status="active")
        slide(carousel_write_api, "Other", status="active")
        carousel_write_api.increment_view(item.item_id)
        carousel_write_api.increment_click(item.item_id)

        moved = carousel_write_api.update_item(item.item_id, {"position": 5})

        assert moved.position == 5
        assert (moved.view_count, moved.click_count) == (1, 1)
        assert [i.title for i in carousel_read_api.list_active()] == ["Other", "Moving"]
        assert len(carousel_read_api.list_all()) == 2

    def test_clear_schedule(self, carousel_write_api):
        item = slide(carousel_write_api, "Timed", scheduled_start="2026-06-01T00:00:00Z")
        assert item.scheduled_start is not None

        updated = carousel_write_api.update_item(item.item_id, {"scheduled_start": None})

        assert updated.scheduled_start is None

    def test_update_missing(self, carousel_write_api, portfolio_table):
        with pytest.raises(ItemNotFoundError):
            carousel_write_api.update_item("slide-missing", {"title": "x"})


class TestDeleteItem:
    """Test slide deletion."""

    def test_delete(self, carousel_write_api, carousel_read_api):
        keep = slide(carousel_write_api, "Keep")
        drop = slide(carousel_write_api, "Drop")

        assert carousel_write_api.delete_item(drop.item_id) is True

        assert [i.item_id for i in carousel_read_api.list_all()] == [keep.item_id]

    def test_delete_twice(self, carousel_write_api):
        item = slide(carousel_write_api, "Once")
        carousel_write_api.delete_item(item.item_id)

        with pytest.raises(ItemNotFoundError):
            carousel_write_api.delete_item(item.item_id)


class TestReorderItems:
    """Test chunked carousel reorder."""

    def test_reorder(self, carousel_write_api, carousel_read_api):
        first, second, third = (slide(carousel_write_api, t, status="active") for t in ("1", "2", "3"))

        moved = carousel_write_api.reorder_items([
            CarouselPosition(item_id=third.item_id, position=1),
            CarouselPosition(item_id=first.item_id, position=3),
        ])

        assert moved == 2
        assert [i.item_id for i in carousel_read_api.list_active()] == [third.item_id, second.item_id, first.item_id]

    def test_unchanged_skipped(self, carousel_write_api):
        item = slide(carousel_write_api, "Still")

        assert carousel_write_api.reorder_items([{"item_id": item.item_id, "position": 1}]) == 0

    def test_unknown_item(self, carousel_write_api, carousel_read_api):
        item = slide(carousel_write_api, "Real")

        with pytest.raises(ItemNotFoundError):
            carousel_write_api.reorder_items([
                {"item_id": item.item_id, "position": 7},
                {"item_id": "slide-ghost", "position": 8},
            ])

        assert carousel_read_api.get_by_id(item.item_id).position == 1

    def test_duplicate_entries(self, carousel_write_api):
        item = slide(carousel_write_api, "Twice")

        with pytest.raises(ValidationError):
            carousel_write_api.reorder_items([
                {"item_id": item.item_id, "position": 2},
                {"item_id": item.item_id, "position": 3},
            ])


class TestCounters:
    """Test view and click counters."""

    def test_increments(self, carousel_write_api, carousel_read_api):
        item = slide(carousel_write_api, "Counted")

        carousel_write_api.increment_view(item.item_id)
        assert carousel_write_api.increment_view(item.item_id) == 2
        assert carousel_write_api.increment_click(item.item_id) == 1

        stored = carousel_read_api.get_by_id(item.item_id)
        assert (stored.view_count, stored.click_count) == (2, 1)

    def test_increment_missing(self, carousel_write_api, portfolio_table):
        with pytest.raises(ItemNotFoundError):
            carousel_write_api.increment_view("slide-missing")

    def test_increment_after_move(self, carousel_write_api):
        item = slide(carousel_write_api, "Moved")
        carousel_write_api.update_item(item.item_id, {"position": 9})

        assert carousel_write_api.increment_click(item.item_id) == 1


class TestAnalytics:
    """Test click-through analytics."""

    def test_rates_and_summary(self, carousel_write_api, carousel_read_api):
        busy = slide(carousel_write_api, "Busy", status="active")
        slide(carousel_write_api, "Quiet")
        for _ in range(4):
            carousel_write_api.increment_view(busy.item_id)
        carousel_write_api.increment_click(busy.item_id)
        carousel_write_api.increment_click(busy.item_id)

        analytics = carousel_read_api.get_analytics()

        rates = {row.title: row.click_through_rate for row in analytics.items}
        assert rates == {"Busy": "50.00", "Quiet": "0.00"}
        assert analytics.summary.total_items == 2
        assert analytics.summary.active_items == 1
        assert analytics.summary.total_views == 4
        assert analytics.summary.total_clicks == 2
        assert analytics.summary.overall_click_through_rate == "50.00"

    def test_empty_carousel(self, carousel_read_api, portfolio_table):
        analytics = carousel_read_api.get_analytics()

        assert analytics.items == []
        assert analytics.summary.overall_click_through_rate == "0.00"
