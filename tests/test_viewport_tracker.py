from types import SimpleNamespace

from scroll_region import ScrollRegion, VerseBlock
from viewport_tracker import ViewportTracker, select_active_verse, topmost_visible_verse


def test_only_blocks_over_threshold_are_eligible():
    assert select_active_verse([(1, 0.1), (2, 0.5), (3, 0.0)]) == 2


def test_no_eligible_block_returns_none():
    assert select_active_verse([(1, 0.1), (2, 0.29), (3, 0.0)]) is None
    assert select_active_verse([]) is None


def test_equal_ratios_resolve_to_lowest_verse():
    assert select_active_verse([(6, 0.6), (5, 0.6)]) == 5


def test_topmost_visible_ignores_blocks_outside_viewport():
    blocks = [VerseBlock(1, 0.0, 100.0), VerseBlock(2, 100.0, 100.0), VerseBlock(3, 200.0, 100.0)]
    assert topmost_visible_verse(blocks, 150.0, 100.0) == 2
    assert topmost_visible_verse(blocks, 400.0, 100.0) is None


def test_tracker_follows_offset_changes(qt_app):
    blocks = [VerseBlock(5, 0.0, 100.0), VerseBlock(6, 100.0, 100.0)]
    region = ScrollRegion(content_height=200.0, viewport_height=120.0, blocks=blocks)
    tracker = ViewportTracker()
    seen = []
    tracker.active_verse_changed.connect(seen.append)

    tracker.observe(blocks, region)
    region.set_scroll_offset(80.0)
    region.set_scroll_offset(40.0)

    assert seen == [5, 6, 5]
    assert tracker.active_verse == 5
    tracker.stop()


def test_active_verse_is_kept_when_nothing_qualifies(qt_app):
    blocks = [VerseBlock(1, 0.0, 100.0), VerseBlock(2, 100.0, 1000.0)]
    region = ScrollRegion(content_height=1100.0, viewport_height=100.0, blocks=blocks)
    tracker = ViewportTracker()

    tracker.observe(blocks, region)
    assert tracker.active_verse == 1

    # 20px of verse 1 and 80px of verse 2: ratios 0.2 and 0.08.
    region.set_scroll_offset(80.0)
    assert tracker.active_verse == 1
    tracker.stop()


def test_block_covering_viewport_counts_as_visible(qt_app):
    blocks = [VerseBlock(1, 0.0, 100.0), VerseBlock(2, 100.0, 2000.0)]
    region = ScrollRegion(content_height=2100.0, viewport_height=300.0, blocks=blocks)
    tracker = ViewportTracker()

    tracker.observe(blocks, region)
    region.set_scroll_offset(500.0)

    assert tracker.active_verse == 2
    tracker.stop()


def test_geometry_change_triggers_recompute(qt_app):
    region = ScrollRegion(content_height=400.0, viewport_height=100.0)
    tracker = ViewportTracker()
    seen = []
    tracker.active_verse_changed.connect(seen.append)
    tracker.observe([], region)
    assert seen == []

    blocks = [VerseBlock(1, 0.0, 100.0), VerseBlock(2, 100.0, 100.0)]
    tracker.update_blocks(blocks)

    assert seen == [1]
    tracker.stop()


def test_stop_is_idempotent_and_disconnects(qt_app):
    blocks = [VerseBlock(1, 0.0, 100.0), VerseBlock(2, 100.0, 100.0)]
    region = ScrollRegion(content_height=200.0, viewport_height=100.0, blocks=blocks)
    tracker = ViewportTracker()
    seen = []
    tracker.active_verse_changed.connect(seen.append)
    tracker.observe(blocks, region)

    tracker.stop()
    tracker.stop()
    region.set_scroll_offset(100.0)

    assert seen == [1]
    assert not tracker.is_observing


def test_stop_clears_active_verse(qt_app):
    blocks = [VerseBlock(1, 0.0, 100.0), VerseBlock(2, 100.0, 100.0), VerseBlock(3, 200.0, 100.0)]
    region = ScrollRegion(content_height=300.0, viewport_height=100.0, blocks=blocks)
    tracker = ViewportTracker()
    tracker.observe(blocks, region)
    region.set_scroll_offset(200.0)
    assert tracker.active_verse == 3

    tracker.stop()

    assert tracker.active_verse is None


def test_observe_replaces_previous_registration(qt_app):
    first = ScrollRegion(content_height=200.0, viewport_height=100.0, blocks=[VerseBlock(1, 0.0, 100.0)])
    second_blocks = [VerseBlock(1, 0.0, 100.0), VerseBlock(2, 100.0, 100.0)]
    second = ScrollRegion(content_height=200.0, viewport_height=100.0, blocks=second_blocks)
    tracker = ViewportTracker()
    seen = []
    tracker.active_verse_changed.connect(seen.append)

    tracker.observe(first.blocks, first)
    tracker.observe(second_blocks, second)
    first.set_scroll_offset(100.0)
    second.set_scroll_offset(100.0)

    # Each registration starts a fresh sequence.
    assert seen == [1, 1, 2]
    tracker.stop()


def test_region_without_notifications_is_sampled(qt_app):
    blocks = [VerseBlock(1, 0.0, 100.0), VerseBlock(2, 100.0, 100.0), VerseBlock(3, 200.0, 100.0)]
    region = SimpleNamespace(scroll_offset=0.0, viewport_height=100.0)
    tracker = ViewportTracker()
    seen = []
    tracker.active_verse_changed.connect(seen.append)

    tracker.observe(blocks, region)
    assert tracker.is_sampling
    assert seen == [1]

    region.scroll_offset = 150.0
    tracker.sample()
    tracker.sample()

    assert seen == [1, 2]
    tracker.stop()
    assert not tracker.is_sampling
