import pytest

from scroll_driver import (
    FULL_RATE_PIXELS_PER_SECOND,
    ScrollDriver,
    ScrollSession,
    ease_out_cubic,
    rate_for_percent,
)
from scroll_region import ScrollRegion, VerseBlock
from viewport_tracker import ViewportTracker


def make_region(content_height=100_000.0, viewport_height=500.0, verse_count=0, verse_height=100.0):
    blocks = [
        VerseBlock(verse_number=index + 1, top=index * verse_height, height=verse_height)
        for index in range(verse_count)
    ]
    return ScrollRegion(content_height=content_height, viewport_height=viewport_height, blocks=blocks)


def run_ticks(driver, seconds, ticks_per_second, start=0.0):
    total = int(round(seconds * ticks_per_second))
    for index in range(total + 1):
        driver.tick(start + index / ticks_per_second)


def test_rate_mapping_is_linear_and_clamped():
    assert rate_for_percent(100) == pytest.approx(FULL_RATE_PIXELS_PER_SECOND)
    assert rate_for_percent(50) == pytest.approx(20.0)
    assert rate_for_percent(10) == pytest.approx(4.0)
    assert rate_for_percent(5) == pytest.approx(4.0)
    assert rate_for_percent(250) == pytest.approx(40.0)


def test_ease_out_cubic_endpoints():
    assert ease_out_cubic(0.0) == 0.0
    assert ease_out_cubic(1.0) == 1.0
    assert ease_out_cubic(0.5) > 0.5


def test_session_carries_fractional_pixels():
    session = ScrollSession(rate=4.0)
    assert session.advance(0.0) == 0
    assert session.advance(0.125) == 0
    assert session.carryover == 0.5
    assert session.advance(0.25) == 1
    assert session.carryover == 0.0


@pytest.mark.parametrize("percent", [10, 35, 50, 75, 100])
@pytest.mark.parametrize("ticks_per_second", [60, 20])
def test_distance_matches_rate_regardless_of_tick_rate(qt_app, percent, ticks_per_second):
    region = make_region()
    driver = ScrollDriver(region)
    assert driver.start(region, percent)

    run_ticks(driver, 10.0, ticks_per_second)

    expected = rate_for_percent(percent) * 10.0
    assert abs(region.scroll_offset - expected) <= 1.0
    driver.stop()


def test_first_tick_does_not_move(qt_app):
    region = make_region()
    driver = ScrollDriver(region)
    driver.start(region, 100)

    driver.tick(42.0)

    assert region.scroll_offset == 0.0


def test_start_while_running_is_ignored(qt_app):
    region = make_region()
    driver = ScrollDriver(region)
    states = []
    driver.state_changed.connect(states.append)

    assert driver.start(region, 50) is True
    session = driver.session
    assert driver.start(region, 100) is False

    assert driver.session is session
    assert driver.rate_percent == 50
    assert states == [True]
    driver.stop()


def test_stop_is_idempotent(qt_app):
    region = make_region()
    driver = ScrollDriver(region)
    states = []
    driver.state_changed.connect(states.append)
    driver.start(region, 100)
    driver.tick(0.0)
    driver.tick(1.0)

    driver.stop()
    offset = region.scroll_offset
    driver.stop()

    assert region.scroll_offset == offset == 40.0
    assert not driver.is_running
    assert states == [True, False]

    driver.tick(2.0)
    assert region.scroll_offset == offset


def test_set_rate_applies_to_running_session(qt_app):
    region = make_region()
    driver = ScrollDriver(region)
    driver.start(region, 10)
    driver.tick(0.0)
    driver.tick(1.0)
    assert region.scroll_offset == 4.0

    driver.set_rate(150)
    driver.tick(2.0)

    assert driver.rate_percent == 100
    assert region.scroll_offset == 44.0
    driver.stop()


def test_set_rate_while_idle_is_used_on_next_start(qt_app):
    region = make_region()
    driver = ScrollDriver(region)
    driver.set_rate(70)

    assert driver.rate_percent == 70
    assert driver.session is None


def test_session_stops_exactly_at_content_end(qt_app):
    region = make_region(content_height=1000.0, viewport_height=500.0)
    driver = ScrollDriver(region, end_margin=20.0)
    ended_at = []
    offsets = []
    driver.scroll_ended.connect(lambda: ended_at.append(region.scroll_offset))
    region.offset_changed.connect(offsets.append)

    driver.start(region, 100)
    run_ticks(driver, 20.0, 60)

    assert ended_at == [480.0]
    assert max(offsets) == 480.0
    assert not driver.is_running
    assert all(value < 480.0 for value in offsets[:-1])


def test_start_at_end_finishes_on_first_tick(qt_app):
    region = make_region(content_height=1000.0, viewport_height=500.0)
    region.set_scroll_offset(490.0)
    driver = ScrollDriver(region)
    ended = []
    driver.scroll_ended.connect(lambda: ended.append(True))

    driver.start(region, 50)
    driver.tick(0.0)
    driver.tick(1.0)

    assert ended == [True]
    assert region.scroll_offset == 490.0


def test_unmeasured_region_ends_on_first_tick(qt_app):
    region = make_region(content_height=0.0, viewport_height=0.0)
    driver = ScrollDriver(region)
    ended = []
    driver.scroll_ended.connect(lambda: ended.append(True))

    assert driver.start(region, 50)
    driver.tick(0.0)

    assert ended == [True]
    assert not driver.is_running


def test_scroll_to_missing_verse_is_a_no_op(qt_app):
    region = make_region(content_height=700.0, viewport_height=200.0, verse_count=7)
    driver = ScrollDriver(region)
    region.set_scroll_offset(50.0)

    assert driver.scroll_to(999) is False
    assert region.scroll_offset == 50.0
    assert not driver.is_jumping


def test_scroll_to_aligns_verse_top_once_without_session(qt_app):
    region = make_region(content_height=700.0, viewport_height=200.0, verse_count=7)
    driver = ScrollDriver(region)
    finished = []
    offsets = []
    driver.jump_finished.connect(finished.append)
    region.offset_changed.connect(offsets.append)

    assert driver.scroll_to(3) is True
    assert driver.is_jumping
    driver.tick(0.0)
    driver.tick(0.2)
    driver.tick(1.0)
    driver.tick(2.0)

    assert region.scroll_offset == 200.0
    assert offsets.count(200.0) == 1
    assert finished == [3]
    assert driver.session is None
    assert not driver.is_running


def test_scroll_to_without_animation(qt_app):
    region = make_region(content_height=700.0, viewport_height=200.0, verse_count=7)
    driver = ScrollDriver(region)

    assert driver.scroll_to(7, smooth=False) is True

    # Verse 7 sits at 600 but the viewport cannot go past 500.
    assert region.scroll_offset == 500.0
    assert not driver.is_jumping


def test_running_session_pauses_during_jump(qt_app):
    region = make_region(content_height=10_000.0, viewport_height=200.0, verse_count=20)
    driver = ScrollDriver(region, jump_duration=0.5)
    driver.start(region, 100)
    driver.tick(0.0)
    driver.scroll_to(5)
    driver.tick(0.1)
    driver.tick(0.6)
    assert region.scroll_offset == 400.0

    driver.tick(1.6)

    assert driver.is_running
    assert region.scroll_offset == 440.0
    driver.stop()


def test_stop_from_active_verse_handler_halts_stepping(qt_app):
    region = make_region(content_height=10_000.0, viewport_height=500.0, verse_count=100)
    driver = ScrollDriver(region)
    tracker = ViewportTracker()
    seen = []

    def on_active(verse_number):
        seen.append(verse_number)
        if verse_number == 2:
            driver.stop()
            tracker.stop()

    tracker.active_verse_changed.connect(on_active)
    tracker.observe(region.blocks, region)
    driver.start(region, 100)

    driver.tick(0.0)
    driver.tick(0.5)
    stopped_at = region.scroll_offset
    for step in range(1, 30):
        driver.tick(0.5 + step * 0.1)

    assert seen == [1, 2]
    assert not driver.is_running
    assert region.scroll_offset == stopped_at
