from __future__ import annotations

import logging

from core.events import EventCollector
from core.models import MMS
from core.resolver import find_target
from fakes import FakeStore, make_message


def test_trailing_whitespace_is_ignored() -> None:
    store = FakeStore([make_message(1, "Hello ")])

    target = find_target(1, "Hello", store)

    assert target is not None
    assert target.id == 1


def test_comparison_is_case_sensitive() -> None:
    store = FakeStore([make_message(1, "hello")])

    assert find_target(1, "Hello", store) is None


def test_newest_matching_message_wins() -> None:
    store = FakeStore([make_message(1, "ok", minutes=1), make_message(2, "ok", minutes=5)])

    assert find_target(1, "ok", store).id == 2


def test_other_threads_are_not_searched() -> None:
    store = FakeStore([make_message(1, "Hi", thread_id=2)])

    assert find_target(1, "Hi", store) is None


def test_mms_text_parts_are_matched() -> None:
    store = FakeStore([make_message(1, "Photo caption", kind=MMS)])

    assert find_target(1, " Photo caption ", store).id == 1


def test_missing_target_is_reported_as_warning() -> None:
    store = FakeStore([make_message(1, "Hi")])
    collector = EventCollector()

    assert find_target(1, "Bye", store, collector) is None

    assert collector.names() == ["target_missing"]
    assert collector.events[0].level == logging.WARNING
