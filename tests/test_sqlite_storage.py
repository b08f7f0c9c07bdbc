from __future__ import annotations

import pytest

from adapters.locale_strings import JsonLocaleStrings
from adapters.sqlite_storage import SQLiteStorage
from core.models import MMS, Message, ReactionRecord
from core.parser import ReactionParser
from core.patterns import build_catalog
from core.reconciler import BulkReconciler
from fakes import make_message


@pytest.fixture
def storage(tmp_path) -> SQLiteStorage:
    storage = SQLiteStorage(str(tmp_path / "tapback.db"))
    storage.init_db()
    return storage


def test_messages_round_trip_with_parts(storage: SQLiteStorage) -> None:
    message = make_message(7, "Caption", kind=MMS)
    storage.add_message(message)

    loaded = storage.get_message(7)

    assert loaded == message
    assert loaded.get_text() == "Caption"
    assert storage.get_message(8) is None


def test_thread_ordering(storage: SQLiteStorage) -> None:
    for message in (make_message(1, "a", minutes=1), make_message(2, "b", minutes=3), make_message(3, "c", thread_id=2)):
        storage.add_message(message)

    assert [m.id for m in storage.messages_in_thread(1)] == [2, 1]
    assert [m.id for m in storage.messages_in_thread(1, newest_first=False)] == [1, 2]


def test_messages_with_text_skips_empty_sms_and_mms(storage: SQLiteStorage) -> None:
    storage.add_message(make_message(1, "hello", minutes=5))
    storage.add_message(make_message(2, "", minutes=1))
    storage.add_message(make_message(3, "", kind=MMS, minutes=2))
    storage.add_message(make_message(4, "mms text", kind=MMS, minutes=0))

    assert [m.id for m in storage.messages_with_text()] == [4, 1]


def test_reaction_ids_are_never_reused(storage: SQLiteStorage) -> None:
    first = storage.new_reaction_id()
    storage.delete_all_reactions()

    assert storage.new_reaction_id() == first + 1


def test_transaction_rolls_back_on_error(storage: SQLiteStorage) -> None:
    message = make_message(1, "Hi")
    storage.add_message(message)

    with pytest.raises(RuntimeError):
        with storage.transaction():
            storage.insert_reaction(ReactionRecord(1, 1, "+1", "👍", "Hi", 1))
            storage.set_emoji_reaction(message, True)
            raise RuntimeError("boom")

    assert storage.list_reactions() == []
    assert storage.get_message(1).is_emoji_reaction is False


def test_reconcile_against_sqlite(storage: SQLiteStorage) -> None:
    messages = [
        make_message(1, "Dinner at 8?", address="+15550002222"),
        make_message(2, 'Liked "Dinner at 8?"'),
        make_message(3, "Loved “Dinner at 8?”"),
        make_message(4, "Removed a heart from “Dinner at 8?”"),
    ]
    for message in messages:
        storage.add_message(message)
    parser = ReactionParser(build_catalog(["en"], JsonLocaleStrings()))

    with storage.transaction():
        BulkReconciler(parser, storage).reconcile_all()

    rows = storage.list_reactions()
    assert [(row["emoji"], row["target_message_id"]) for row in rows] == [("👍", 1)]
    target: Message = storage.get_message(1)
    assert [record.emoji for record in storage.reactions_for(target)] == ["👍"]
    assert [storage.get_message(i).is_emoji_reaction for i in (1, 2, 3, 4)] == [False, True, True, True]
