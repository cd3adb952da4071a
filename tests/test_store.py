"""Tests for the item store."""
from pathlib import Path

import pytest

from youload.models import ItemStatus, ProbeResult, Visibility
from youload.store import ItemStore


def _paths(count):
    return [Path(f"video_{i}.mp4") for i in range(count)]


def _advance(store, item_id, status):
    """Move a pending item forward to `status`."""
    store.update(item_id, status=ItemStatus.UPLOADING)
    if status != ItemStatus.UPLOADING:
        store.update(item_id, status=status)


class TestAdd:
    def test_creates_pending_items_with_default_title(self, video_files):
        store = ItemStore()
        items = store.add(video_files)

        assert [item.title for item in items] == ["A", "B", "C"]
        assert all(item.status == ItemStatus.PENDING for item in items)
        assert items[0].size_bytes == 64
        assert len({item.id for item in items}) == 3

    def test_missing_file_has_zero_size(self):
        store = ItemStore()
        item = store.add([Path("does-not-exist.mp4")])[0]
        assert item.size_bytes == 0

    @pytest.mark.parametrize("existing,offered", [(0, 3), (0, 15), (4, 6), (4, 10), (9, 5), (7, 1)])
    def test_truncates_to_capacity(self, existing, offered):
        store = ItemStore()
        store.add(_paths(existing))

        created = store.add(_paths(offered))

        assert len(created) == min(offered, 10 - existing)
        assert len(store) == min(existing + offered, 10)

    def test_takes_head_of_input(self):
        store = ItemStore(capacity=2)
        created = store.add(_paths(5))
        assert [item.filename for item in created] == ["video_0.mp4", "video_1.mp4"]

    def test_full_store_drops_everything(self):
        store = ItemStore()
        store.add(_paths(10))
        assert store.is_full is True
        assert store.add(_paths(3)) == []
        assert len(store) == 10

    def test_insertion_order_preserved(self):
        store = ItemStore()
        first = store.add(_paths(2))
        second = store.add([Path("later.mp4")])
        assert [item.id for item in store.all()] == [i.id for i in first + second]


class TestUpdate:
    def test_merges_fields(self, store):
        item = store.add(_paths(1))[0]
        updated = store.update(item.id, description="hello", progress_percent=10.0)
        assert updated.description == "hello"
        assert store.get(item.id).progress_percent == 10.0
        assert store.get(item.id).title == item.title

    def test_unknown_id_is_noop(self, store):
        store.add(_paths(1))
        assert store.update("missing", title="x") is None

    def test_unknown_field_raises(self, store):
        item = store.add(_paths(1))[0]
        with pytest.raises(TypeError):
            store.update(item.id, colour="red")

    @pytest.mark.parametrize(
        "start,target",
        [
            (ItemStatus.PENDING, ItemStatus.UPLOADING),
            (ItemStatus.UPLOADING, ItemStatus.COMPLETED),
            (ItemStatus.UPLOADING, ItemStatus.ERROR),
        ],
    )
    def test_forward_transitions(self, store, start, target):
        item = store.add(_paths(1))[0]
        if start != ItemStatus.PENDING:
            _advance(store, item.id, start)
        assert store.update(item.id, status=target).status == target

    @pytest.mark.parametrize(
        "start,target",
        [
            (ItemStatus.PENDING, ItemStatus.COMPLETED),
            (ItemStatus.PENDING, ItemStatus.ERROR),
            (ItemStatus.UPLOADING, ItemStatus.PENDING),
            (ItemStatus.COMPLETED, ItemStatus.PENDING),
            (ItemStatus.COMPLETED, ItemStatus.UPLOADING),
            (ItemStatus.COMPLETED, ItemStatus.ERROR),
            (ItemStatus.ERROR, ItemStatus.PENDING),
            (ItemStatus.ERROR, ItemStatus.COMPLETED),
        ],
    )
    def test_backward_or_skipping_transitions_rejected(self, store, start, target):
        item = store.add(_paths(1))[0]
        if start != ItemStatus.PENDING:
            _advance(store, item.id, start)

        with pytest.raises(ValueError):
            store.update(item.id, status=target)

        assert store.get(item.id).status == start

    def test_uploading_progress_never_decreases(self, store):
        item = store.add(_paths(1))[0]
        store.update(item.id, status=ItemStatus.UPLOADING, progress_percent=0.0)
        store.update(item.id, progress_percent=60.0)

        updated = store.update(item.id, progress_percent=20.0, error=None)

        assert updated.progress_percent == 60.0
        assert store.get(item.id).progress_percent == 60.0


class TestEdit:
    def test_edit_metadata(self, store):
        item = store.add(_paths(1))[0]
        assert store.edit(item.id, title="New", tags_raw="a,b", visibility="unlisted") is True
        edited = store.get(item.id)
        assert edited.title == "New"
        assert edited.tags == ["a", "b"]
        assert edited.visibility == Visibility.UNLISTED

    def test_invalid_visibility(self, store):
        item = store.add(_paths(1))[0]
        with pytest.raises(ValueError):
            store.edit(item.id, visibility="friends-only")

    def test_non_metadata_field_rejected(self, store):
        item = store.add(_paths(1))[0]
        with pytest.raises(ValueError):
            store.edit(item.id, status=ItemStatus.COMPLETED)

    def test_not_pending_is_rejected(self, store):
        item = store.add(_paths(1))[0]
        store.update(item.id, status=ItemStatus.UPLOADING)
        assert store.edit(item.id, title="late") is False
        assert store.get(item.id).title == item.title

    def test_short_form_override_off(self, store):
        item = store.add(_paths(1))[0]
        store.apply_probe(item.id, ProbeResult(duration_seconds=30, width=1080, height=1920))
        assert store.get(item.id).is_short_form is True

        store.edit(item.id, is_short_form=False)

        edited = store.get(item.id)
        assert edited.is_short_form is False
        assert edited.short_form_overridden is True

    def test_short_form_override_on_requires_eligibility(self, store):
        item = store.add(_paths(1))[0]
        store.apply_probe(item.id, ProbeResult(duration_seconds=300, width=1920, height=1080))
        with pytest.raises(ValueError):
            store.edit(item.id, is_short_form=True)


class TestApplyProbe:
    def test_writes_classification(self, store):
        item = store.add(_paths(1))[0]
        store.apply_probe(item.id, ProbeResult(duration_seconds=60, width=720, height=1280))
        probed = store.get(item.id)
        assert probed.duration_seconds == 60
        assert probed.is_vertical is True
        assert probed.is_short_form is True

    def test_late_probe_keeps_user_override(self, store):
        item = store.add(_paths(1))[0]
        store.apply_probe(item.id, ProbeResult(duration_seconds=20, width=720, height=1280))
        store.edit(item.id, is_short_form=False)

        store.apply_probe(item.id, ProbeResult(duration_seconds=20, width=720, height=1280))

        probed = store.get(item.id)
        assert probed.is_short_form is False
        assert probed.duration_seconds == 20

    def test_probe_for_removed_item(self, store):
        item = store.add(_paths(1))[0]
        store.remove(item.id)
        assert store.apply_probe(item.id, ProbeResult(10, 1, 2)) is None


class TestRemove:
    def test_remove_pending_keeps_other_ids(self, store):
        items = store.add(_paths(3))
        assert store.remove(items[1].id) is True
        assert [item.id for item in store.all()] == [items[0].id, items[2].id]

    @pytest.mark.parametrize("status", [ItemStatus.UPLOADING, ItemStatus.COMPLETED, ItemStatus.ERROR])
    def test_remove_started_item_rejected(self, store, status):
        item = store.add(_paths(1))[0]
        _advance(store, item.id, status)
        assert store.remove(item.id) is False
        assert item.id in store

    def test_remove_unknown(self, store):
        assert store.remove("nope") is False

    def test_removal_frees_capacity(self, store):
        items = store.add(_paths(10))
        store.remove(items[0].id)
        assert len(store.add(_paths(3))) == 1


class TestLocked:
    def test_locked_store_rejects_membership_changes(self, store):
        item = store.add(_paths(1))[0]
        with store.locked():
            assert store.add(_paths(2)) == []
            assert store.remove(item.id) is False
            with pytest.raises(RuntimeError):
                store.clear()
        assert store.is_locked is False
        assert store.remove(item.id) is True

    def test_cannot_lock_twice(self, store):
        with store.locked():
            with pytest.raises(RuntimeError):
                with store.locked():
                    pass


class TestProgress:
    def test_progress_counts(self, store):
        items = store.add(_paths(4))
        _advance(store, items[0].id, ItemStatus.COMPLETED)
        store.update(items[0].id, is_short_form=True)
        _advance(store, items[1].id, ItemStatus.ERROR)
        _advance(store, items[2].id, ItemStatus.UPLOADING)

        progress = store.progress()

        assert progress.total_items == 4
        assert progress.completed_items == 2
        assert progress.uploading_items == 1
        assert progress.short_form_count == 1
        assert progress.regular_count == 3
        assert progress.overall_percent == 50

    def test_missing_titles(self, store):
        items = store.add(_paths(2))
        store.edit(items[1].id, title="   ")
        assert store.missing_titles() == [store.get(items[1].id)]
