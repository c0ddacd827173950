# tests/test_state_store.py
from decimal import Decimal

import pytest

from pincorp.business_logic.entities.customer_entity import CustomerEntity
from pincorp.business_logic.entities.material_entity import MaterialEntity


def test_writes_outside_a_transaction_are_refused(store):
    store.register_collection("things")
    with pytest.raises(RuntimeError):
        store.mark_dirty("things", "T1")


def test_failed_transaction_restores_every_collection(store, repos):
    repos["customers"].add(CustomerEntity(name="Giữ lại", phone="1"))
    with pytest.raises(ZeroDivisionError):
        with store.transaction():
            repos["customers"].add(CustomerEntity(name="Bỏ đi", phone="2"))
            repos["materials"].add(MaterialEntity(name="Bỏ đi", purchase_price=Decimal("1")))
            1 / 0
    assert [c.name for c in repos["customers"].get_all()] == ["Giữ lại"]
    assert repos["materials"].count() == 0


def test_rollback_restores_updated_and_deleted_rows(store, repos):
    kept = repos["customers"].add(CustomerEntity(name="A", phone="1"))
    gone = repos["customers"].add(CustomerEntity(name="B", phone="2"))
    with pytest.raises(RuntimeError):
        with store.transaction():
            kept.name = "A đã sửa"
            repos["customers"].update(kept)
            kept.name = "A sửa lần hai"
            repos["customers"].update(kept)
            repos["customers"].delete(gone.id)
            raise RuntimeError("hủy")
    assert repos["customers"].get_by_id(kept.id).name == "A"
    assert repos["customers"].get_by_id(gone.id).name == "B"


def test_inner_failure_only_undoes_inner_block(store, repos):
    with store.transaction():
        repos["customers"].add(CustomerEntity(name="Ngoài", phone="1"))
        try:
            with store.transaction():
                repos["customers"].add(CustomerEntity(name="Trong", phone="2"))
                raise ValueError("boom")
        except ValueError:
            pass
    assert [c.name for c in repos["customers"].get_all()] == ["Ngoài"]


def test_listeners_hear_once_after_commit(store, repos):
    calls = []
    store.subscribe(lambda name, rows, deleted_ids: calls.append((name, len(rows))))
    with store.transaction():
        repos["customers"].add(CustomerEntity(name="A", phone="1"))
        repos["customers"].add(CustomerEntity(name="B", phone="2"))
        assert calls == []
    assert calls == [("customers", 2)]


def test_listeners_only_receive_touched_rows(store, repos):
    for name in ("A", "B", "C"):
        repos["customers"].add(CustomerEntity(name=name, phone=name))
    first, second, third = repos["customers"].get_all(order_by="name")
    calls = []
    store.subscribe(lambda name, rows, deleted_ids: calls.append(([r.name for r in rows], deleted_ids)))
    with store.transaction():
        second.name = "B2"
        repos["customers"].update(second)
        repos["customers"].delete(third.id)
    assert calls == [(["B2"], [third.id])]


def test_listeners_not_called_on_rollback(store, repos):
    calls = []
    store.subscribe(lambda name, rows, deleted_ids: calls.append(name))
    with pytest.raises(KeyError):
        with store.transaction():
            repos["customers"].add(CustomerEntity(name="A", phone="1"))
            raise KeyError("x")
    assert calls == []


def test_failing_listener_does_not_undo_the_commit(store, repos):
    heard = []

    def broken(name, rows, deleted_ids):
        raise OSError("disk full")

    store.subscribe(broken)
    store.subscribe(lambda name, rows, deleted_ids: heard.append(name))
    customer = repos["customers"].add(CustomerEntity(name="A", phone="1"))

    assert repos["customers"].get_by_id(customer.id).name == "A"
    assert heard == ["customers"]
    assert store.has_unsaved_changes


def test_flush_resends_unsaved_rows(store, repos):
    attempts = []

    def recovering(name, rows, deleted_ids):
        attempts.append([r.name for r in rows])
        if len(attempts) == 1:
            raise OSError("disk full")

    store.subscribe(recovering)
    repos["customers"].add(CustomerEntity(name="A", phone="1"))
    assert store.has_unsaved_changes
    assert store.flush() is True
    assert attempts == [["A"], ["A"]]
    assert not store.has_unsaved_changes


def test_loading_does_not_notify(store, repos):
    calls = []
    store.subscribe(lambda name, rows, deleted_ids: calls.append(name))
    repos["customers"].replace_all([CustomerEntity(name="A", phone="1", id="PINCUST-1")])
    assert calls == []
    assert repos["customers"].get_by_id("PINCUST-1").name == "A"


def test_listener_rows_are_copies(store, repos):
    received = []
    store.subscribe(lambda name, rows, deleted_ids: received.extend(rows))
    customer = repos["customers"].add(CustomerEntity(name="A", phone="1"))
    received[0].name = "đã sửa"
    assert repos["customers"].get_by_id(customer.id).name == "A"
