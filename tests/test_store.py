import json

import pytest

from smcbox.store import Experiment, ServerShare, ShareStore, StoreError


@pytest.fixture
def store():
    db = ShareStore()
    yield db
    db.close()


def test_insert_server_share_counts(store):
    shares = json.dumps([[1, 2, 3], [4, 5, 6], [7, 8, 9]]).encode()

    store.insert_server_share("exp1", "s1", shares)
    assert len(store.get_shares_per_experiment("exp1")) == 1

    with pytest.raises(StoreError):
        store.insert_server_share("exp1", "s1", shares)

    store.insert_server_share("exp1", "s2", shares)
    assert len(store.get_shares_per_experiment("exp1")) == 2

    store.insert_server_share("exp2", "s2", shares)
    assert len(store.get_shares_per_experiment("exp2")) == 1


def test_shares_round_trip_and_count(store):
    payload = b'{"Index":[0,1],"Values":[[5,6]]}'
    store.insert_server_share("exp1", "s1", payload)
    store.insert_server_share("exp1", "s2", b"other")
    assert store.get_shares_per_server("exp1", "s1") == [ServerShare("exp1", "s1", payload)]
    assert store.get_shares_per_server("exp1", "s3") == []
    assert store.count_shares_per_experiment("exp1") == 2
    assert store.count_shares_per_experiment("missing") == 0


def test_experiment_lifecycle(store):
    store.insert_experiment("exp1", "due-a", "due-b")
    store.insert_experiment("exp2", "due-c", "due-d")
    assert store.get_experiment("exp1") == Experiment("exp1", "due-a", "due-b", False)
    assert [e.exp_id for e in store.get_all_experiments()] == ["exp1", "exp2"]

    store.update_completed_experiment("exp1")
    assert store.get_experiment("exp1").completed is True
    assert [e.exp_id for e in store.get_all_experiments()] == ["exp2"]

    store.delete_experiment("exp2")
    assert store.get_experiment("exp2") is None
    assert store.get_all_experiments() == []


def test_duplicate_experiment_rejected(store):
    store.insert_experiment("exp1", "a", "b")
    with pytest.raises(StoreError):
        store.insert_experiment("exp1", "c", "d")


def test_missing_experiment_is_none(store):
    assert store.get_experiment("nope") is None


def test_persists_across_connections(tmp_path):
    path = tmp_path / "smc.db"
    with ShareStore(path) as first:
        first.insert_experiment("exp1", "a", "b")
        first.insert_server_share("exp1", "s1", b"data")
    with ShareStore(path) as second:
        assert second.get_experiment("exp1") == Experiment("exp1", "a", "b", False)
        assert second.get_shares_per_experiment("exp1") == [ServerShare("exp1", "s1", b"data")]


def test_closed_store_raises():
    db = ShareStore()
    db.close()
    with pytest.raises(StoreError):
        db.get_all_experiments()