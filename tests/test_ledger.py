"""
Tests for the record store and the commitment ledger.
"""

import pytest

from reclaimnet.core.ledger import CommitmentLedger
from reclaimnet.core.store import COMMITMENTS, IDENTIFIER_INDEX, InMemoryStore
from reclaimnet.protocol.errors import (
    CommitmentNotFound,
    DuplicateCommitment,
    NotExpired,
    UnauthorizedRevealer,
)

T0 = 1_000_000
ALICE = "0xalice"
BOB = "0xbob"


def h(n: int) -> bytes:
    return bytes([n]) * 32


@pytest.fixture
def ledger(store):
    return CommitmentLedger(store)


class TestInMemoryStore:
    def test_crud(self):
        store = InMemoryStore()
        store.put("t", "k", 1)
        assert store.exists("t", "k")
        assert store.get("t", "k") == 1
        assert store.keys("t") == ["k"]
        store.delete("t", "k")
        assert not store.exists("t", "k")
        assert store.get("t", "k") is None

    def test_transaction_rolls_back_on_error(self):
        store = InMemoryStore()
        store.put("t", "kept", 1)
        with pytest.raises(RuntimeError):
            with store.transaction():
                store.put("t", "new", 2)
                store.delete("t", "kept")
                raise RuntimeError("abort")
        assert store.get("t", "kept") == 1
        assert not store.exists("t", "new")

    def test_transaction_commits(self):
        store = InMemoryStore()
        with store.transaction():
            store.put("t", "k", 1)
        assert store.get("t", "k") == 1

    def test_rollback_restores_only_touched_keys(self):
        store = InMemoryStore()
        store.put("t", "a", 1)
        store.put("t", "b", 2)
        with pytest.raises(RuntimeError):
            with store.transaction():
                store.put("t", "a", 10)
                store.put("t", "a", 11)
                store.delete("t", "b")
                store.put("u", "c", 3)
                raise RuntimeError("abort")
        assert store.get("t", "a") == 1
        assert store.get("t", "b") == 2
        assert not store.exists("u", "c")

    def test_nested_transaction_rolls_back_with_outer(self):
        store = InMemoryStore()
        store.put("t", "k", 1)
        with pytest.raises(RuntimeError):
            with store.transaction():
                with store.transaction():
                    store.put("t", "k", 2)
                    store.put("t", "inner", 3)
                store.put("t", "outer", 4)
                raise RuntimeError("abort")
        assert store.get("t", "k") == 1
        assert store.keys("t") == ["k"]

    def test_failed_inner_transaction_keeps_outer_writes(self):
        store = InMemoryStore()
        with store.transaction():
            store.put("t", "outer", 1)
            with pytest.raises(RuntimeError):
                with store.transaction():
                    store.put("t", "outer", 2)
                    raise RuntimeError("abort")
        assert store.get("t", "outer") == 1

    def test_new_ids_are_unique(self):
        store = InMemoryStore()
        assert len({store.new_id() for _ in range(100)}) == 100


class TestCommit:
    def test_commit_indexes_both_maps(self, ledger, store):
        commitment_id = ledger.commit(h(1), h(2), ALICE, T0)

        commitment = ledger.get(commitment_id)
        assert commitment.commitment_hash == h(1)
        assert commitment.identifier_hash == h(2)
        assert commitment.committer == ALICE
        assert commitment.commit_timestamp_ms == T0
        assert store.get(IDENTIFIER_INDEX, h(2)) == commitment_id
        assert len(ledger) == 1

    def test_duplicate_identifier_rejected(self, ledger):
        ledger.commit(h(1), h(2), ALICE, T0)
        with pytest.raises(DuplicateCommitment):
            ledger.commit(h(3), h(2), BOB, T0 + 1)
        assert len(ledger) == 1

    def test_distinct_identifiers_coexist(self, ledger):
        ledger.commit(h(1), h(2), ALICE, T0)
        ledger.commit(h(1), h(3), ALICE, T0)
        assert len(ledger) == 2

    def test_hash_lengths_validated(self, ledger):
        with pytest.raises(ValueError):
            ledger.commit(b"short", h(2), ALICE, T0)
        with pytest.raises(ValueError):
            ledger.commit(h(1), b"short", ALICE, T0)

    def test_find_by_identifier(self, ledger):
        commitment_id = ledger.commit(h(1), h(2), ALICE, T0)
        assert ledger.find_by_identifier(h(2)).id == commitment_id
        assert ledger.find_by_identifier(h(9)) is None


class TestTakeForReveal:
    def test_take_removes_commitment(self, ledger, store):
        commitment_id = ledger.commit(h(1), h(2), ALICE, T0)

        taken = ledger.take_for_reveal(commitment_id, ALICE, T0 + 5)

        assert taken.id == commitment_id
        assert ledger.get(commitment_id) is None
        assert not store.exists(IDENTIFIER_INDEX, h(2))
        assert not store.exists(COMMITMENTS, commitment_id)

    def test_take_frees_identifier(self, ledger):
        commitment_id = ledger.commit(h(1), h(2), ALICE, T0)
        ledger.take_for_reveal(commitment_id, ALICE, T0)
        ledger.commit(h(1), h(2), ALICE, T0 + 1)

    def test_unknown_id(self, ledger):
        with pytest.raises(CommitmentNotFound):
            ledger.take_for_reveal("missing", ALICE, T0)

    def test_second_take_fails(self, ledger):
        commitment_id = ledger.commit(h(1), h(2), ALICE, T0)
        ledger.take_for_reveal(commitment_id, ALICE, T0)
        with pytest.raises(CommitmentNotFound):
            ledger.take_for_reveal(commitment_id, ALICE, T0)

    def test_other_caller_rejected_and_commitment_kept(self, ledger):
        commitment_id = ledger.commit(h(1), h(2), ALICE, T0)
        with pytest.raises(UnauthorizedRevealer):
            ledger.take_for_reveal(commitment_id, BOB, T0)
        assert ledger.get(commitment_id) is not None


class TestExpireMany:
    def test_expires_old_commitments(self, ledger):
        a = ledger.commit(h(1), h(2), ALICE, T0)
        b = ledger.commit(h(1), h(3), ALICE, T0)

        assert ledger.expire_many([a, b], T0 + 101, max_age=100) == [a, b]
        assert len(ledger) == 0
        assert ledger.was_expired(a) and ledger.was_expired(b)
        ledger.commit(h(1), h(2), ALICE, T0 + 200)

    def test_age_equal_to_limit_is_not_expired(self, ledger):
        a = ledger.commit(h(1), h(2), ALICE, T0)
        with pytest.raises(NotExpired):
            ledger.expire_many([a], T0 + 100, max_age=100)
        assert ledger.get(a) is not None

    def test_each_id_applies_independently(self, ledger):
        old = ledger.commit(h(1), h(2), ALICE, T0)
        young = ledger.commit(h(1), h(3), ALICE, T0 + 90)

        with pytest.raises(NotExpired):
            ledger.expire_many([old, young], T0 + 150, max_age=100)

        assert ledger.get(old) is None
        assert ledger.get(young) is not None

    def test_unknown_id(self, ledger):
        with pytest.raises(CommitmentNotFound):
            ledger.expire_many(["missing"], T0, max_age=0)

    def test_expired_ids_prefilter(self, ledger):
        old = ledger.commit(h(1), h(2), ALICE, T0)
        ledger.commit(h(1), h(3), ALICE, T0 + 90)
        assert ledger.expired_ids(T0 + 150, max_age=100) == [old]
        assert len(ledger.pending_ids()) == 2
