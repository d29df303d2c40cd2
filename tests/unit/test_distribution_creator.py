"""
Module 04 - Distribution Creation Tests
Tests for orchestrator/distribution.py
"""
import concurrent.futures
import logging

import pytest

from core.config.runtime import BuildConfig, RuntimeConfig
from core.crypto.hashing import int_to_root
from core.merkle.merkle_tree import MerkleTree, build_merkle_tree
from core.schemas.distribution import Recipient
from core.schemas.errors import (
    AmountOverflowException,
    BuildCancelledException,
    EmptyDistributionException,
    VerificationMismatchException,
    ZeroRootException,
)
from orchestrator.claims import ClaimCoordinator
from orchestrator.distribution import (
    CreationResult,
    DistributionCreator,
    RecordNotPersistedError,
    verify_all_proofs,
)
from orchestrator.storage import DistributionStore, MemoryStore, StorageError

from fixtures.common import make_recipients


def _config(**build_overrides) -> RuntimeConfig:
    return RuntimeConfig(build=BuildConfig(**build_overrides))


class TestCreate:
    """Tests for the full creation flow."""

    def test_publishes_root_and_persists(self, memory_store, settlement):
        recipients = make_recipients(5)
        creator = DistributionCreator(memory_store, settlement, config=_config())

        result = creator.create(recipients, expiry=1_800_000_000)

        assert isinstance(result, CreationResult)
        assert result.distribution_id == "1"
        assert result.recipient_count == 5
        assert result.total_amount == sum(r.amount for r in recipients)
        assert result.depth == 3

        call = settlement.created[0]
        assert int_to_root(call["root"]).hex() == result.root
        assert call["total_amount"] == result.total_amount
        assert call["expiry"] == 1_800_000_000

        assert memory_store.load("1").root == result.root

    def test_created_distribution_is_claimable(self, memory_store, settlement):
        recipients = make_recipients(7)
        result = DistributionCreator(memory_store, settlement, config=_config()).create(recipients)

        coordinator = ClaimCoordinator(memory_store, settlement)
        for recipient in recipients:
            coordinator.claim(result.distribution_id, recipient.address)

        for call, recipient in zip(settlement.claims, recipients):
            assert settlement.accepts(
                result.distribution_id, recipient.address, call["amount"], call["proof_bytes"]
            )

    def test_to_dict_amount_is_string(self, memory_store, settlement):
        result = DistributionCreator(memory_store, settlement, config=_config()).create(
            make_recipients(2)
        )
        assert result.to_dict()["total_amount"] == "300"

    def test_stale_record_under_issued_id_replaced(self, memory_store, settlement):
        stale = make_recipients(3, base_amount=7)
        memory_store.save("1", build_merkle_tree(stale), stale)

        recipients = make_recipients(5)
        result = DistributionCreator(memory_store, settlement, config=_config()).create(recipients)
        assert result.distribution_id == "1"

        record, _ = memory_store.load_tree("1")
        assert record.root == result.root
        assert record.root_bytes == int_to_root(settlement.created[0]["root"])

        ticket = ClaimCoordinator(memory_store).prepare_claim("1", recipients[4].address)
        assert settlement.accepts("1", recipients[4].address, ticket.amount, ticket.packed_proof)

    def test_save_failure_keeps_record_document(self, settlement, caplog):
        class _FullDisk(MemoryStore):
            def set(self, key, value):
                raise StorageError("disk full")

        recipients = make_recipients(4)
        creator = DistributionCreator(DistributionStore(_FullDisk()), settlement, config=_config())

        with caplog.at_level(logging.ERROR, logger="orchestrator.distribution"):
            with pytest.raises(RecordNotPersistedError) as exc_info:
                creator.create(recipients)

        published = int_to_root(settlement.created[0]["root"]).hex()
        assert exc_info.value.distribution_id == "1"
        assert exc_info.value.document["root"] == published
        assert any(published in r.getMessage() for r in caplog.records)

        # The attached document is enough to restore the record elsewhere
        recovered = DistributionStore(MemoryStore())
        recovered.store_tree_data("1", exc_info.value.document)
        assert recovered.load("1").recipients == recipients

    def test_requires_settlement_client(self, memory_store):
        creator = DistributionCreator(memory_store, config=_config())
        with pytest.raises(RuntimeError):
            creator.create(make_recipients(2))


class TestBuildFailuresAbortEarly:
    """Build-time errors never reach the settlement client."""

    def test_empty_list(self, memory_store, settlement):
        creator = DistributionCreator(memory_store, settlement, config=_config())
        with pytest.raises(EmptyDistributionException):
            creator.create([])
        assert settlement.created == []

    def test_amount_overflow(self, memory_store, settlement):
        huge = Recipient(address="0x01", amount=2**256)
        creator = DistributionCreator(memory_store, settlement, config=_config())
        with pytest.raises(AmountOverflowException):
            creator.create([huge])
        assert settlement.created == []
        assert not memory_store.exists("1")

    def test_self_check_failure(self, memory_store, settlement, monkeypatch):
        monkeypatch.setattr("orchestrator.distribution.verify_merkle_proof", lambda *a: False)
        creator = DistributionCreator(memory_store, settlement, config=_config())
        with pytest.raises(VerificationMismatchException):
            creator.create(make_recipients(3))
        assert settlement.created == []

    def test_self_check_can_be_disabled(self, memory_store, settlement, monkeypatch):
        monkeypatch.setattr("orchestrator.distribution.verify_merkle_proof", lambda *a: False)
        creator = DistributionCreator(memory_store, settlement, config=_config(verify_on_build=False))
        assert creator.create(make_recipients(3)).distribution_id == "1"

    def test_zero_root_rejected(self, memory_store, settlement, monkeypatch):
        zero = bytes(32)
        fake_tree = MerkleTree(root=zero, levels=[[b"\x01" * 32], [zero]])
        monkeypatch.setattr("orchestrator.distribution.build_merkle_tree", lambda r: fake_tree)

        creator = DistributionCreator(memory_store, settlement, config=_config(verify_on_build=False))
        with pytest.raises(ZeroRootException):
            creator.create(make_recipients(1))
        assert settlement.created == []


class TestBackgroundBuild:
    """Large lists build on a worker thread."""

    def test_threshold_uses_background_task(self, memory_store, settlement):
        recipients = make_recipients(40)
        creator = DistributionCreator(
            memory_store, settlement, config=_config(background_threshold=10, build_timeout_s=30)
        )
        tree = creator.build(recipients)
        assert tree.root == build_merkle_tree(recipients).root

    def test_timeout_cancels_build(self, memory_store, settlement, monkeypatch):
        started = []

        class _StalledTask:
            def __init__(self, recipients):
                self.cancelled = False
                started.append(self)

            def start(self):
                return self

            def result(self, timeout=None):
                raise concurrent.futures.TimeoutError()

            def cancel(self):
                self.cancelled = True

        monkeypatch.setattr("orchestrator.distribution.TreeBuildTask", _StalledTask)
        creator = DistributionCreator(
            memory_store, settlement, config=_config(background_threshold=1, build_timeout_s=0.5)
        )

        with pytest.raises(BuildCancelledException) as exc_info:
            creator.create(make_recipients(3))

        assert exc_info.value.code == "BUILD_CANCELLED"
        assert exc_info.value.details["timeout_s"] == 0.5
        assert started[0].cancelled
        assert settlement.created == []


class TestVerifyAllProofs:
    """Tests for the self-check helper."""

    def test_passes_for_valid_tree(self):
        verify_all_proofs(build_merkle_tree(make_recipients(9)))
