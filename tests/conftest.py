"""
Shared fixtures: witness keys, an engine with one configured epoch, and
helpers that build correctly signed claims.
"""

import pytest

from reclaimnet.core.engine import AttestationEngine
from reclaimnet.core.settings import EngineSettings
from reclaimnet.core.store import InMemoryStore
from reclaimnet.crypto.hashing import commitment_hash, identifier_hash, witness_seed
from reclaimnet.crypto.signing import WitnessSigner
from reclaimnet.protocol.models import ClaimData, ClaimInfo, SignedClaim
from reclaimnet.witness.selection import select

T0 = 1_700_000_000_000
COMMITTER = "0x" + "11" * 20


@pytest.fixture
def witnesses():
    """Five witness keys, in epoch pool order."""
    return [WitnessSigner.generate() for _ in range(5)]


@pytest.fixture
def settings():
    return EngineSettings(
        min_reveal_delay_ms=0,
        max_reveal_window_ms=60_000,
        separate_reveal_window=False,
        commitment_max_age_ms=120_000,
        epoch_duration_ms=86_400_000,
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def engine(store, settings, witnesses):
    """Engine whose current epoch holds all five witnesses with threshold 2."""
    engine = AttestationEngine(store, settings)
    engine.epochs.add_new_epoch([w.address for w in witnesses], threshold=2, now=T0)
    return engine


@pytest.fixture
def claim_info():
    return ClaimInfo(
        provider="http",
        parameters='{"url":"https://example.com/api/balance","method":"GET"}',
        context='{"extractedParameters":{"balance":"42"}}',
    )


@pytest.fixture
def claim_data():
    return ClaimData(
        identifier="0x" + "ab" * 32,
        owner="0x" + "cd" * 20,
        epoch="1",
        timestamp_s="1700000000",
    )


@pytest.fixture
def sign_claim(witnesses):
    """Sign a claim with exactly the witnesses selected for it."""

    def _sign(claim, threshold=2, pool=None):
        pool = pool if pool is not None else witnesses
        by_address = {w.address: w for w in pool}
        selected = select([w.address for w in pool], witness_seed(claim.identifier), threshold)
        return SignedClaim(
            claim=claim,
            signatures=tuple(by_address[a].sign_claim(claim) for a in selected),
        )

    return _sign


@pytest.fixture
def commit_claim():
    """Commit to (claim_info, signed_claim, nonce) and return the commitment id."""

    def _commit(engine, claim_info, signed_claim, nonce, committer=COMMITTER, now=T0):
        return engine.commit(
            commitment_hash(claim_info, signed_claim, nonce),
            identifier_hash(signed_claim.claim.identifier),
            committer,
            now,
        )

    return _commit
