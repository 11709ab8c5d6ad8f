"""
HTTP gateway for the attestation engine.

    POST /commit                 {commitmentHash, identifierHash, committer}
    POST /reveal                 {commitmentId, caller, provider, parameters,
                                  context, identifier, owner, epoch,
                                  timestampS, signatures[], nonce}
    GET  /commitments/{id}
    GET  /proofs/{id}
    GET  /owners/{owner}/proofs
    GET  /epochs/current
    GET  /health

    POST /admin/epochs           {witnesses[], threshold}      (bearer token)
    POST /admin/witnesses        {witnesses[]}                 (bearer token)
    POST /admin/threshold        {threshold}                   (bearer token)
    POST /admin/expire           {commitmentIds[]}             (bearer token)

All byte values travel as 0x-prefixed hex. The gateway supplies `now` from
its clock; the engine itself never reads time.
"""

from __future__ import annotations

import hmac
import logging
from typing import Callable, List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from reclaimnet.core.admin import AdminGate
from reclaimnet.core.engine import AttestationEngine
from reclaimnet.core.settings import ReclaimSettings, get_settings
from reclaimnet.protocol.enums import ErrorCode
from reclaimnet.protocol.errors import ReclaimError
from reclaimnet.protocol.models import ClaimData, ClaimInfo, SignedClaim
from reclaimnet.utils.encoding import from_hex, to_hex
from reclaimnet.utils.timestamps import now_ms

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.COMMITMENT_NOT_FOUND: 404,
    ErrorCode.UNAUTHORIZED_REVEALER: 403,
    ErrorCode.ADMIN_UNAUTHORIZED: 403,
    ErrorCode.DUPLICATE_COMMITMENT: 409,
    ErrorCode.NOT_EXPIRED: 409,
    ErrorCode.NO_ACTIVE_EPOCH: 409,
    ErrorCode.INTERNAL_ERROR: 500,
}


# ----------------------------------------------------------------------
# Wire models
# ----------------------------------------------------------------------

class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CommitRequest(_WireModel):
    commitment_hash: str = Field(alias="commitmentHash")
    identifier_hash: str = Field(alias="identifierHash")
    committer: str


class RevealRequest(_WireModel):
    commitment_id: str = Field(alias="commitmentId")
    caller: str
    provider: str
    parameters: str
    context: str
    identifier: str
    owner: str
    epoch: str
    timestamp_s: str = Field(alias="timestampS")
    signatures: List[str]
    nonce: str


class EpochRequest(_WireModel):
    witnesses: List[str]
    threshold: int


class WitnessesRequest(_WireModel):
    witnesses: List[str]


class ThresholdRequest(_WireModel):
    threshold: int


class ExpireRequest(_WireModel):
    commitment_ids: List[str] = Field(alias="commitmentIds")


def _decode_hex(value: str, name: str) -> bytes:
    try:
        return from_hex(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{name} is not valid hex")


def error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


# ----------------------------------------------------------------------
# App factory
# ----------------------------------------------------------------------

def create_app(
    engine: Optional[AttestationEngine] = None,
    settings: Optional[ReclaimSettings] = None,
    clock: Callable[[], int] = now_ms,
) -> FastAPI:
    settings = settings or get_settings()
    engine = engine or AttestationEngine(settings=settings.engine)
    gate, capability = AdminGate.create(engine)
    admin_token = settings.gateway.admin_token

    app = FastAPI(title="reclaimnet attestation gateway")
    app.state.engine = engine

    @app.exception_handler(ReclaimError)
    async def _reclaim_error(request: Request, exc: ReclaimError):
        status = STATUS_BY_CODE.get(exc.code, 422)
        return JSONResponse(status_code=status, content=error_body(exc.code.value, str(exc)))

    @app.exception_handler(ValueError)
    async def _value_error(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content=error_body("bad_request", str(exc)))

    def require_admin(authorization: Optional[str] = Header(default=None)) -> None:
        if not admin_token:
            raise HTTPException(status_code=403, detail="admin endpoints are disabled")
        expected = f"Bearer {admin_token}"
        if authorization is None or not hmac.compare_digest(authorization, expected):
            raise HTTPException(status_code=403, detail="invalid admin token")

    # ------------------------------------------------------------------
    # Commit-reveal
    # ------------------------------------------------------------------

    @app.post("/commit")
    def commit(req: CommitRequest):
        commitment_id = engine.commit(
            _decode_hex(req.commitment_hash, "commitmentHash"),
            _decode_hex(req.identifier_hash, "identifierHash"),
            req.committer,
            clock(),
        )
        return {"commitmentId": commitment_id}

    @app.post("/reveal")
    def reveal(req: RevealRequest):
        claim_info = ClaimInfo(provider=req.provider, parameters=req.parameters, context=req.context)
        signed_claim = SignedClaim(
            claim=ClaimData(
                identifier=req.identifier,
                owner=req.owner,
                epoch=req.epoch,
                timestamp_s=req.timestamp_s,
            ),
            signatures=tuple(_decode_hex(s, "signatures") for s in req.signatures),
        )
        witnesses = engine.reveal(
            req.commitment_id,
            claim_info,
            signed_claim,
            _decode_hex(req.nonce, "nonce"),
            req.caller,
            clock(),
        )
        proof = engine.proof_for_commitment(req.commitment_id)
        return {
            "witnesses": [to_hex(w) for w in witnesses],
            "proofId": proof.id if proof else None,
        }

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @app.get("/commitments/{commitment_id}")
    def commitment(commitment_id: str):
        pending = engine.ledger.get(commitment_id)
        return {
            "commitmentId": commitment_id,
            "status": engine.commitment_status(commitment_id).value,
            "commitment": pending.to_dict() if pending else None,
        }

    @app.get("/proofs/{proof_id}")
    def proof(proof_id: str):
        found = engine.get_proof(proof_id)
        if found is None:
            raise HTTPException(status_code=404, detail=f"proof {proof_id} not found")
        return found.to_dict()

    @app.get("/owners/{owner}/proofs")
    def owner_proofs(owner: str):
        return [p.to_dict() for p in engine.proofs_for_owner(owner)]

    @app.get("/epochs/current")
    def current_epoch():
        return engine.epochs.current_epoch().to_dict()

    @app.get("/health")
    def health():
        return {"status": "ok", "pendingCommitments": len(engine.ledger)}

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    @app.post("/admin/epochs", dependencies=[Depends(require_admin)])
    def add_epoch(req: EpochRequest):
        witnesses = [_decode_hex(w, "witnesses") for w in req.witnesses]
        return gate.add_new_epoch(capability, witnesses, req.threshold, clock()).to_dict()

    @app.post("/admin/witnesses", dependencies=[Depends(require_admin)])
    def update_witnesses(req: WitnessesRequest):
        witnesses = [_decode_hex(w, "witnesses") for w in req.witnesses]
        return gate.update_witnesses(capability, witnesses, clock()).to_dict()

    @app.post("/admin/threshold", dependencies=[Depends(require_admin)])
    def update_threshold(req: ThresholdRequest):
        return gate.update_witnesses_num_threshold(capability, req.threshold, clock()).to_dict()

    @app.post("/admin/expire", dependencies=[Depends(require_admin)])
    def expire(req: ExpireRequest):
        return {"expired": gate.expire_commitments(capability, req.commitment_ids, clock())}

    return app


def run(settings: Optional[ReclaimSettings] = None) -> None:
    import uvicorn

    settings = settings or get_settings()
    app = create_app(settings=settings)
    logger.info("Starting reclaimnet gateway on %s:%d", settings.gateway.host, settings.gateway.port)
    uvicorn.run(
        app,
        host=settings.gateway.host,
        port=settings.gateway.port,
        log_level=settings.runtime.log_level.lower(),
    )
