"""
reclaimnet command line tool.

Commands:
    reclaimnet serve                                   Run the HTTP gateway
    reclaimnet keygen [--pem FILE]                     Generate a witness key
    reclaimnet commitment-hash --claim FILE --nonce HEX
                                                       Hashes to submit at commit time
    reclaimnet select-witnesses --identifier ID --threshold K ADDR...
                                                       Witnesses required for a claim
    reclaimnet sign-claim --key HEX --claim FILE       Witness signature for a claim

Claim files are JSON:

    {"claimInfo": {...}, "signedClaim": {"claim": {...}, "signatures": [...]}}
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from reclaimnet.core.settings import get_settings
from reclaimnet.crypto.hashing import commitment_hash, identifier_hash, witness_seed
from reclaimnet.crypto.signing import WitnessSigner
from reclaimnet.protocol.errors import ReclaimError
from reclaimnet.protocol.models import ClaimInfo, SignedClaim
from reclaimnet.utils.encoding import from_hex, to_hex
from reclaimnet.witness.selection import select


def _load_claim_file(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def cmd_serve(args) -> None:
    from reclaimnet.gateway.app import run

    settings = get_settings()
    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if overrides:
        gateway = settings.gateway.model_copy(update=overrides)
        settings = settings.model_copy(update={"gateway": gateway})
    run(settings)


def cmd_keygen(args) -> None:
    signer = WitnessSigner.generate()
    if args.pem:
        with open(args.pem, "wb") as f:
            f.write(signer.export_private_pem())
    _print_json({
        "address": signer.address_hex,
        "privateKey": None if args.pem else to_hex(signer.private_key_bytes),
        "pemFile": args.pem,
    })


def cmd_commitment_hash(args) -> None:
    data = _load_claim_file(args.claim)
    claim_info = ClaimInfo.from_dict(data["claimInfo"])
    signed_claim = SignedClaim.from_dict(data["signedClaim"])
    nonce = from_hex(args.nonce)
    _print_json({
        "commitmentHash": to_hex(commitment_hash(claim_info, signed_claim, nonce)),
        "identifierHash": to_hex(identifier_hash(signed_claim.claim.identifier)),
    })


def cmd_select_witnesses(args) -> None:
    pool = [from_hex(a) for a in args.addresses]
    selected = select(pool, witness_seed(args.identifier), args.threshold)
    _print_json({"witnesses": [to_hex(a) for a in selected]})


def cmd_sign_claim(args) -> None:
    if args.key:
        signer = WitnessSigner.from_private_bytes(from_hex(args.key))
    else:
        signer = WitnessSigner.from_pem_file(args.pem)
    data = _load_claim_file(args.claim)
    signed_claim = SignedClaim.from_dict(data["signedClaim"])
    _print_json({
        "witness": signer.address_hex,
        "signature": to_hex(signer.sign_claim(signed_claim.claim)),
    })


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reclaimnet",
        description="Commit-reveal witness attestation tool",
    )
    sub = parser.add_subparsers(dest="command")

    p_serve = sub.add_parser("serve", help="Run the HTTP gateway")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.set_defaults(func=cmd_serve)

    p_keygen = sub.add_parser("keygen", help="Generate a witness key")
    p_keygen.add_argument("--pem", default=None, help="Write the key to this PEM file")
    p_keygen.set_defaults(func=cmd_keygen)

    p_hash = sub.add_parser("commitment-hash", help="Compute commit-time hashes for a claim")
    p_hash.add_argument("--claim", required=True, help="Claim JSON file")
    p_hash.add_argument("--nonce", required=True, help="Nonce as hex")
    p_hash.set_defaults(func=cmd_commitment_hash)

    p_select = sub.add_parser("select-witnesses", help="Witnesses required for a claim")
    p_select.add_argument("--identifier", required=True, help="Claim identifier (0x...)")
    p_select.add_argument("--threshold", type=int, required=True)
    p_select.add_argument("addresses", nargs="+", help="Witness pool addresses, in epoch order")
    p_select.set_defaults(func=cmd_select_witnesses)

    p_sign = sub.add_parser("sign-claim", help="Sign a claim as a witness")
    key_group = p_sign.add_mutually_exclusive_group(required=True)
    key_group.add_argument("--key", help="Private key as hex")
    key_group.add_argument("--pem", help="Private key PEM file")
    p_sign.add_argument("--claim", required=True, help="Claim JSON file")
    p_sign.set_defaults(func=cmd_sign_claim)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=get_settings().runtime.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except (ReclaimError, ValueError, KeyError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
