"""
Tests for the reclaimnet command line tool.
"""

import json

import pytest

from reclaimnet.cli.main import build_parser, main
from reclaimnet.core.settings import get_settings
from reclaimnet.crypto.hashing import commitment_hash, identifier_hash, witness_seed
from reclaimnet.crypto.signing import WitnessSigner, claim_message, recover
from reclaimnet.utils.encoding import from_hex, to_hex
from reclaimnet.witness.selection import select


def run(capsys, *argv):
    main(list(argv))
    return json.loads(capsys.readouterr().out)


@pytest.fixture
def claim_file(tmp_path, claim_info, claim_data, sign_claim):
    signed = sign_claim(claim_data)
    path = tmp_path / "claim.json"
    path.write_text(json.dumps({
        "claimInfo": claim_info.to_dict(),
        "signedClaim": signed.to_dict(),
    }))
    return path, signed


class TestParser:
    def test_select_arguments(self):
        args = build_parser().parse_args(
            ["select-witnesses", "--identifier", "0xab", "--threshold", "2", "0x01", "0x02"]
        )
        assert args.threshold == 2
        assert args.addresses == ["0x01", "0x02"]

    def test_sign_claim_needs_a_key(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["sign-claim", "--claim", "c.json"])

    def test_serve_overrides_leave_cached_settings_alone(self, monkeypatch):
        started = []
        monkeypatch.setattr("reclaimnet.gateway.app.run", started.append)
        cached = get_settings()
        before = (cached.gateway.host, cached.gateway.port)

        main(["serve", "--host", "0.0.0.0", "--port", "9123"])

        assert started[0].gateway.host == "0.0.0.0"
        assert started[0].gateway.port == 9123
        assert started[0].engine == cached.engine
        assert (get_settings().gateway.host, get_settings().gateway.port) == before

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1


class TestCommands:
    def test_keygen(self, capsys):
        out = run(capsys, "keygen")
        signer = WitnessSigner.from_private_bytes(from_hex(out["privateKey"]))
        assert signer.address_hex == out["address"]
        assert out["pemFile"] is None

    def test_keygen_to_pem(self, capsys, tmp_path):
        pem = tmp_path / "witness.pem"
        out = run(capsys, "keygen", "--pem", str(pem))

        assert out["privateKey"] is None
        assert WitnessSigner.from_pem_file(str(pem)).address_hex == out["address"]

    def test_commitment_hash(self, capsys, claim_file, claim_info):
        path, signed = claim_file
        nonce = b"\x05" * 32

        out = run(capsys, "commitment-hash", "--claim", str(path), "--nonce", to_hex(nonce))

        assert out["commitmentHash"] == to_hex(commitment_hash(claim_info, signed, nonce))
        assert out["identifierHash"] == to_hex(identifier_hash(signed.claim.identifier))

    def test_select_witnesses(self, capsys, witnesses, claim_data):
        pool = [w.address for w in witnesses]

        out = run(
            capsys,
            "select-witnesses",
            "--identifier", claim_data.identifier,
            "--threshold", "3",
            *[to_hex(a) for a in pool],
        )

        expected = select(pool, witness_seed(claim_data.identifier), 3)
        assert out["witnesses"] == [to_hex(a) for a in expected]

    def test_sign_claim_with_key(self, capsys, claim_file):
        path, signed = claim_file
        signer = WitnessSigner.generate()

        out = run(capsys, "sign-claim", "--key", to_hex(signer.private_key_bytes), "--claim", str(path))

        assert out["witness"] == signer.address_hex
        assert recover(from_hex(out["signature"]), claim_message(signed.claim)) == signer.address

    def test_sign_claim_with_pem(self, capsys, claim_file, tmp_path):
        path, signed = claim_file
        signer = WitnessSigner.generate()
        pem = tmp_path / "key.pem"
        pem.write_bytes(signer.export_private_pem())

        out = run(capsys, "sign-claim", "--pem", str(pem), "--claim", str(path))

        assert recover(from_hex(out["signature"]), claim_message(signed.claim)) == signer.address

    def test_missing_claim_file(self, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["commitment-hash", "--claim", str(tmp_path / "nope.json"), "--nonce", "0x00"])
        assert exc.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_pool_too_small(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["select-witnesses", "--identifier", "0xab", "--threshold", "2", "0x" + "01" * 20])
        assert exc.value.code == 1
        assert "cannot select" in capsys.readouterr().err
