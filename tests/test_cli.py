"""Tests for the frameattest CLI."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from frameattest.attestation import SCHEMA_UID, encode_attestation_data
from frameattest.cli import build_parser, main
from frameattest.hub import ActionMessage, ValidationResult
from frameattest.identity import IdentityProfile
from tests.conftest import BASE_ENV


@pytest.fixture
def env(monkeypatch):
    for name, value in BASE_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("FRAME_ACTION", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)


class TestParser:
    def test_build_parser(self):
        parser = build_parser()
        assert parser.prog == "frameattest"

    def test_no_command_exits(self):
        with pytest.raises(SystemExit):
            main([])

    def test_json_flag_parsed(self):
        args = build_parser().parse_args(["--json", "resolve", "3"])
        assert args.json is True
        assert args.fid == 3

    def test_serve_defaults(self):
        args = build_parser().parse_args(["serve"])
        assert args.host == "0.0.0.0"
        assert args.port == 8000


class TestCheckConfig:
    def test_complete(self, env, capsys):
        result = main(["check-config"])
        assert result["ok"] is True
        assert result["counter_store"] == "memory"
        assert "Configuration complete" in capsys.readouterr().out

    def test_json_output(self, env, capsys):
        main(["--json", "check-config"])
        data = json.loads(capsys.readouterr().out)
        assert data["action"] == "attest"
        assert data["hub_url"] == "https://hub.test:2281"

    def test_missing_exits(self, env, monkeypatch, capsys):
        monkeypatch.delenv("NEYNAR_API_KEY")
        with pytest.raises(SystemExit) as exc:
            main(["check-config"])
        assert exc.value.code == 1
        assert "NEYNAR_API_KEY" in capsys.readouterr().err


class TestResolve:
    def test_resolve(self, env, capsys):
        profile = IdentityProfile(
            fid=3, follower_count=9, verified_addresses=("0xAAA",),
            custody_address="0xBBB", username="dwr",
        )
        with patch("frameattest.identity.IdentityResolver.resolve",
                   new=AsyncMock(return_value=profile)):
            result = main(["resolve", "3"])
        assert result["attest_wallet"] == "0xAAA"
        assert "dwr" in capsys.readouterr().out


class TestValidate:
    def test_valid(self, env, capsys):
        message = ActionMessage(raw=b"\x01", fid=7, cast_hash=b"\xbe\xef", button_index=1)
        with patch("frameattest.hub.MessageValidator.validate",
                   new=AsyncMock(return_value=ValidationResult.ok(message))):
            result = main(["validate", "01"])
        assert result["valid"] is True
        assert result["cast_hash"] == "0xbeef"
        assert "fid 7" in capsys.readouterr().out

    def test_invalid(self, env, capsys):
        with patch("frameattest.hub.MessageValidator.validate",
                   new=AsyncMock(return_value=ValidationResult.rejected("bad signature"))):
            result = main(["validate", "01"])
        assert result == {"valid": False, "reason": "bad signature"}
        assert "bad signature" in capsys.readouterr().out


class TestEncode:
    def test_encode(self, capsys):
        result = main(["encode", "0xdeadbeef", "123"])
        assert result["schema_uid"] == SCHEMA_UID
        assert result["data"] == "0x" + encode_attestation_data(bytes.fromhex("deadbeef"), 123).hex()
        assert capsys.readouterr().out.strip() == result["data"]

    def test_encode_bad_hex_exits(self, capsys):
        with pytest.raises(SystemExit):
            main(["encode", "zz", "1"])
        assert "Error" in capsys.readouterr().err
