"""Global test configuration: runs before any test module imports."""
import os

import httpx
import pytest

# Must be set BEFORE any frameattest imports; slowapi reads this at init
os.environ["RATELIMIT_ENABLED"] = "False"

SIGNING_KEY = "0x" + "4c" * 32

BASE_ENV = {
    "HUB_URL": "hub.test:2281",
    "NEYNAR_API_KEY": "neynar-test-key",
    "ALCHEMY_KEY": "alchemy-test-key",
    "PRIVATE_KEY": SIGNING_KEY,
    "SYNDICATE_API_KEY": "syndicate-test-key",
}


def pytest_configure(config):
    """Disable rate limiter after all imports."""
    try:
        from frameattest.security import limiter
        limiter.enabled = False
    except ImportError:
        pass


def hub_ok(fid: int = 123, cast_hash: str = "0xdeadbeef") -> dict:
    """Body of a hub validateMessage answer for a valid frame action."""
    return {
        "valid": True,
        "message": {
            "data": {
                "type": "MESSAGE_TYPE_FRAME_ACTION",
                "fid": fid,
                "timestamp": 97_000_000,
                "network": "FARCASTER_NETWORK_MAINNET",
                "frameActionBody": {
                    "url": "https://frame.example/",
                    "buttonIndex": 1,
                    "castId": {"fid": 226, "hash": cast_hash},
                },
            },
            "hash": "0x7a1fd1bd1ec0e0d4bf2ba59bbd4c5cbd52b1a4b8",
            "hashScheme": "HASH_SCHEME_BLAKE3",
            "signatureScheme": "SIGNATURE_SCHEME_ED25519",
        },
    }


def hub_error(details: str = "signature does not match signer") -> dict:
    return {
        "errCode": "bad_request.validation_failure",
        "presentable": False,
        "name": "HubError",
        "code": 3,
        "details": details,
    }


def neynar_user(fid: int = 123, verifications=("0xAAA",), custody: str = "0xBBB",
                followers: int = 42) -> dict:
    return {
        "result": {
            "user": {
                "fid": fid,
                "username": "alice",
                "custodyAddress": custody,
                "followerCount": followers,
                "verifications": list(verifications),
            }
        }
    }


@pytest.fixture
def base_env():
    return dict(BASE_ENV)


@pytest.fixture
def mock_http():
    """Build an AsyncClient whose requests are answered by ``handler``."""
    clients = []

    def make(handler):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    return make
