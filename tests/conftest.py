"""Global pytest configuration and fixtures."""

import pytest
import sys
import tempfile
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from parkrun_helper._storage import MemoryDocumentStore
from parkrun_helper.api.app import create_app
from parkrun_helper.api.dependencies import get_token_verifier
from parkrun_helper.auth import TokenVerifier
from parkrun_helper.config import AppConfig, AuthConfig, BackupConfig, CosmosConfig
from tests.utils import CLIENT_ID, ISSUER, KEY_ID, TENANT_ID, StaticKeyResolver, make_claims, sign_token


@pytest.fixture(scope="session")
def rsa_private_key():
    """RSA key pair used to sign test tokens."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_private_key():
    """A second key pair the verifier does not trust."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def key_resolver(rsa_private_key):
    return StaticKeyResolver({KEY_ID: rsa_private_key.public_key()})


@pytest.fixture
def token_verifier(key_resolver):
    return TokenVerifier(key_resolver, issuer=ISSUER, audience=CLIENT_ID)


@pytest.fixture
def memory_store():
    """Empty in-memory document store."""
    return MemoryDocumentStore()


@pytest.fixture
def temp_backup_dir():
    """Create temporary backup directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def app_config(temp_backup_dir):
    """Local config: memory store, temp backup dir, scheduler off."""
    return AppConfig(
        cosmos=CosmosConfig(backend="memory"),
        auth=AuthConfig(tenant_id=TENANT_ID, client_id=CLIENT_ID),
        backup=BackupConfig(directory=str(temp_backup_dir), automated_backups_enabled=False),
    )


@pytest.fixture
def client(app_config, token_verifier):
    """TestClient running the app lifespan, with a verifier that trusts the test key."""
    app = create_app(app_config)
    app.dependency_overrides[get_token_verifier] = lambda: token_verifier
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(rsa_private_key):
    return {"Authorization": f"Bearer {sign_token(rsa_private_key, make_claims())}"}
