import pytest

from models import Database, ProfileStore
from wallet import InMemorySecureStorage, KdfParams, KeyVault, SymmetricCipher

# Known test vector (eth-account documentation)
KNOWN_KEY = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
KNOWN_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"

# Cheapest Argon2id parameters, keeps the suite fast
FAST_KDF = KdfParams(time_cost=1, memory_cost=8, parallelism=1)


class RecordingStorage:
    """Secure storage double recording every write."""

    def __init__(self, result="ack"):
        self.calls = []
        self.data = {}
        self.result = result

    async def set(self, key, value):
        self.calls.append((key, value))
        self.data[key] = value
        return self.result

    async def get(self, key):
        return self.data.get(key)

    async def keys(self):
        return list(self.data)


@pytest.fixture
def app_home(tmp_path, monkeypatch):
    monkeypatch.setenv("MESHID_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def cipher():
    return SymmetricCipher(FAST_KDF)


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def vault(storage, cipher):
    return KeyVault(storage, cipher=cipher)


@pytest.fixture
def memory_vault(cipher):
    return KeyVault(InMemorySecureStorage(), cipher=cipher)


@pytest.fixture
def database():
    db = Database()
    yield db
    db.close()


@pytest.fixture
def profile_store(database):
    return ProfileStore(database)
