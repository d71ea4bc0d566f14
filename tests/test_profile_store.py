import pytest

from errors import ErrorKind, IdentityError
from models import (
    Database,
    IdentityArtifacts,
    Profile,
    ProfileStore,
    StaticIdentitySource,
    VaultIdentitySource,
)
from conftest import KNOWN_ADDRESS, KNOWN_KEY

ARTIFACTS = IdentityArtifacts(
    eth_addresses=["0x2a65aca4d5fc5b5c859090a6c34d164135398226"],
    mesh_keys=["QmUKydZyhZmt2x5VpLJSojRarhRrC4k9QYpkYNf23sWy98"],
    ident_keys=["QmczUvgj46cvf4wWv8y3Z7RFiKyTUGSx3cSdL4Tqo5aevT"],
)


class TestSetProfile:

    async def test_create_profile(self, profile_store):
        await profile_store.set_profile("pseudoName", "I am a florian", "base64...")
        profile = await profile_store.get_profile()
        assert profile.to_dict() == {
            "pseudo": "pseudoName",
            "description": "I am a florian",
            "image": "base64...",
            "id": 1,
        }

    async def test_update_profile_with_mapping(self, profile_store):
        await profile_store.set_profile("pseudoName", "I am a florian", "base64...")
        updated = await profile_store.set_profile({
            "pseudo": "pseudoNameUpdated",
            "description": "I am a florian",
            "image": "base64...",
        })
        assert updated == Profile(1, "pseudoNameUpdated", "I am a florian", "base64...")
        assert await profile_store.get_profile() == updated

    async def test_repeated_set_keeps_single_row(self, profile_store, database):
        await profile_store.set_profile("a", "b", "c")
        await profile_store.set_profile("a", "b", "c")
        rows = await database.select("Profile")
        assert rows == [{"id": 1, "pseudo": "a", "description": "b", "image": "c"}]

    async def test_missing_fields(self, profile_store):
        with pytest.raises(TypeError):
            await profile_store.set_profile("only pseudo")
        with pytest.raises(KeyError):
            await profile_store.set_profile({"pseudo": "x"})


class TestGetProfile:

    async def test_empty_store(self, profile_store):
        with pytest.raises(IdentityError) as exc:
            await profile_store.get_profile()
        assert exc.value.kind is ErrorKind.NO_PROFILE_PRESENT

    async def test_persisted_across_stores(self, tmp_path):
        path = tmp_path / "meshid.db"
        db = Database(path)
        await ProfileStore(db).set_profile("pedsa", "i am a programmer", "base64....")
        db.close()

        db = Database(path)
        try:
            profile = await ProfileStore(db).get_profile()
        finally:
            db.close()
        assert profile == Profile(1, "pedsa", "i am a programmer", "base64....")


class TestGetPublicProfile:

    async def test_empty_store(self, database):
        store = ProfileStore(database, identity_source=StaticIdentitySource(ARTIFACTS))
        with pytest.raises(IdentityError) as exc:
            await store.get_public_profile()
        assert exc.value.kind is ErrorKind.NO_PROFILE_PRESENT

    async def test_profile_without_identity_source(self, profile_store):
        await profile_store.set_profile("peasded", "I am a description", "base64....")
        with pytest.raises(IdentityError) as exc:
            await profile_store.get_public_profile()
        assert exc.value.kind is ErrorKind.NO_PUBLIC_PROFILE_PRESENT

    @pytest.mark.parametrize("artifacts", [None, IdentityArtifacts()])
    async def test_profile_without_artifacts(self, database, artifacts):
        store = ProfileStore(database, identity_source=StaticIdentitySource(artifacts))
        await store.set_profile("peasded", "I am a description", "base64....")
        with pytest.raises(IdentityError) as exc:
            await store.get_public_profile()
        assert exc.value.kind is ErrorKind.NO_PUBLIC_PROFILE_PRESENT

    async def test_public_profile(self, database):
        store = ProfileStore(database, identity_source=StaticIdentitySource(ARTIFACTS))
        await store.set_profile("peasded", "I am a description", "base64....")
        public = await store.get_public_profile()
        assert public.to_dict() == {
            "pseudo": "peasded",
            "description": "I am a description",
            "image": "base64....",
            "ethAddresses": ["0x2a65aca4d5fc5b5c859090a6c34d164135398226"],
            "meshKeys": ["QmUKydZyhZmt2x5VpLJSojRarhRrC4k9QYpkYNf23sWy98"],
            "identKey": ["QmczUvgj46cvf4wWv8y3Z7RFiKyTUGSx3cSdL4Tqo5aevT"],
            "version": "1.0.0",
        }

    async def test_public_profile_from_vault(self, database, memory_vault):
        source = VaultIdentitySource(memory_vault, mesh_keys=["QmMesh"])
        store = ProfileStore(database, identity_source=source)
        await store.set_profile("peasded", "I am a description", "base64....")
        await memory_vault.save(KNOWN_KEY)

        public = await store.get_public_profile()
        assert public.eth_addresses == [KNOWN_ADDRESS]
        assert public.mesh_keys == ["QmMesh"]
        assert public.ident_keys == []

    async def test_identity_source_errors_propagate(self, database):
        error = RuntimeError("mesh offline")

        class BrokenSource:
            async def artifacts(self):
                raise error

        store = ProfileStore(database, identity_source=BrokenSource())
        await store.set_profile("a", "b", "c")
        with pytest.raises(RuntimeError) as exc:
            await store.get_public_profile()
        assert exc.value is error


class TestHasProfile:

    async def test_false_on_empty_store(self, profile_store):
        assert await profile_store.has_profile() is False

    async def test_true_after_set(self, profile_store):
        await profile_store.set_profile("a", "b", "c")
        assert await profile_store.has_profile() is True

    async def test_injected_count(self, database):
        async def one_row():
            return 1

        assert await ProfileStore(database, count_query=one_row).has_profile() is True

    async def test_query_error_propagates(self, database):
        class QueryError(Exception):
            pass

        async def failing():
            raise QueryError()

        with pytest.raises(QueryError):
            await ProfileStore(database, count_query=failing).has_profile()
