from modules.invite_tracker.snapshot import InviteSnapshotStore


GUILD = 100


async def test_initialize_builds_code_to_uses_map(source):
    source.set(GUILD, [("ABC123", 5, "1"), ("XYZ999", 0, "2")])
    store = InviteSnapshotStore(source)

    snapshot = await store.initialize(GUILD)

    assert snapshot == {"ABC123": 5, "XYZ999": 0}
    assert store.get(GUILD) == {"ABC123": 5, "XYZ999": 0}
    assert GUILD in store


async def test_initialize_failure_leaves_guild_absent(source):
    store = InviteSnapshotStore(source)

    assert await store.initialize(GUILD) is None
    assert GUILD not in store
    assert store.get(GUILD) is None


async def test_record_created_adds_entry(source):
    source.set(GUILD, [("ABC123", 5, "1")])
    store = InviteSnapshotStore(source)
    await store.initialize(GUILD)

    store.record_created(GUILD, "XYZ999", 0)

    assert store.get(GUILD) == {"ABC123": 5, "XYZ999": 0}


def test_record_created_for_unseeded_guild_is_dropped(source):
    store = InviteSnapshotStore(source)

    store.record_created(GUILD, "XYZ999", 0)

    assert GUILD not in store


def test_replace_is_idempotent(source):
    store = InviteSnapshotStore(source)
    snapshot = {"ABC123": 6, "XYZ999": 0}

    store.replace(GUILD, snapshot)
    store.replace(GUILD, snapshot)

    assert store.get(GUILD) == snapshot


def test_replace_stores_a_copy(source):
    store = InviteSnapshotStore(source)
    snapshot = {"ABC123": 6}

    store.replace(GUILD, snapshot)
    snapshot["ABC123"] = 99
    store.get(GUILD)["ABC123"] = 42

    assert store.get(GUILD) == {"ABC123": 6}


def test_discard_forget_and_clear(source):
    store = InviteSnapshotStore(source)
    store.replace(GUILD, {"ABC123": 1, "XYZ999": 2})
    store.replace(GUILD + 1, {"QQQ": 0})

    store.discard(GUILD, "ABC123")
    assert store.get(GUILD) == {"XYZ999": 2}

    store.forget(GUILD)
    assert GUILD not in store

    store.clear()
    assert len(store) == 0
