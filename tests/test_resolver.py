from modules.invite_tracker.models import InviteInfo
from modules.invite_tracker.resolver import AttributionResolver, by_code, platform_order
from modules.invite_tracker.snapshot import InviteSnapshotStore
from modules.invite_tracker.source import InviteFetchError


GUILD = 100


def invites(*rows):
    return [InviteInfo(code=c, uses=u, inviter_id=i) for c, u, i in rows]


def test_single_increase_is_resolved_and_snapshot_replaced(source):
    store = InviteSnapshotStore(source)
    resolver = AttributionResolver(store)
    current = invites(("ABC123", 6, "A"), ("XYZ999", 0, "B"))

    used = resolver.resolve(GUILD, {"ABC123": 5, "XYZ999": 0}, current)

    assert used.code == "ABC123"
    assert used.inviter_id == "A"
    assert store.get(GUILD) == {"ABC123": 6, "XYZ999": 0}


def test_no_increase_returns_none_but_still_replaces(source):
    store = InviteSnapshotStore(source)
    resolver = AttributionResolver(store)

    used = resolver.resolve(GUILD, {"ABC123": 5}, invites(("ABC123", 5, "A"), ("NEW", 0, "B")))

    assert used is None
    assert store.get(GUILD) == {"ABC123": 5, "NEW": 0}


def test_unknown_code_counts_from_zero(source):
    resolver = AttributionResolver(InviteSnapshotStore(source))

    used = resolver.resolve(GUILD, {}, invites(("FRESH", 1, "A")))

    assert used.code == "FRESH"


def test_two_increases_pick_first_in_platform_order(source):
    resolver = AttributionResolver(InviteSnapshotStore(source), platform_order)
    previous = {"ABC123": 5, "XYZ999": 0}

    first = resolver.resolve(GUILD, previous, invites(("XYZ999", 1, "B"), ("ABC123", 6, "A")))
    again = resolver.resolve(GUILD, previous, invites(("XYZ999", 1, "B"), ("ABC123", 6, "A")))

    assert first.code == again.code == "XYZ999"


def test_code_ordering_ignores_fetch_order(source):
    resolver = AttributionResolver(InviteSnapshotStore(source), by_code)
    previous = {"ABC123": 5, "XYZ999": 0}

    a = resolver.resolve(GUILD, previous, invites(("XYZ999", 1, "B"), ("ABC123", 6, "A")))
    b = resolver.resolve(GUILD, previous, invites(("ABC123", 6, "A"), ("XYZ999", 1, "B")))

    assert a.code == b.code == "ABC123"


async def test_detect_fetch_failure_keeps_stale_snapshot(source):
    store = InviteSnapshotStore(source)
    store.replace(GUILD, {"ABC123": 5})
    source.set(GUILD, InviteFetchError(GUILD, "503 Service Unavailable"))
    resolver = AttributionResolver(store)

    assert await resolver.detect(GUILD) is None
    assert store.get(GUILD) == {"ABC123": 5}


async def test_detect_without_snapshot_seeds_baseline(source):
    store = InviteSnapshotStore(source)
    source.set(GUILD, [("ABC123", 6, "A")])
    resolver = AttributionResolver(store)

    assert await resolver.detect(GUILD) is None
    assert store.get(GUILD) == {"ABC123": 6}


async def test_detect_resolves_against_stored_snapshot(source):
    store = InviteSnapshotStore(source)
    store.replace(GUILD, {"ABC123": 5})
    source.set(GUILD, [("ABC123", 6, "A")])
    resolver = AttributionResolver(store)

    used = await resolver.detect(GUILD)

    assert used.code == "ABC123"
    assert store.get(GUILD) == {"ABC123": 6}
