import pytest

from fakes import make_snapshot
from ledger_explorer.account.balances import reconcile
from ledger_explorer.account.models import AccountSnapshot, BalanceBuckets
from ledger_explorer.network import NetworkParameters

PARAMS = NetworkParameters(reserve_base=10_000_000, reserve_increment=2_000_000)


def test_reserve_below_total_leaves_remainder_available():
    snapshot = make_snapshot(balance=20_000_000, owner_count=3)

    buckets = reconcile(snapshot, PARAMS)

    assert buckets == BalanceBuckets(total=20_000_000, reserved=16_000_000, available=4_000_000)


def test_reserve_above_total_is_clamped_to_total():
    snapshot = make_snapshot(balance=5_000_000, owner_count=10)

    buckets = reconcile(snapshot, PARAMS)

    assert buckets == BalanceBuckets(total=5_000_000, reserved=5_000_000, available=0)


@pytest.mark.parametrize(
    "total, owner_count, base, increment",
    [
        (0, 0, 0, 0),
        (0, 5, 10, 2),
        (1, 0, 1, 0),
        (999, 4, 100, 225),
        (1_000, 4, 100, 225),
        (50_000_000, 0, 10_000_000, 2_000_000),
        (12_000_000, 1, 10_000_000, 2_000_000),
    ],
)
def test_buckets_always_partition_total(total, owner_count, base, increment):
    snapshot = make_snapshot(balance=total, owner_count=owner_count)
    params = NetworkParameters(reserve_base=base, reserve_increment=increment)

    buckets = reconcile(snapshot, params)
    raw_reserved = base + owner_count * increment

    assert 0 <= buckets.available <= buckets.total
    assert buckets.reserved <= buckets.total
    if raw_reserved <= total:
        assert buckets.reserved == raw_reserved
        assert buckets.available + buckets.reserved == total
    else:
        assert buckets.reserved == total
        assert buckets.available == 0


def test_reconcile_is_repeatable():
    snapshot = make_snapshot(balance=33_000_000, owner_count=7)

    assert reconcile(snapshot, PARAMS) == reconcile(snapshot, PARAMS)


def test_string_balances_from_the_api_are_parsed():
    snapshot = make_snapshot(balance="21000000", owner_count=0)

    assert reconcile(snapshot, PARAMS).available == 11_000_000


def test_snapshot_without_ledger_state_has_no_buckets():
    snapshot = AccountSnapshot(address="rUnfunded")

    assert reconcile(snapshot, PARAMS) is None
