import pytest

from ledger_explorer.account.exceptions import StaleResultDiscarded
from ledger_explorer.reactive import DependencyGraph
from ledger_explorer.sequencing import RequestSequencer


def test_only_latest_sequence_is_current():
    sequencer = RequestSequencer("account")
    first = sequencer.issue()
    second = sequencer.issue()

    assert second > first
    assert sequencer.is_current(second)
    assert not sequencer.is_current(first)
    sequencer.ensure_current(second)
    with pytest.raises(StaleResultDiscarded) as exc_info:
        sequencer.ensure_current(first)
    assert exc_info.value.latest == second


def test_reactions_run_only_for_changed_dependencies():
    graph = DependencyGraph()
    runs = []
    graph.declare("balances", ("snapshot", "params"), lambda: runs.append("balances"))
    graph.declare("rate", ("currency",), lambda: runs.append("rate"))

    graph.set("snapshot", 1)
    graph.set("snapshot", 1)
    graph.set("currency", "usd")
    graph.update({"snapshot": 2, "params": 3})

    assert runs == ["balances", "rate", "balances"]


def test_seed_stores_without_reacting_and_touch_forces_reaction():
    graph = DependencyGraph()
    runs = []
    graph.declare("fetch", ("address",), lambda: runs.append(graph.get("address")))

    graph.seed("address", "rAlice")
    assert runs == []

    graph.touch("address")
    assert runs == ["rAlice"]
