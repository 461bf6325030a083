from fakes import make_snapshot
from ledger_explorer.account.actions import actions_visible, available_actions
from ledger_explorer.config_models import DEFAULT_REWARD_ISSUER, NetworkConfig
from ledger_explorer.signing.models import AccountIdentity, SignIntent

SIGNED_OUT = AccountIdentity()
ALICE = AccountIdentity(address="rAlice", username="alice", wallet="xaman")


def _keys(actions):
    return [action.key for action in actions]


def test_signed_out_visitor_sees_disabled_owner_actions():
    actions = available_actions(make_snapshot("rAlice"), SIGNED_OUT, NetworkConfig())

    assert _keys(actions) == ["sign-in", "set-avatar", "set-domain", "set-did"]
    sign_in = actions[0]
    assert sign_in.enabled
    assert sign_in.request.effective_intent is SignIntent.ADOPT
    assert not any(action.enabled for action in actions[1:])


def test_owner_sees_enabled_actions():
    actions = available_actions(make_snapshot("rAlice"), ALICE, NetworkConfig())

    assert _keys(actions) == ["set-avatar", "set-domain", "set-did"]
    assert all(action.enabled for action in actions)
    assert all(action.request.effective_intent is SignIntent.ONE_OFF for action in actions)


def test_unactivated_owner_can_only_set_avatar():
    actions = available_actions(make_snapshot("rAlice", activated=False), ALICE, NetworkConfig())

    enabled = {action.key: action.enabled for action in actions}
    assert enabled == {"set-avatar": True, "set-domain": False, "set-did": False}


def test_existing_domain_and_did_hide_their_actions():
    snapshot = make_snapshot(
        "rAlice",
        ledgerInfo={
            "balance": 20_000_000,
            "ownerCount": 1,
            "domain": "alice.test",
            "did": {"uri": "did:example"},
        },
    )

    assert _keys(available_actions(snapshot, ALICE, NetworkConfig())) == ["set-avatar"]


def test_xahau_offers_reward_claims_instead_of_did():
    network = NetworkConfig(name="xahau")

    opt_in = available_actions(make_snapshot("rAlice"), ALICE, network)
    assert _keys(opt_in) == ["rewards-opt-in", "set-avatar", "set-domain"]
    assert opt_in[0].request.transaction["Issuer"] == DEFAULT_REWARD_ISSUER

    enrolled = make_snapshot(
        "rAlice", ledgerInfo={"balance": 20_000_000, "ownerCount": 0, "rewardLgrFirst": 5}
    )
    opt_out = available_actions(enrolled, ALICE, network)
    assert opt_out[0].key == "rewards-opt-out"
    assert opt_out[0].request.transaction["Flags"] == 1


def test_devnet_has_no_avatar_action():
    actions = available_actions(make_snapshot("rAlice"), ALICE, NetworkConfig(name="devnet"))

    assert "set-avatar" not in _keys(actions)


def test_actions_hidden_for_blackholed_service_or_foreign_accounts():
    assert not actions_visible(make_snapshot("rAlice", blackholed=True), ALICE)
    assert not actions_visible(make_snapshot("rBob"), ALICE)
    assert not actions_visible(make_snapshot("rExchange", service={"name": "Exchange"}), SIGNED_OUT)
    assert available_actions(make_snapshot("rBob"), ALICE, NetworkConfig()) == []
