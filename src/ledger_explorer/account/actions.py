"""Sign requests the account page can offer for the viewed account."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ledger_explorer.account.models import AccountSnapshot
from ledger_explorer.config_models import NetworkConfig
from ledger_explorer.signing.models import AccountIdentity, SignIntent, SignRequest


@dataclass(frozen=True)
class AccountAction:
    key: str
    label: str
    request: SignRequest
    enabled: bool = True


def actions_visible(snapshot: AccountSnapshot, identity: AccountIdentity) -> bool:
    """Actions are offered for your own account, or for any non-service account while signed out."""
    info = snapshot.ledger_info
    if info is not None and info.blackholed:
        return False
    if snapshot.address == identity.address:
        return True
    return not identity.signed_in and not snapshot.service


def available_actions(
    snapshot: AccountSnapshot, identity: AccountIdentity, network: NetworkConfig
) -> List[AccountAction]:
    if not actions_visible(snapshot, identity):
        return []

    info = snapshot.ledger_info
    activated = info.activated if info is not None else False
    own_account = snapshot.address == identity.address
    address = snapshot.address
    actions: List[AccountAction] = []

    if not identity.signed_in:
        actions.append(
            AccountAction(
                key="sign-in",
                label="Sign in",
                request=SignRequest(redirect="account", intent=SignIntent.ADOPT),
            )
        )

    if network.is_xahau:
        if info is not None and info.reward_lgr_first:
            actions.append(
                AccountAction(
                    key="rewards-opt-out",
                    label="Rewards Opt-out",
                    request=SignRequest(
                        transaction={"TransactionType": "ClaimReward", "Account": address, "Flags": 1}
                    ),
                    enabled=own_account and activated,
                )
            )
        else:
            actions.append(
                AccountAction(
                    key="rewards-opt-in",
                    label="Rewards Opt-in",
                    request=SignRequest(
                        transaction={
                            "TransactionType": "ClaimReward",
                            "Issuer": network.reward_issuer,
                            "Account": address,
                        }
                    ),
                    enabled=own_account and activated,
                )
            )

    if not network.is_devnet:
        actions.append(
            AccountAction(
                key="set-avatar",
                label="Set an Avatar",
                request=SignRequest(
                    action="setAvatar",
                    transaction={"TransactionType": "AccountSet", "Account": address},
                    data={"signOnly": True, "action": "set-avatar"},
                ),
                enabled=own_account,
            )
        )

    if info is None or not info.domain:
        actions.append(
            AccountAction(
                key="set-domain",
                label="Set domain",
                request=SignRequest(
                    action="setDomain",
                    transaction={"TransactionType": "AccountSet", "Account": address},
                ),
                enabled=own_account and activated,
            )
        )

    if not network.is_xahau and (info is None or not info.did):
        actions.append(
            AccountAction(
                key="set-did",
                label="Set DID",
                request=SignRequest(
                    action="setDid",
                    transaction={"TransactionType": "DIDSet", "Account": address},
                ),
                enabled=own_account and activated,
            )
        )

    return actions


__all__ = ["AccountAction", "actions_visible", "available_actions"]
