"""User-visible messages for orchestration failures, keyed like the page's translation catalog."""

from __future__ import annotations

from typing import Dict

from ledger_explorer.account.exceptions import AccountFetchError, DomainFailure, FetchFailure

GENERIC_ERROR = "Error"

MESSAGES: Dict[str, str] = {
    "error-api.not-found": "Account not found.",
    "error-api.invalid-address": "The address is not valid.",
    "error-api.rate-limited": "Too many requests. Please wait a moment and try again.",
    "error-api.blacklisted": "This address is blacklisted.",
    "error.timeout": "The request timed out. Please try again.",
    "error.network": "Network error. Check your connection and try again.",
    "error.service-unavailable": "The service is temporarily unavailable. Please try again later.",
}


def transport_key(reason: str) -> str:
    lowered = reason.lower()
    if "timed out" in lowered:
        return "error.timeout"
    if "service error" in lowered or "unavailable" in lowered:
        return "error.service-unavailable"
    return "error.network"


def message_key(error: AccountFetchError) -> str:
    if isinstance(error, DomainFailure):
        return f"error-api.{error.code}"
    if isinstance(error, FetchFailure):
        return transport_key(error.reason)
    return "error.unknown"


def message_for(error: AccountFetchError, catalog: Dict[str, str] | None = None) -> str:
    """Look up the message for a failure; unknown domain codes still show the code."""
    catalog = MESSAGES if catalog is None else catalog
    key = message_key(error)
    if key in catalog:
        return catalog[key]
    if isinstance(error, DomainFailure):
        return f"{GENERIC_ERROR}: {error.code}"
    return GENERIC_ERROR


__all__ = ["GENERIC_ERROR", "MESSAGES", "message_for", "message_key", "transport_key"]
