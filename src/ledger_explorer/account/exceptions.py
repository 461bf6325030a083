# src/ledger_explorer/account/exceptions.py


class AccountFetchError(Exception):
    """Base exception for account retrieval failures."""

    pass


class FetchFailure(AccountFetchError):
    """Raised when the account could not be retrieved due to transport or protocol problems."""

    def __init__(self, address: str, reason: str):
        super().__init__(f"Failed to fetch account {address}: {reason}")
        self.address = address
        self.reason = reason


class DomainFailure(AccountFetchError):
    """Raised when the data source rejects the lookup with an application error code."""

    def __init__(self, address: str, code: str):
        super().__init__(f"Lookup of account {address} rejected: {code}")
        self.address = address
        self.code = code


class StaleResultDiscarded(Exception):
    """Raised internally when a completion belongs to a superseded request."""

    def __init__(self, channel: str, sequence: int, latest: int):
        super().__init__(
            f"Discarding {channel} result #{sequence}; latest issued is #{latest}"
        )
        self.channel = channel
        self.sequence = sequence
        self.latest = latest
