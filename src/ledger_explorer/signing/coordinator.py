"""Coordination of external sign-in / transaction-signing sessions."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable, List, Optional

from ledger_explorer.connection.exceptions import ExplorerAPIError
from ledger_explorer.logging_config import structured_log_extra
from ledger_explorer.metrics import ViewMetrics
from ledger_explorer.signing.exceptions import InvalidCorrelationId, NoPendingSession
from ledger_explorer.signing.identity import IdentityStore
from ledger_explorer.signing.models import (
    AccountIdentity,
    SessionStatus,
    SignIntent,
    SignOutcome,
    SignRequest,
    SignResult,
    SignSession,
)
from ledger_explorer.state_store import ClientStateStore

logger = logging.getLogger(__name__)

OutcomeListener = Callable[[SignOutcome], None]
StatusSource = Callable[[str], Awaitable[Optional[SignResult]]]


def is_valid_uuid(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


class SignSessionCoordinator:
    """Runs the ``Idle -> Pending -> {Resolved, Abandoned}`` session lifecycle.

    At most one session is pending; starting another abandons the current one
    first. The coordinator holds the only write handle to the active identity.
    """

    def __init__(
        self,
        identity_store: IdentityStore,
        client: Any = None,
        state_store: Optional[ClientStateStore] = None,
        timeout_seconds: Optional[float] = 300.0,
        metrics: Optional[ViewMetrics] = None,
        poll_interval: float = 2.0,
    ):
        self._identity_store = identity_store
        self._writer = identity_store.claim_writer()
        self._client = client
        self._state_store = state_store
        self._timeout_seconds = timeout_seconds
        self._metrics = metrics
        self.poll_interval = poll_interval
        self._session: Optional[SignSession] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._listeners: List[OutcomeListener] = []

    @property
    def session(self) -> Optional[SignSession]:
        """The pending session, or ``None`` while idle."""
        return self._session

    @property
    def is_pending(self) -> bool:
        return self._session is not None

    @property
    def identity(self) -> AccountIdentity:
        return self._identity_store.identity

    def subscribe(self, listener: OutcomeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def begin(self, request: SignRequest, correlation_id: Optional[str] = None) -> SignSession:
        if correlation_id is None:
            correlation_id = str(uuid.uuid4())
        elif not is_valid_uuid(correlation_id):
            raise InvalidCorrelationId(correlation_id)

        if self._session is not None:
            self.abandon(reason="superseded")

        session = SignSession(correlation_id=correlation_id, request=request)
        self._session = session
        if self._state_store is not None:
            self._state_store.save_pending_session(
                {"correlation_id": correlation_id, "request": request.to_dict()}
            )
        self._arm_timeout(session)

        logger.info(
            "Sign session pending",
            extra=structured_log_extra(
                event="sign_session_pending",
                correlation_id=correlation_id,
                intent=session.intent.value,
                action=request.action,
            ),
        )
        return session

    def resume_from_entry(self, correlation_id: Any) -> Optional[SignSession]:
        """Resume the session named by an identifier found in the entry context.

        Identifiers that are not UUIDs are ignored. The original request is
        restored from persisted bookkeeping when it matches.
        """
        if not is_valid_uuid(correlation_id):
            if correlation_id:
                logger.info(
                    "Ignoring invalid correlation id from entry context",
                    extra=structured_log_extra(event="sign_session_entry_ignored"),
                )
            return None

        if self._session is not None and self._session.correlation_id == correlation_id:
            return self._session

        request = SignRequest()
        persisted = self._state_store.load_pending_session() if self._state_store else None
        if persisted and persisted.get("correlation_id") == correlation_id:
            request = SignRequest.from_dict(persisted.get("request") or {})

        return self.begin(request, correlation_id)

    async def resolve(self, correlation_id: str, result: SignResult) -> SignOutcome:
        session = self._session
        if session is None or session.correlation_id != correlation_id:
            raise NoPendingSession(correlation_id)

        self._finish()
        session.status = SessionStatus.RESOLVED
        session.result = result

        identity_changed = False
        if session.intent is SignIntent.ADOPT:
            generation = self._identity_store.generation
            username = result.username
            if username is None:
                username = await self._lookup_username(result.address)
            if self._identity_store.generation != generation:
                # A sign-out or a newer session wrote the identity during the lookup.
                logger.info(
                    "Dropping identity adoption overtaken by a later write",
                    extra=structured_log_extra(
                        event="identity_adoption_dropped",
                        correlation_id=correlation_id,
                        address=result.address,
                    ),
                )
            else:
                self._writer.adopt(
                    AccountIdentity(address=result.address, username=username, wallet=result.wallet)
                )
                identity_changed = True

        logger.info(
            "Sign session resolved",
            extra=structured_log_extra(
                event="sign_session_resolved",
                correlation_id=correlation_id,
                address=result.address,
                intent=session.intent.value,
            ),
        )
        if self._metrics is not None:
            self._metrics.record_sign_session(resolved=True)
        return self._emit(SignOutcome(session=session, identity_changed=identity_changed))

    def abandon(self, reason: str = "dismissed") -> Optional[SignOutcome]:
        session = self._session
        if session is None:
            return None

        self._finish()
        session.status = SessionStatus.ABANDONED
        session.reason = reason

        logger.info(
            "Sign session abandoned (%s)",
            reason,
            extra=structured_log_extra(
                event="sign_session_abandoned",
                correlation_id=session.correlation_id,
                reason=reason,
            ),
        )
        if self._metrics is not None:
            self._metrics.record_sign_session(resolved=False)
        return self._emit(SignOutcome(session=session))

    async def poll(
        self, fetch_status: StatusSource, interval: Optional[float] = None
    ) -> Optional[SignOutcome]:
        """Poll ``fetch_status`` until the pending session resolves or stops being pending.

        ``interval`` defaults to the coordinator's configured poll interval.
        """
        if interval is None:
            interval = self.poll_interval
        session = self._session
        if session is None:
            return None

        while self._session is session:
            try:
                result = await fetch_status(session.correlation_id)
            except ExplorerAPIError as exc:
                logger.warning(
                    "Sign status poll failed: %s",
                    exc,
                    extra=structured_log_extra(
                        event="sign_session_poll_failed",
                        correlation_id=session.correlation_id,
                    ),
                )
                result = None

            if self._session is not session:
                break
            if result is not None:
                return await self.resolve(session.correlation_id, result)
            await asyncio.sleep(interval)
        return None

    def sign_out(self) -> None:
        self._writer.clear()

    def _arm_timeout(self, session: SignSession) -> None:
        if not self._timeout_seconds:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop yet: the session can only end by resolve/abandon.
            return
        self._timer = loop.call_later(self._timeout_seconds, self._on_timeout, session)

    def _on_timeout(self, session: SignSession) -> None:
        if self._session is session:
            self.abandon(reason="timeout")

    def _finish(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._session = None
        if self._state_store is not None:
            self._state_store.clear_pending_session()

    def _emit(self, outcome: SignOutcome) -> SignOutcome:
        for listener in list(self._listeners):
            listener(outcome)
        return outcome

    async def _lookup_username(self, address: str) -> Optional[str]:
        if self._client is None:
            return None
        try:
            payload = await asyncio.to_thread(self._client.get_username, address)
        except ExplorerAPIError as exc:
            logger.warning(
                "Username lookup failed for %s: %s",
                address,
                exc,
                extra=structured_log_extra(event="username_lookup_failed", address=address),
            )
            return None
        return payload.get("username")


__all__ = ["SignSessionCoordinator", "is_valid_uuid"]
