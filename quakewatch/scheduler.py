"""Ingestion Scheduler - Wires Functional Core and Imperative Shell.

Each connected subscriber gets a Session. A session runs one ingestion
cycle as soon as it starts and then one per poll interval until it is
stopped. A cycle has two explicit phases against the shared EventStore:

1. write: fetch the trailing window from the feed and upsert every event
2. read: query the most recent snapshot and push it to the session

The fetch window is wider than the poll interval, so consecutive cycles
see the same events again; upsert idempotence keeps that harmless.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Protocol

from quakewatch.core.config import Config
from quakewatch.core.dedup import collapse_revisions
from quakewatch.core.earthquake import parse_events
from quakewatch.core.record import event_to_payload
from quakewatch.core.session import SessionState, transition
from quakewatch.shell.broadcast import DATA_UPDATE_EVENT, BroadcastChannel
from quakewatch.shell.event_store import EventStore


logger = logging.getLogger(__name__)


class FeedFetcher(Protocol):
    """Anything that can fetch a GeoJSON FeatureCollection for a time window."""

    def fetch_window(self, start: datetime, end: datetime) -> dict[str, Any]:
        ...


@dataclass
class CycleResult:
    """Result of one fetch -> reconcile -> broadcast cycle.

    Attributes:
        session_id: Session the cycle ran for
        fetched: Features returned by the feed
        rejected: Features dropped as malformed
        upserted: Events written to the store
        upsert_failures: Events whose upsert raised
        snapshot_size: Events in the snapshot that was pushed
        broadcast: Whether the snapshot reached the client
        errors: Cycle-level errors (fetch or snapshot failures)
    """
    session_id: str
    fetched: int = 0
    rejected: int = 0
    upserted: int = 0
    upsert_failures: int = 0
    snapshot_size: int = 0
    broadcast: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Returns True if no errors occurred."""
        return not self.errors and self.upsert_failures == 0

    @property
    def summary(self) -> str:
        """Human-readable summary of the cycle."""
        return (
            f"Fetched {self.fetched} earthquakes, "
            f"{self.rejected} rejected, "
            f"{self.upserted} upserted, "
            f"{self.upsert_failures} failed, "
            f"snapshot of {self.snapshot_size} "
            f"{'sent' if self.broadcast else 'not sent'}"
        )


class Session:
    """One subscriber connection and its recurring ingestion timer."""

    def __init__(self, session_id: str, channel: BroadcastChannel) -> None:
        self.session_id = session_id
        self.channel = channel
        self.state = SessionState.IDLE
        self.cycles_completed = 0
        self._timer: asyncio.Task | None = None
        self._cycle: asyncio.Task | None = None

    @property
    def active(self) -> bool:
        return self.state is not SessionState.STOPPED

    @property
    def current_cycle(self) -> asyncio.Task | None:
        """The most recently started cycle task, if any."""
        return self._cycle

    @property
    def cycle_in_flight(self) -> bool:
        return self._cycle is not None and not self._cycle.done()

    def advance(self, target: SessionState) -> bool:
        """Move to ``target`` unless the session has been stopped.

        Returns:
            False if the session is stopped, True otherwise
        """
        if not self.active:
            return False
        self.state = transition(self.state, target)
        return True

    def stop(self) -> None:
        """Cancel the recurring timer. An in-flight cycle keeps running."""
        if not self.active:
            return
        self.state = transition(self.state, SessionState.STOPPED)
        if self._timer is not None:
            self._timer.cancel()

    def __repr__(self) -> str:
        return f"Session({self.session_id!r}, state={self.state.value})"


class IngestionScheduler:
    """Drives periodic ingestion cycles for every active session.

    Sessions run independent timers but share the fetcher and the store,
    so an upsert made for one session is visible in the next snapshot of
    every other session.
    """

    def __init__(
        self,
        config: Config,
        fetcher: FeedFetcher,
        store: EventStore,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize scheduler.

        Args:
            config: Application configuration
            fetcher: Feed fetcher (e.g. USGSClient)
            store: Shared event store
            now: Clock used for fetch windows (UTC now by default)
        """
        self.config = config
        self.fetcher = fetcher
        self.store = store
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._sessions: dict[str, Session] = {}

    @property
    def sessions(self) -> dict[str, Session]:
        """Active sessions keyed by ID."""
        return dict(self._sessions)

    def get_session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def start_session(
        self,
        channel: BroadcastChannel,
        session_id: str | None = None,
    ) -> Session:
        """Open a session: run a cycle now, then arm the recurring timer.

        Must be called from a running event loop.

        Args:
            channel: Where this session's snapshots are pushed
            session_id: Explicit ID (random if omitted)

        Returns:
            The new Session

        Raises:
            ValueError: If a session with that ID is already active
        """
        session_id = session_id or uuid.uuid4().hex
        if session_id in self._sessions:
            raise ValueError(f"Session {session_id} is already active")

        session = Session(session_id, channel)
        self._sessions[session_id] = session

        session._cycle = asyncio.create_task(self._run_cycle_logged(session))
        session._timer = asyncio.create_task(self._timer_loop(session))

        logger.info(
            "Started session %s (every %ss, %d active)",
            session_id,
            self.config.poll_interval_seconds,
            len(self._sessions),
        )
        return session

    def stop_session(self, session_id: str) -> Session | None:
        """Stop a session and forget it.

        Unknown or already stopped sessions are ignored.

        Returns:
            The stopped Session, or None if it was not active
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return None

        session.stop()
        logger.info(
            "Stopped session %s after %d cycle(s) (%d active)",
            session_id,
            session.cycles_completed,
            len(self._sessions),
        )
        return session

    async def shutdown(self) -> None:
        """Stop every session and wait for in-flight work to settle."""
        sessions = list(self._sessions.values())
        for session in sessions:
            self.stop_session(session.session_id)

        pending = [
            task
            for session in sessions
            for task in (session._timer, session._cycle)
            if task is not None
        ]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _timer_loop(self, session: Session) -> None:
        """Start a cycle every poll interval until the session stops."""
        interval = self.config.poll_interval_seconds

        while session.active:
            await asyncio.sleep(interval)

            if not session.active:
                break

            if session.cycle_in_flight:
                logger.warning(
                    "Previous cycle for session %s still running, skipping tick",
                    session.session_id,
                )
                continue

            session._cycle = asyncio.create_task(self._run_cycle_logged(session))

    async def _run_cycle_logged(self, session: Session) -> CycleResult | None:
        """Run a cycle, logging anything unexpected so the timer survives."""
        try:
            return await self.run_cycle(session)
        except Exception:
            logger.exception("Unexpected error in cycle for session %s", session.session_id)
            return None

    async def _fetch(self, result: CycleResult) -> dict[str, Any]:
        """Fetch the trailing window; failures degrade to an empty batch."""
        end = self._now()
        start = end - timedelta(minutes=self.config.window_minutes)

        try:
            return await asyncio.to_thread(self.fetcher.fetch_window, start, end)
        except Exception as e:
            error_msg = f"Failed to fetch earthquakes: {e}"
            logger.error(error_msg)
            result.errors.append(error_msg)
            return {}

    async def run_cycle(self, session: Session) -> CycleResult:
        """Run one fetch -> reconcile -> broadcast cycle for a session.

        If the session is stopped while the cycle is running, the write
        phase still completes and the broadcast is skipped.

        Args:
            session: Session to run the cycle for

        Returns:
            CycleResult with details of what happened
        """
        result = CycleResult(session_id=session.session_id)

        # Step 1: Fetch
        session.advance(SessionState.FETCHING)
        geojson = await self._fetch(result)

        parsed = parse_events(geojson)
        result.fetched = len(parsed.events) + len(parsed.rejected)
        result.rejected = len(parsed.rejected)

        if parsed.rejected:
            logger.warning(
                "Rejected %d malformed feature(s): %s",
                len(parsed.rejected),
                ", ".join(parsed.rejected),
            )

        # Step 2: Write phase - each upsert is independent
        session.advance(SessionState.RECONCILING)

        for event in collapse_revisions(parsed.events):
            try:
                await asyncio.to_thread(self.store.upsert, event)
                result.upserted += 1
            except Exception as e:
                result.upsert_failures += 1
                logger.error("Failed to upsert event %s: %s", event.external_id, e)

        # Step 3: Read phase
        try:
            snapshot = await asyncio.to_thread(
                self.store.list_recent,
                self.config.snapshot_limit,
            )
        except Exception as e:
            error_msg = f"Failed to query snapshot: {e}"
            logger.error(error_msg)
            result.errors.append(error_msg)
            session.advance(SessionState.WAITING)
            return result

        result.snapshot_size = len(snapshot)

        # Step 4: Push to the originating session only
        if session.advance(SessionState.BROADCASTING):
            payload = {"allEarthquakes": [event_to_payload(e) for e in snapshot]}
            try:
                result.broadcast = await session.channel.send(DATA_UPDATE_EVENT, payload)
            except Exception as e:
                logger.error("Failed to push snapshot to session %s: %s", session.session_id, e)
            session.advance(SessionState.WAITING)
        else:
            logger.debug(
                "Session %s stopped during cycle, skipping broadcast",
                session.session_id,
            )

        session.cycles_completed += 1
        logger.info("Session %s: %s", session.session_id, result.summary)
        return result
