import asyncio
import logging
import threading
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

logger = logging.getLogger(__name__)

REGISTERED = "registered"
STREAMING = "streaming"
CLOSED = "closed"


@dataclass(frozen=True)
class ServerEvent:
    """One record on a doctor's event stream."""

    event: str
    data: str

    def encode(self) -> str:
        return f"event: {self.event}\ndata: {self.data}\n\n"


PING = ServerEvent("ping", "ok")
UPDATE = ServerEvent("update", "changed")


class Subscription:
    """A live registration for one doctor's roster changes.

    Holds at most one pending signal; further signals before it is consumed
    are coalesced since they carry no data.
    """

    def __init__(self, doctor_id: int, loop: asyncio.AbstractEventLoop) -> None:
        self.id = uuid.uuid4().hex
        self.doctor_id = doctor_id
        self.state = REGISTERED
        self._loop = loop
        self._signals: asyncio.Queue[None] = asyncio.Queue(maxsize=1)

    @property
    def pending(self) -> bool:
        return not self._signals.empty()

    def _offer(self) -> None:
        if self.state == CLOSED:
            return
        try:
            self._signals.put_nowait(None)
        except asyncio.QueueFull:
            logger.debug("Signal coalesced for doctor %s subscriber %s", self.doctor_id, self.id)

    def notify(self) -> None:
        """Deliver a signal without blocking, from any thread."""
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._offer()
            return
        try:
            self._loop.call_soon_threadsafe(self._offer)
        except RuntimeError:
            logger.debug("Subscriber %s loop is closed; dropping signal", self.id)

    async def wait(self, timeout: float) -> bool:
        """Wait for a signal. Returns False if ``timeout`` elapses first."""
        try:
            await asyncio.wait_for(self._signals.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True


class NotificationHub:
    """Per-doctor registry of subscriptions with best-effort fan-out."""

    def __init__(self) -> None:
        self._subscribers: dict[int, dict[str, Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, doctor_id: int) -> Subscription:
        """Register a new subscription bound to the running event loop."""
        sub = Subscription(doctor_id, asyncio.get_running_loop())
        with self._lock:
            self._subscribers.setdefault(doctor_id, {})[sub.id] = sub
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        """Remove a subscription. Safe to call more than once."""
        with self._lock:
            if sub.state == CLOSED:
                return
            sub.state = CLOSED
            subs = self._subscribers.get(sub.doctor_id)
            if subs is not None:
                subs.pop(sub.id, None)
                if not subs:
                    del self._subscribers[sub.doctor_id]

    @contextmanager
    def subscription(self, doctor_id: int) -> Iterator[Subscription]:
        sub = self.subscribe(doctor_id)
        try:
            yield sub
        finally:
            self.unsubscribe(sub)

    def publish(self, doctor_id: int) -> int:
        """Signal every current subscriber of ``doctor_id``.

        Returns the number of subscribers targeted.
        """
        with self._lock:
            targets = list(self._subscribers.get(doctor_id, {}).values())
        for sub in targets:
            sub.notify()
        return len(targets)

    def subscriber_count(self, doctor_id: int) -> int:
        with self._lock:
            return len(self._subscribers.get(doctor_id, {}))


async def stream_events(
    hub: NotificationHub,
    doctor_id: int,
    is_disconnected: Callable[[], Awaitable[bool]],
    heartbeat: float,
) -> AsyncIterator[ServerEvent]:
    """Serve one doctor's event stream until the transport goes away.

    Emits a ``ping`` on connect, an ``update`` for each delivered signal and
    a ``ping`` after ``heartbeat`` idle seconds. The subscription is released
    whichever way the generator ends (disconnect, cancellation or close).
    """
    with hub.subscription(doctor_id) as sub:
        sub.state = STREAMING
        logger.info("Doctor %s stream opened (%s)", doctor_id, sub.id)
        try:
            yield PING
            while not await is_disconnected():
                if await sub.wait(heartbeat):
                    yield UPDATE
                else:
                    yield PING
        finally:
            logger.info("Doctor %s stream closed (%s)", doctor_id, sub.id)
