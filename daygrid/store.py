import asyncio
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Awaitable, Protocol

import httpx
import structlog

from daygrid.config import settings
from daygrid.errors import PersistenceDriftFailure

logger = structlog.get_logger("daygrid.store")


class ScheduleStore(Protocol):
    """Remote store consumed by the day grid. Rows are plain JSON-like dicts."""

    async def fetch_resources(self) -> list[dict]: ...

    async def fetch_services(self) -> list[dict]: ...

    async def fetch_bookings_for_date(self, day: date) -> list[dict]: ...

    async def create_customer(self, first_name: str, last_name: str) -> int: ...

    async def create_booking(
        self,
        customer_id: int,
        resource_id: int,
        service_id: int,
        start_dt: datetime,
        duration_min: int,
        price: Decimal,
        status: str,
    ) -> int | None: ...

    async def update_booking_resource_and_time(
        self, booking_id: int, resource_id: int, start_dt: datetime
    ) -> None: ...


@dataclass(frozen=True)
class PersistOutcome:
    ok: bool
    error: PersistenceDriftFailure | None = None


class BestEffort:
    """A dispatched write whose failure never reaches the caller that fired it.

    Failures are logged as ``<event>_failed`` and kept on the handle. Callers
    that care about consistency can ``await handle.wait()`` and inspect the
    outcome; nobody is required to.
    """

    def __init__(self, task: asyncio.Task, event: str, context: dict, registry: set | None = None):
        self._task = task
        self.event = event
        self.context = context
        self._registry = registry

    @classmethod
    def spawn(cls, coro: Awaitable, event: str, registry: set | None = None, **context) -> "BestEffort":
        """Schedule ``coro`` on the running loop.

        ``registry`` holds a strong reference to the task until it finishes.
        Raises ``RuntimeError`` when no loop is running; ``coro`` is closed
        in that case.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise
        task = loop.create_task(coro)
        handle = cls(task, event, context, registry)
        if registry is not None:
            registry.add(task)
        task.add_done_callback(handle._on_done)
        return handle

    def _on_done(self, task: asyncio.Task) -> None:
        if self._registry is not None:
            self._registry.discard(task)
        if task.cancelled():
            logger.warning(f"{self.event}_cancelled", **self.context)
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"{self.event}_failed", error=str(exc), **self.context)

    @property
    def done(self) -> bool:
        return self._task.done()

    async def wait(self) -> PersistOutcome:
        await asyncio.wait({self._task})
        if self._task.cancelled():
            return PersistOutcome(ok=False, error=PersistenceDriftFailure(f"{self.event} cancelled"))
        exc = self._task.exception()
        if exc is not None:
            drift = PersistenceDriftFailure(f"{self.event} failed: {exc}")
            drift.__cause__ = exc
            return PersistOutcome(ok=False, error=drift)
        return PersistOutcome(ok=True)


class HttpScheduleStore:
    """ScheduleStore backed by the salon store HTTP API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout or settings.API_TIMEOUT_SECONDS,
        )

    async def __aenter__(self) -> "HttpScheduleStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str, params: dict | None = None):
        r = await self._client.get(path, params=params)
        r.raise_for_status()
        return r.json()

    async def _post_json(self, path: str, json: dict):
        r = await self._client.post(path, json=json)
        r.raise_for_status()
        return r.json()

    async def _patch_json(self, path: str, json: dict):
        r = await self._client.patch(path, json=json)
        r.raise_for_status()
        return r.json()

    async def fetch_resources(self) -> list[dict]:
        return await self._get_json("/api/stylists") or []

    async def fetch_services(self) -> list[dict]:
        return await self._get_json("/api/services") or []

    async def fetch_bookings_for_date(self, day: date) -> list[dict]:
        return await self._get_json("/api/bookings", {"day": day.isoformat()}) or []

    async def create_customer(self, first_name: str, last_name: str) -> int:
        body = await self._post_json(
            "/api/customers", {"first_name": first_name, "last_name": last_name}
        )
        return int(body["id"])

    async def create_booking(
        self,
        customer_id: int,
        resource_id: int,
        service_id: int,
        start_dt: datetime,
        duration_min: int,
        price: Decimal,
        status: str,
    ) -> int | None:
        body = await self._post_json(
            "/api/bookings",
            {
                "customer_id": int(customer_id),
                "stylist_id": int(resource_id),
                "service_id": int(service_id),
                "start_dt": start_dt.isoformat(),
                "duration_min": int(duration_min),
                "price": str(price),
                "status": status,
            },
        )
        booking_id = (body or {}).get("id")
        return int(booking_id) if booking_id is not None else None

    async def update_booking_resource_and_time(
        self, booking_id: int, resource_id: int, start_dt: datetime
    ) -> None:
        await self._patch_json(
            f"/api/bookings/{int(booking_id)}",
            {"stylist_id": int(resource_id), "start_dt": start_dt.isoformat()},
        )
