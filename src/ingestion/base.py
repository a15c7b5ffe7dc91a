"""
Base classes for Ingestion
"""
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

import httpx

from core.entities import RawItem, SourceKind, SourceResult
from ingestion.retry import with_retries

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; InviteSniper/1.0)",
}


class SourceSchemaError(ValueError):
    """
    Raised when a source answers with a payload of unexpected shape.
    """


class SourceUnavailableError(RuntimeError):
    """
    Raised when none of an adapter's targets could be reached.
    """


class SourceAdapter(ABC):
    """
    Base interface for all ingestion sources.
    """

    kind: SourceKind

    @property
    def name(self) -> str:
        return self.kind.value

    @abstractmethod
    async def fetch_items(self) -> List[RawItem]:
        """
        Fetch the latest items from the origin.
        May raise; use collect() to get an isolated result.
        """
        raise NotImplementedError

    async def collect(self) -> SourceResult:
        """
        Fetch items and convert any failure into a diagnostic.
        Must NEVER raise uncaught exceptions.
        """
        start = time.perf_counter()
        try:
            items = await self.fetch_items()
        except Exception as e:
            elapsed = time.perf_counter() - start
            logger.warning(f"Source {self.name} failed: {e}")
            return SourceResult(
                source=self.name,
                items=[],
                error=f"{type(e).__name__}: {e}",
                elapsed=elapsed,
            )

        elapsed = time.perf_counter() - start
        logger.info(f"Source {self.name} fetched {len(items)} items in {elapsed:.2f}s")
        return SourceResult(source=self.name, items=items, elapsed=elapsed)


class HttpSourceAdapter(SourceAdapter):
    """
    Adapter talking to an HTTP origin with bounded timeout and retries.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        max_retries: int = 2,
        retry_delay: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.transport = transport

    def client(self, headers: Optional[Dict[str, str]] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers=headers or DEFAULT_HEADERS,
            follow_redirects=True,
            transport=self.transport,
        )

    async def _retry(self, fn: Callable[[], Awaitable[T]], label: str) -> T:
        return await with_retries(
            fn,
            label,
            max_retries=self.max_retries,
            delay=self.retry_delay,
        )

    async def get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        *,
        label: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        async def _call() -> Any:
            resp = await client.get(url, params=params, headers=headers)
            resp.raise_for_status()
            return resp.json()

        return await self._retry(_call, label)
