"""HTTP fetching of hierarchy nodes and persistence of their children."""

from __future__ import annotations

from pathlib import Path

import httpx
import structlog

from ..config import GlobalConfig
from .errors import InvalidCodeError, MalformedResponseError, NetworkError
from .levels import HierarchyLevel
from .records import RegionalRecord, decode_records
from .retry import RetryExecutor, RetryOnErrors
from .store import CsvOptions, RecordStore
from .text import capitalize_except_roman


def endpoint_path(level: HierarchyLevel, code: str | None = None, root_path: str = "0.json") -> str:
    """Build the relative JSON path listing the children requested for ``level``.

    ``level`` is the level being fetched; ``code`` belongs to its parent node.
    """

    if level is HierarchyLevel.REGION:
        return root_path
    if not code:
        raise InvalidCodeError(f"A parent code is required to fetch {level.label}")
    if level is HierarchyLevel.SUB_REGION:
        return f"{code}.json"
    if level is HierarchyLevel.DISTRICT:
        if len(code) < 2:
            raise InvalidCodeError(f"Code {code!r} too short for {level.label}")
        return f"{code[:2]}/{code}.json"
    if len(code) < 4:
        raise InvalidCodeError(f"Code {code!r} too short for {level.label}")
    return f"{code[:2]}/{code[:4]}/{code}.json"


class ResourceFetcher:
    """Fetch one node's children, decode them and append them to the level file."""

    def __init__(
        self,
        config: GlobalConfig,
        store: RecordStore,
        logger: structlog.BoundLogger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        write_retry: RetryExecutor | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.logger = logger or structlog.get_logger("region_crawler.fetcher")
        endpoint = config.endpoint
        self._client = httpx.AsyncClient(
            base_url=endpoint.base_url,
            follow_redirects=True,
            timeout=endpoint.timeout,
            headers={"User-Agent": endpoint.user_agent} if endpoint.user_agent else None,
            transport=transport,
        )
        self.write_retry = write_retry or RetryExecutor(
            RetryOnErrors(
                errors=(OSError,),
                max_attempts=config.pipeline.write_attempts,
                step=config.pipeline.write_retry_step,
            ),
            logger=self.logger,
        )
        self.csv_options = CsvOptions(
            include_header=config.csv.include_header,
            ignore_null_values=config.csv.ignore_null_values,
            transform=capitalize_except_roman if config.csv.capitalize_names else None,
            encoding=config.csv.encoding,
        )

    async def __aenter__(self) -> "ResourceFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, path: str) -> bytes:
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as exc:
            raise NetworkError(f"Request failed for {path}: {exc}", url=path) from exc
        if not response.is_success:
            raise NetworkError(
                f"Unexpected status {response.status_code} for {response.url}",
                url=str(response.url),
                status_code=response.status_code,
            )
        return response.content

    @staticmethod
    def decode(payload: bytes) -> list[RegionalRecord]:
        if not payload.strip():
            raise MalformedResponseError("Empty response body")
        return decode_records(payload)

    def exclude(self, records: list[RegionalRecord]) -> list[RegionalRecord]:
        excluded = set(self.config.excluded_names)
        return [record for record in records if record.name not in excluded]

    async def fetch_level(self, level: HierarchyLevel, code: str | None = None) -> Path | None:
        """Fetch the children of ``code`` at ``level`` and persist them.

        Returns the destination written to, or None when the node has no children.
        """

        path = endpoint_path(level, code, self.config.endpoint.root_path)
        payload = await self.fetch(path)
        records = self.decode(payload)
        if level is HierarchyLevel.REGION:
            records = self.exclude(records)
        if not records:
            self.logger.info("empty_response", entity=level.label, code=code, path=path)
            return None
        destination = self.config.destination_path(level)
        written = await self.write_retry.run(
            lambda: self.store.append(destination, records, self.csv_options),
            context={"entity": level.label, "code": code, "destination": str(destination)},
        )
        self.logger.debug(
            "records_written",
            entity=level.label,
            code=code,
            count=len(records),
            destination=str(written),
        )
        return written


__all__ = ["ResourceFetcher", "endpoint_path"]
