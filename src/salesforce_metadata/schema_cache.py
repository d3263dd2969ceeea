"""Per-connection cache of the described Salesforce schema.

The full describe (every sObject and its fields) is slow, so it is
fetched once per connection and kept in memory for the connection's
lifetime. There is no invalidation: reconnecting builds a new cache.

Lifecycle:
  UNLOADED -> LOADING -> LOADED
  LOADING  -> UNLOADED   (fetch failed; the next call retries)

Once LOADED the table tuple is never mutated, so readers share it
without locking. Only the first fetch is serialised.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from enum import Enum

from salesforce_metadata.models import Table

logger = logging.getLogger(__name__)

TableFetcher = Callable[[], Sequence[Table]]


class MetadataUnavailable(RuntimeError):
    """The schema description could not be fetched from Salesforce."""


class SchemaCacheState(Enum):
    """Load state of a SchemaCache."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


class SchemaCache:
    """Fetch-once, in-memory list of described tables.

    Args:
        fetcher: Zero-arg callable returning every Table, in the order
            they should be reported. Typically
            ``SalesforceRestClient.fetch_tables``.
    """

    def __init__(self, fetcher: TableFetcher) -> None:
        self._fetcher = fetcher
        self._lock = threading.Lock()
        self._tables: tuple[Table, ...] | None = None
        self._by_name: dict[str, Table] = {}
        self._state = SchemaCacheState.UNLOADED

    @property
    def state(self) -> SchemaCacheState:
        return self._state

    def get_tables(self) -> tuple[Table, ...]:
        """Return all tables, fetching them on first use.

        Raises:
            MetadataUnavailable: If the fetch failed. Nothing is cached,
                so a later call fetches again.
        """
        tables = self._tables
        if tables is not None:
            logger.debug("Tables requested - from cache")
            return tables

        with self._lock:
            # Another thread may have finished the fetch while we waited
            if self._tables is not None:
                return self._tables

            logger.info("Tables requested - fetching")
            self._state = SchemaCacheState.LOADING
            try:
                fetched = tuple(self._fetcher())
            except Exception as e:
                self._state = SchemaCacheState.UNLOADED
                logger.error("Schema fetch failed: %s: %s", type(e).__name__, e)
                raise MetadataUnavailable(
                    f"Could not describe Salesforce schema: {type(e).__name__}: {e}"
                ) from e

            # First table wins when names differ only in case
            by_name: dict[str, Table] = {}
            for table in fetched:
                by_name.setdefault(table.name.lower(), table)
            self._by_name = by_name
            self._tables = fetched
            self._state = SchemaCacheState.LOADED
            logger.info(
                "Cached %d tables, %d columns",
                len(fetched),
                sum(len(t.columns) for t in fetched),
            )
            return fetched

    def find_table(self, name: str) -> Table | None:
        """Case-insensitive exact lookup of one table.

        Raises:
            MetadataUnavailable: If the tables had to be fetched and failed.
        """
        self.get_tables()
        return self._by_name.get(name.lower())
