"""Catalog loading with bounded retry on the conversation clock."""
from typing import List

from stylist.analytics.error_tracker import error_tracker
from stylist.analytics.logger import logger
from stylist.database.repository import StoreRepository
from stylist.database.schemas import Product
from stylist.utils.clock import Clock
from stylist.utils.errors import CatalogUnavailableError, StoreError
from stylist.utils.retry import RetryConfig, catalog_retry_config, retry_async


class CatalogLoader:
    """Fetch the full catalog, retrying while it is empty or the store fails."""

    def __init__(self, repository: StoreRepository, clock: Clock, config: RetryConfig = None):
        self.repository = repository
        self.clock = clock
        self.config = config or catalog_retry_config()
        self.attempts = 0

    async def _fetch(self) -> List[Product]:
        self.attempts += 1
        products = await self.repository.list_products()
        if not products:
            raise CatalogUnavailableError("catalog is empty")
        return products

    async def load(self) -> List[Product]:
        """Load the catalog.

        Raises:
            CatalogUnavailableError: once every attempt has failed. The
            failure is recorded once as ``data_unavailable``.
        """
        self.attempts = 0
        try:
            products = await retry_async(self._fetch, config=self.config, sleep=self.clock.sleep)
        except (CatalogUnavailableError, StoreError) as e:
            error_tracker.record_error(
                "data_unavailable",
                f"Catalog unavailable after {self.attempts} attempts: {e}",
                {"attempts": self.attempts},
            )
            raise CatalogUnavailableError(str(e)) from e
        logger.info(f"Loaded {len(products)} products after {self.attempts} attempt(s)")
        return products

    async def load_once(self) -> List[Product]:
        """One attempt with no retry; an empty list while the catalog is still unavailable."""
        self.attempts = 0
        try:
            return await self._fetch()
        except (CatalogUnavailableError, StoreError) as e:
            logger.warning(f"Catalog still unavailable: {e}")
            return []
