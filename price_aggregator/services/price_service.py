import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

from price_aggregator.adapters.interfaces.vendor_adapter import CapabilityType, VendorAdaptor
from price_aggregator.core.exceptions import ValidationException
from price_aggregator.domain.models import LocationRecord, PriceRecord

logger = logging.getLogger(__name__)

R = TypeVar("R")


class PriceAggregator:
    """
    Fans a price or location query out to every configured vendor.

    Vendor calls run concurrently and are isolated from each other: a failing
    or slow vendor contributes nothing, and results are merged in configured
    vendor order regardless of which vendor answered first.
    """

    def __init__(self, adaptors: Sequence[VendorAdaptor], vendor_timeout: Optional[float] = 10.0):
        """
        Initialize with the configured adaptors.

        Args:
            adaptors: Vendor adaptors in configured order
            vendor_timeout: Per-vendor bound in seconds, None to disable
        """
        self.adaptors = list(adaptors)
        self.vendor_timeout = vendor_timeout

    async def query(self, item: Optional[str], zip_code: Optional[str] = None) -> List[PriceRecord]:
        """
        Gets prices for an item from every vendor that can search.

        Raises:
            ValidationException: If item is missing or blank
        """
        if not item or not item.strip():
            raise ValidationException(detail="Missing item query parameter", field="item")
        item = item.strip()
        zip_code = zip_code.strip() if zip_code and zip_code.strip() else None

        logger.info(f"Querying prices for '{item}' near {zip_code or 'any location'}")
        adaptors = [a for a in self.adaptors if a.get_capabilities().can_search()]
        return await self._fan_out(adaptors, lambda a: a.search_prices(item, zip_code), "price search")

    async def get_locations(self, zip_code: Optional[str]) -> List[LocationRecord]:
        """
        Gets store locations near a ZIP code from every locations-capable vendor.

        Raises:
            ValidationException: If zip_code is missing or blank
        """
        if not zip_code or not zip_code.strip():
            raise ValidationException(detail="Missing zip query parameter", field="zip")
        zip_code = zip_code.strip()

        adaptors = [a for a in self.adaptors if a.get_capabilities().supports(CapabilityType.LOCATIONS)]
        return await self._fan_out(adaptors, lambda a: a.find_locations(zip_code), "location lookup")

    def describe_vendors(self) -> List[Dict[str, Any]]:
        """Reports each configured vendor's capabilities and credential status."""
        return [
            {
                "vendor": adaptor.VENDOR_ID,
                "name": adaptor.VENDOR_NAME,
                "configured": adaptor.is_configured(),
                **adaptor.get_capabilities().to_dict(),
            }
            for adaptor in self.adaptors
        ]

    async def _fan_out(
        self,
        adaptors: List[VendorAdaptor],
        call: Callable[[VendorAdaptor], Awaitable[List[R]]],
        operation: str
    ) -> List[R]:
        results = await asyncio.gather(*(self._isolated(adaptor, call, operation) for adaptor in adaptors))

        merged: List[R] = []
        for records in results:
            merged.extend(records)
        return merged

    async def _isolated(
        self,
        adaptor: VendorAdaptor,
        call: Callable[[VendorAdaptor], Awaitable[List[R]]],
        operation: str
    ) -> List[R]:
        vendor = adaptor.VENDOR_ID
        try:
            if self.vendor_timeout:
                records = await asyncio.wait_for(call(adaptor), timeout=self.vendor_timeout)
            else:
                records = await call(adaptor)
        except asyncio.TimeoutError:
            logger.warning(
                f"{operation} timed out for {vendor} after {self.vendor_timeout}s",
                extra={"vendor": vendor}
            )
            return []
        except Exception as e:
            logger.warning(f"Error during {operation} for {vendor}: {str(e)}", extra={"vendor": vendor})
            return []

        logger.info(f"Got {len(records)} results from {vendor}", extra={"vendor": vendor})
        return list(records)
