"""
Booth Client — Device facade

Wires the API client, offline store, connectivity monitor and submitter
together for one kiosk or POS terminal.
"""
import logging
from enum import Enum

from booth_client.api import BoothApiClient
from booth_client.config import get_settings
from booth_client.connectivity import ConnectivityMonitor
from booth_client.models import OrderRequest, SubmitResult, SyncResult
from booth_client.offline_store import OfflineStore
from booth_client.submission import OrderSubmitter
from booth_client.tracking import OrderTracker

logger = logging.getLogger(__name__)


class Channel(str, Enum):
    KIOSK = "kiosk"
    POS = "pos"


class BoothClient:

    def __init__(
        self,
        channel: Channel = Channel.KIOSK,
        api: BoothApiClient | None = None,
        store: OfflineStore | None = None,
        monitor: ConnectivityMonitor | None = None,
    ):
        settings = get_settings()
        self.channel = channel
        self.api = api or BoothApiClient()
        self.store = store or OfflineStore()
        self.monitor = monitor or ConnectivityMonitor(
            probe=self.api.health,
            probe_interval=settings.CONNECTIVITY_PROBE_INTERVAL_SECONDS,
        )
        max_quantity = settings.POS_MAX_QUANTITY if channel == Channel.POS else settings.KIOSK_MAX_QUANTITY
        self.submitter = OrderSubmitter(self.api, self.store, self.monitor, max_quantity=max_quantity)
        self.monitor.on_reconnect(self._on_reconnect)

    async def start(self) -> None:
        await self.store.init()
        await self.store.cleanup_synced()
        # Orders left over from a previous offline session
        if self.monitor.is_online and await self.store.has_pending():
            await self.sync_pending_orders()
        self.monitor.start()

    async def _on_reconnect(self) -> None:
        result = await self.sync_pending_orders()
        if result.error_message:
            logger.warning(result.error_message)
        await self.store.cleanup_synced()

    async def submit(self, request: OrderRequest) -> SubmitResult:
        return await self.submitter.submit(request)

    async def sync_pending_orders(self) -> SyncResult:
        return await self.submitter.sync_pending_orders()

    async def pending_count(self) -> int:
        return await self.store.count_pending()

    def track(self, order_id: str) -> OrderTracker:
        return OrderTracker(self.api, order_id)

    async def close(self) -> None:
        await self.monitor.stop()
        await self.store.close()
        await self.api.aclose()

    async def __aenter__(self) -> "BoothClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
