"""
Booth Client — Offline-first order submission and replay

submit() always accepts a valid order: it is either confirmed by the server
or stored locally under a TEMP- ID. sync_pending_orders() replays stored
orders oldest first, one at a time, and never runs two passes at once.
The TEMP- ID is sent as the Idempotency-Key on every attempt, so a create
whose response was lost is not duplicated by the replay.
"""
import logging

from booth_client.api import BoothApiClient
from booth_client.connectivity import ConnectivityMonitor
from booth_client.config import get_settings
from booth_client.errors import ApiError, TransientApiError
from booth_client.ids import current_date_key, generate_temp_id
from booth_client.models import OrderRequest, SubmitResult, SyncResult
from booth_client.offline_store import OfflineStore
from booth_client.validation import validate_order_request

logger = logging.getLogger(__name__)


class OrderSubmitter:

    def __init__(
        self,
        api: BoothApiClient,
        store: OfflineStore,
        monitor: ConnectivityMonitor,
        max_quantity: int,
        retry_alert_threshold: int | None = None,
    ):
        self.api = api
        self.store = store
        self.monitor = monitor
        self.max_quantity = max_quantity
        self.retry_alert_threshold = (
            retry_alert_threshold if retry_alert_threshold is not None
            else get_settings().SYNC_RETRY_ALERT_THRESHOLD
        )
        self._syncing = False

    @property
    def is_syncing(self) -> bool:
        return self._syncing

    async def submit(self, request: OrderRequest) -> SubmitResult:
        """
        Raises OrderValidationError for bad input and ApiError when the
        server rejects the order; transport failures never escape.
        """
        request = validate_order_request(request, self.max_quantity)
        if request.date_key is None:
            # The order belongs to the day it was taken, not the day it reaches the server
            request = request.model_copy(update={"date_key": current_date_key()})
        temp_id = generate_temp_id()

        if self.monitor.is_online:
            try:
                order = await self.api.create_order(request, idempotency_key=temp_id)
            except TransientApiError as exc:
                logger.warning("Order submission failed, saving offline: %s", exc)
                self.monitor.mark_offline()
            else:
                return SubmitResult(order=order)

        pending = await self.store.save_pending(request, temp_id=temp_id)
        return SubmitResult(pending=pending)

    async def sync_pending_orders(self) -> SyncResult:
        if self._syncing:
            logger.info("Sync already in progress; skipping")
            return SyncResult()
        if not self.monitor.is_online:
            return SyncResult()

        self._syncing = True
        try:
            result = SyncResult()
            for pending in await self.store.list_pending():
                try:
                    order = await self.api.create_order(pending.order_data, idempotency_key=pending.id)
                except (TransientApiError, ApiError) as exc:
                    pending = pending.model_copy(
                        update={"retry_count": pending.retry_count + 1, "last_error": str(exc)}
                    )
                    await self.store.update_pending(pending)
                    result.failed.append(pending)
                    if pending.retry_count >= self.retry_alert_threshold:
                        logger.error("Pending order %s for %s still unsynced after %d attempts: %s",
                                     pending.id, pending.order_data.customer_name, pending.retry_count, exc)
                    else:
                        logger.warning("Pending order %s failed to sync (attempt %d): %s",
                                       pending.id, pending.retry_count, exc)
                    continue

                await self.store.mark_synced(pending.id, order)
                result.synced.append(order)

            if result.synced or result.failed:
                logger.info("Sync pass finished: %d synced, %d failed", len(result.synced), len(result.failed))
            return result
        finally:
            self._syncing = False
