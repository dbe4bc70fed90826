import asyncio
import contextlib
import logging
from typing import Any

from eth_utils import to_hex
from hexbytes import HexBytes

from chain.abi import EventSpec
from chain.client import LogSubscription
from chain.codec import WORD_SIZE, format_address, word_to_address, word_to_int
from chain.entities import PurchaseEventEntity
from core.exceptions import InvalidFormatException, MalformedLogException

PURCHASE_DATA_WORDS = 3

_CLOSED = object()


def decode_purchase_event(entry: Any, event_spec: EventSpec) -> PurchaseEventEntity:
    """
    Decode a ``TokenPurchase`` log entry.

    The buyer comes from the first indexed topic; token amount, paid amount
    and timestamp are three consecutive 32-byte big-endian words in ``data``.

    Parameters
    ----------
    entry : Any
        Log entry as returned by web3 (mapping with ``topics``, ``data``,
        ``transactionHash``, ``blockNumber``)
    event_spec : EventSpec
        Descriptor entry of the purchase event

    Returns
    -------
    PurchaseEventEntity
        Decoded event

    Raises
    ------
    MalformedLogException
        If the entry is too short, has the wrong signature or misses fields
    """
    try:
        topics = [HexBytes(topic) for topic in (entry.get("topics") or [])]
        data = HexBytes(entry.get("data") or b"")
        tx_hash = entry.get("transactionHash")
        block_number = entry.get("blockNumber")
    except (AttributeError, TypeError, ValueError) as e:
        raise MalformedLogException(f"Unreadable log entry: {e}") from e

    if len(topics) < 1 + len(event_spec.indexed):
        raise MalformedLogException(f"Expected {1 + len(event_spec.indexed)} topics, got {len(topics)}")
    if bytes(topics[0]) != event_spec.topic:
        raise MalformedLogException(f"Topic {to_hex(topics[0])} is not {event_spec.signature}")

    min_length = PURCHASE_DATA_WORDS * WORD_SIZE
    if len(data) < min_length:
        raise MalformedLogException(f"Log data is {len(data)} bytes, need at least {min_length}")
    if tx_hash is None or block_number is None:
        raise MalformedLogException("Log entry has no transaction hash or block number")

    try:
        buyer = word_to_address(bytes(topics[1]))
    except InvalidFormatException as e:
        raise MalformedLogException(f"Bad buyer topic: {e.message}") from e

    try:
        transaction_hash = to_hex(HexBytes(tx_hash))
        block = int(block_number)
    except (TypeError, ValueError) as e:
        raise MalformedLogException(f"Bad transaction hash or block number: {e}") from e

    words = [bytes(data[i * WORD_SIZE:(i + 1) * WORD_SIZE]) for i in range(PURCHASE_DATA_WORDS)]
    return PurchaseEventEntity(
        buyer=format_address(buyer),
        token_amount=word_to_int(words[0]),
        paid_amount=word_to_int(words[1]),
        timestamp=word_to_int(words[2]),
        transaction_hash=transaction_hash,
        block_number=block
    )


class PurchaseEventWatcher:
    """
    Background task forwarding decoded purchase events to a queue.

    The watcher owns its subscription. Malformed entries are logged and
    skipped; a subscription error ends the stream and is re-raised to the
    consumer once buffered events are drained. Polling begins on :meth:`start`
    or on the first iteration. :meth:`cancel` stops the task and releases the
    subscription whether or not polling ever began; it is idempotent.

    Parameters
    ----------
    subscription : LogSubscription
        Opened log subscription
    event_spec : EventSpec
        Descriptor entry of the purchase event
    logger : logging.Logger
        Logger instance
    max_pending : int
        Queue bound; 0 means unbounded
    """

    def __init__(
        self,
        subscription: LogSubscription,
        event_spec: EventSpec,
        logger: logging.Logger,
        max_pending: int = 0
    ):
        self.subscription = subscription
        self.event_spec = event_spec
        self.logger = logger
        self.skipped = 0
        self.error: Exception | None = None
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_pending)
        self._task: asyncio.Task | None = None
        self._closed = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "PurchaseEventWatcher":
        if self._task is None and not self._closed:
            self._task = asyncio.create_task(self._run(), name="purchase-event-watcher")
        return self

    async def _run(self) -> None:
        try:
            async for entry in self.subscription:
                try:
                    event = decode_purchase_event(entry, self.event_spec)
                except MalformedLogException as e:
                    self.skipped += 1
                    self.logger.warning(f"Skipping malformed purchase log: {e.message}")
                    continue
                await self._queue.put(event)
        except Exception as e:
            self.error = e
            self.logger.error(f"Purchase event subscription failed: {e}")
        finally:
            await self.subscription.cancel()
            self._close_queue()

    def _close_queue(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            # consumer is gone; drop the oldest buffered event to make room
            self._queue.get_nowait()
            self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> "PurchaseEventWatcher":
        return self

    async def __anext__(self) -> PurchaseEventEntity:
        self.start()
        item = await self._queue.get()
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            if self.error is not None:
                raise self.error
            raise StopAsyncIteration
        return item

    async def cancel(self) -> None:
        """Stop forwarding and release the subscription."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        await self.subscription.cancel()
        self._close_queue()

    async def __aenter__(self) -> "PurchaseEventWatcher":
        return self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.cancel()
