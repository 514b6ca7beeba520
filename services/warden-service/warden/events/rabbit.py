from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import orjson
from aio_pika import ExchangeType, Message, connect_robust
from aio_pika.abc import AbstractExchange, AbstractRobustConnection

from . import Event, rk

log = logging.getLogger("warden.events")


class RabbitPublisher:
    """Lazily connects on first publish; one connection per process."""

    def __init__(self, uri: str, exchange: str, org: str):
        self.uri = uri
        self.exchange_name = exchange
        self.org = org
        self._connection: Optional[AbstractRobustConnection] = None
        self._exchange: Optional[AbstractExchange] = None

    async def _ensure_exchange(self) -> AbstractExchange:
        if self._exchange:
            return self._exchange
        self._connection = await connect_robust(self.uri)
        channel = await self._connection.channel()
        self._exchange = await channel.declare_exchange(self.exchange_name, ExchangeType.TOPIC, durable=True)
        log.info("rabbit exchange ready exchange=%s", self.exchange_name)
        return self._exchange

    async def publish(self, routing_key: str, payload: Dict[str, Any]) -> None:
        ex = await self._ensure_exchange()
        msg = Message(orjson.dumps(payload), content_type="application/json", delivery_mode=2)
        await ex.publish(msg, routing_key=routing_key)

    async def publish_v1(self, event: Event, payload: Dict[str, Any]) -> None:
        await self.publish(rk(self.org, event), payload)

    async def close(self) -> None:
        if self._connection:
            await self._connection.close()
        self._connection = None
        self._exchange = None
