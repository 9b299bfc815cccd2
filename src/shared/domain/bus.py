"""Domain bus interfaces for in-process event handling.

Publishers (order lifecycle) depend on ``IEventBus`` only; notification
and push handlers implement ``IEventHandler`` and are wired up in the
owning app's ``AppConfig.ready``.
"""

from __future__ import annotations

from typing import Generic, Protocol, Type, TypeVar

from shared.domain.events import DomainEvent

E = TypeVar("E", bound=DomainEvent, contravariant=True)


class IEventHandler(Protocol, Generic[E]):
    """Handler interface for domain events."""

    def handle(self, event: E) -> None: ...


class IEventBus(Protocol):
    """Publish/subscribe contract for domain events."""

    def publish(self, event: DomainEvent) -> None: ...

    def subscribe(self, event_class: Type[E], handler: IEventHandler[E]) -> None: ...
