"""Tracks the active and waiting cache controllers."""

import logging
from typing import Any

from todo_list.errors import NetworkFailureError
from todo_list.offline.controller import CacheController, ControllerState, FetchEvent
from todo_list.offline.messages import Request, Response

logger = logging.getLogger(__name__)


class ControllerRegistry:
    """Installs new controller versions and decides when they take over.

    A freshly installed controller replaces the active one when there is no
    active controller, when no clients are attached, or when it asked to skip
    waiting. Otherwise it stays waiting until a SKIP_WAITING message or until
    the last client detaches.
    """

    def __init__(self) -> None:
        self.active: CacheController | None = None
        self.waiting: CacheController | None = None
        self.clients = 0

    async def register(self, controller: CacheController) -> ControllerState:
        """Install controller and activate it if nothing holds it back."""
        if self.active is not None and self.active.version == controller.version:
            logger.info(f"[Registry] {controller.version} already active")
            return self.active.state

        try:
            await controller.install()
        except NetworkFailureError as e:
            logger.error(f"[Registry] Install of {controller.version} failed: {e}")
            return controller.state

        if self.waiting is not None:
            self.waiting.state = ControllerState.REDUNDANT
        self.waiting = controller
        await self._promote_waiting()
        return controller.state

    async def _promote_waiting(self) -> None:
        controller = self.waiting
        if controller is None:
            return
        if self.active is not None and self.clients > 0 and not controller.skip_waiting_requested:
            logger.info(f"[Registry] {controller.version} waiting for {self.clients} client(s)")
            return

        self.waiting = None
        previous = self.active
        await controller.activate()
        self.active = controller
        if previous is not None:
            previous.state = ControllerState.REDUNDANT
            logger.info(f"[Registry] {previous.version} superseded by {controller.version}")

    async def post_message(self, data: Any) -> None:
        """Deliver a client message to the waiting (else active) controller."""
        target = self.waiting or self.active
        if target is None:
            logger.warning("[Registry] Message dropped, no controller registered")
            return
        target.on_message(data)
        await self._promote_waiting()

    def attach_client(self) -> None:
        self.clients += 1

    async def detach_client(self) -> None:
        self.clients = max(0, self.clients - 1)
        if self.clients == 0:
            await self._promote_waiting()

    async def dispatch(self, request: Request) -> tuple[Response | None, FetchEvent]:
        """Route a request through the active controller.

        The caller must await event.settled() once the response is delivered.
        """
        event = FetchEvent(request)
        if self.active is None:
            return None, event
        return await self.active.handle_fetch(event), event

    def status(self) -> dict[str, Any]:
        return {
            "active": _describe(self.active),
            "waiting": _describe(self.waiting),
            "clients": self.clients,
        }


def _describe(controller: CacheController | None) -> dict[str, Any] | None:
    if controller is None:
        return None
    return {
        "version": controller.version,
        "state": controller.state.value,
        "strategy": controller.strategy.value,
    }
