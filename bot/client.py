"""
Matrix bot client - session setup and event handling.

Owns the nio AsyncClient, builds the shared BotContext once, and hands every
room message to the Dispatcher as an independent task.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from nio import (
    AsyncClient,
    AsyncClientConfig,
    InviteMemberEvent,
    JoinError,
    KeysUploadError,
    MatrixRoom,
    RoomMessage,
)

from core.config import stats_path, store_path
from core.constants import K
from core.help_system import HelpSystem
from core.stats_storage import StatsStore
from core.types import InboundEvent
from modules.loader import resolve_integrations
from responders.context import BotContext
from responders.delivery import ResponseEmitter
from responders.engine import Dispatcher
from responders.sampler import LivenessSampler

from .transport import MatrixTransport

logger = logging.getLogger("catbot")

SYNC_TIMEOUT_MS = 30000


class CatBot:
    """
    Main Matrix bot client.

    Handles:
    - Session setup and the sync loop
    - Auto-joining rooms on invite
    - Turning room messages into InboundEvents for the Dispatcher
    """

    def __init__(self, config: dict[str, Any], client: Optional[AsyncClient] = None) -> None:
        self.config = config
        self.encrypted = store_path(config) is not None
        self.client = client or self._build_client(config)
        if self.encrypted:
            # Loads the olm account and device keys from the store
            self.client.restore_login(config[K.USER_ID], config[K.DEVICE_ID], config[K.ACCESS_TOKEN])
        else:
            self.client.access_token = config[K.ACCESS_TOKEN]
            if config.get(K.DEVICE_ID):
                self.client.device_id = config[K.DEVICE_ID]

        self.transport = MatrixTransport(self.client)
        self.stats = StatsStore(stats_path(config))
        self.context: Optional[BotContext] = None
        self.dispatcher: Optional[Dispatcher] = None
        self._tasks: set[asyncio.Task] = set()

    @staticmethod
    def _build_client(config: dict[str, Any]) -> AsyncClient:
        """
        Create the nio client.

        Without CATBOT_STORE_PATH the bot only sees unencrypted rooms. With
        it, nio keeps its olm store there (needs the matrix-nio[e2e] extra).
        """
        path = store_path(config)
        if path is None:
            return AsyncClient(
                config[K.HOMESERVER],
                config.get(K.USER_ID) or "",
                config=AsyncClientConfig(encryption_enabled=False),
            )
        path.mkdir(parents=True, exist_ok=True)
        return AsyncClient(
            config[K.HOMESERVER],
            config[K.USER_ID],
            device_id=config[K.DEVICE_ID],
            store_path=str(path),
            config=AsyncClientConfig(encryption_enabled=True, store_sync_tokens=True),
        )

    # ─── Lifecycle ────────────────────────────────────────────────────────────

    async def setup(self) -> BotContext:
        """Resolve identity, storage and integrations. Called once."""
        self_id = await self.transport.get_self_id()
        await self.stats.initialize()

        context = BotContext(
            self_id=self_id,
            config=self.config,
            emitter=ResponseEmitter(self.transport, self.stats),
            stats=self.stats,
            help=HelpSystem(),
        )
        try:
            profile = await self.transport.get_self_profile(self_id)
            context.display_name = profile.display_name
        except Exception as e:
            logger.warning("Could not fetch own profile: %s", e)

        integrations = resolve_integrations(context)
        sampler = LivenessSampler(
            random_chance=self.config.get(K.RANDOM_CHANCE, 0.01),
            liveness_chance=self.config.get(K.LIVENESS_CHANCE, 0.01),
        )
        self.context = context
        self.dispatcher = Dispatcher(context, integrations, sampler)
        logger.info(
            "Logged in as %s (%s) with integrations: %s",
            context.display_name or context.bot_name,
            self_id,
            ", ".join(i.name for i in integrations),
        )
        return context

    async def start(self) -> None:
        """Skip the backlog, subscribe to events and sync until closed."""
        if self.dispatcher is None:
            await self.setup()

        # Initial sync so history is not re-processed
        await self.client.sync(timeout=SYNC_TIMEOUT_MS, full_state=True)

        if self.encrypted and self.client.should_upload_keys:
            resp = await self.client.keys_upload()
            if isinstance(resp, KeysUploadError):
                logger.error("Failed to upload encryption keys: %s", resp.message)

        self.client.add_event_callback(self._on_room_message, RoomMessage)
        self.client.add_event_callback(self._on_invite, InviteMemberEvent)

        logger.info("meow! catBot started!")
        await self.client.sync_forever(timeout=SYNC_TIMEOUT_MS, full_state=True)

    async def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.client.close()

    # ─── Events ───────────────────────────────────────────────────────────────

    async def _on_invite(self, room: MatrixRoom, event: InviteMemberEvent) -> None:
        if event.state_key != self.client.user_id or event.membership != "invite":
            return
        try:
            resp = await self.client.join(room.room_id)
        except Exception as e:
            logger.error("Failed to join room %s: %s", room.room_id, e)
            return
        if isinstance(resp, JoinError):
            logger.error("Failed to join room %s: %s", room.room_id, resp.message)
            return
        logger.info("Joined room %s on invite from %s", room.room_id, event.sender)

    async def _on_room_message(self, room: MatrixRoom, event: RoomMessage) -> None:
        inbound = InboundEvent.from_source(room.room_id, event.source, room.joined_count)
        if inbound is None:
            return
        self._spawn(inbound)

    def _spawn(self, inbound: InboundEvent) -> None:
        """Dispatch without blocking the sync loop; errors stay in the task."""
        dispatcher = self.dispatcher
        if dispatcher is None:
            return

        async def _safe_dispatch() -> None:
            try:
                await dispatcher.on_message(inbound)
            except Exception as e:
                logger.error("Dispatch error for event %s: %s", inbound.event_id, e, exc_info=True)

        task = asyncio.create_task(_safe_dispatch())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
