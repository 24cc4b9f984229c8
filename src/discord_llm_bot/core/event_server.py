"""FastAPI-based ingestion server for Discord interactions and relayed messages.

Routes:
- ``GET /healthz``: liveness check
- ``POST /interactions``: Discord interactions endpoint (slash commands)
- ``POST /gateway/events``: ``MESSAGE_CREATE`` dispatches forwarded by a
  gateway relay

Handlers run as background tasks after the HTTP response is sent, so Discord
gets its acknowledgement within its three second window.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import uvicorn
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from fastapi import BackgroundTasks, FastAPI, HTTPException, Request

from .config import EventServerConfig
from .logger import get_logger
from .message_parsers import INTERACTION_APPLICATION_COMMAND, INTERACTION_PING, DiscordMessageParser
from .models import ChannelMessage, CommandInteraction

logger = get_logger("event_server")

MessageHandler = Callable[[ChannelMessage], Awaitable[None]]
CommandHandler = Callable[[CommandInteraction], Awaitable[None]]

# Interaction callback types
PONG = 1
CHANNEL_MESSAGE_WITH_SOURCE = 4
DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5

EPHEMERAL_FLAG = 1 << 6


def verify_discord_signature(public_key: str, signature: str, timestamp: str, body: bytes) -> bool:
    """Check an interaction request's Ed25519 signature."""
    try:
        key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key))
        key.verify(bytes.fromhex(signature), timestamp.encode("utf-8") + body)
    except (InvalidSignature, ValueError):
        return False
    return True


class EventServer:
    """Serve Discord callbacks and forward them to the bot.

    Example:
        ```python
        server = EventServer(
            config.event_server,
            on_message=controller.handle_message,
            commands={"chat": starter.execute},
            public_key=config.discord.public_key,
        )
        await server.serve()
        ```
    """

    def __init__(
        self,
        config: EventServerConfig,
        on_message: MessageHandler,
        commands: Mapping[str, CommandHandler] | None = None,
        public_key: str | None = None,
        parser: DiscordMessageParser | None = None,
    ) -> None:
        """Initialize event server.

        Args:
            config: Event server configuration
            on_message: Handler for relayed thread messages
            commands: Slash-command handlers keyed by command name
            public_key: Application public key; signatures are checked when set
            parser: Payload parser, defaults to DiscordMessageParser
        """
        self._config = config
        self._on_message = on_message
        self._commands = dict(commands or {})
        self._public_key = public_key
        self._parser = parser or DiscordMessageParser()
        self._app = FastAPI(title="discord-llm-bot")
        self._server: uvicorn.Server | None = None

        if not public_key:
            logger.warning("No Discord public key configured; interaction signatures are not checked")
        if not config.relay_token:
            logger.warning("No relay token configured; /gateway/events will refuse all events")

        self._create_routes()

    @property
    def app(self) -> FastAPI:
        return self._app

    # ------------------------------------------------------------------
    # FastAPI setup
    # ------------------------------------------------------------------
    def _create_routes(self) -> None:
        @self._app.get("/healthz")
        async def health() -> dict[str, str]:
            return {"status": "ok"}

        @self._app.post("/interactions")
        async def receive_interaction(
            request: Request, background_tasks: BackgroundTasks
        ) -> dict[str, Any]:
            body = await request.body()
            self._verify_signature(request, body)
            payload = self._decode(body)

            if payload.get("type") == INTERACTION_PING:
                return {"type": PONG}

            if payload.get("type") != INTERACTION_APPLICATION_COMMAND:
                raise HTTPException(status_code=400, detail="Unsupported interaction type")

            interaction = self._parser.parse_interaction(payload)
            handler = self._commands.get(interaction.command_name) if interaction else None
            if interaction is None or handler is None:
                logger.warning("Unknown command received: %s", payload.get("data"))
                return {
                    "type": CHANNEL_MESSAGE_WITH_SOURCE,
                    "data": {"content": "Unknown command.", "flags": EPHEMERAL_FLAG},
                }

            logger.info("Received /%s from user %s", interaction.command_name, interaction.user_id)
            background_tasks.add_task(self._run_command, handler, interaction)
            return {"type": DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE}

        @self._app.post("/gateway/events")
        async def receive_gateway_event(
            request: Request, background_tasks: BackgroundTasks
        ) -> dict[str, str]:
            self._verify_relay_token(request)
            payload = self._decode(await request.body())

            message = self._parser.parse(payload)
            if message is None:
                return {"status": "ignored"}

            background_tasks.add_task(self._run_message, message)
            return {"status": "accepted"}

    @staticmethod
    def _decode(body: bytes) -> dict[str, Any]:
        try:
            payload = json.loads(body)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON")
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Expected a JSON object")
        return payload

    async def _run_command(self, handler: CommandHandler, interaction: CommandInteraction) -> None:
        try:
            await handler(interaction)
        except Exception as exc:
            logger.error("Command handler failure: %s", exc, exc_info=True)

    async def _run_message(self, message: ChannelMessage) -> None:
        try:
            await self._on_message(message)
        except Exception as exc:
            logger.error("Message handler failure: %s", exc, exc_info=True)

    # ------------------------------------------------------------------
    # Security helpers
    # ------------------------------------------------------------------
    def _verify_signature(self, request: Request, body: bytes) -> None:
        if not self._public_key:
            return

        signature = request.headers.get("X-Signature-Ed25519")
        timestamp = request.headers.get("X-Signature-Timestamp")
        if not signature or not timestamp:
            raise HTTPException(status_code=401, detail="Missing signature headers")

        if not verify_discord_signature(self._public_key, signature, timestamp, body):
            raise HTTPException(status_code=401, detail="Invalid request signature")

    def _verify_relay_token(self, request: Request) -> None:
        expected = self._config.relay_token
        if not expected:
            raise HTTPException(status_code=401, detail="Gateway relay disabled")

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            logger.warning("Gateway event received without Authorization header")
            raise HTTPException(status_code=401, detail="Missing Authorization header")

        token = auth_header
        if token.startswith("Bearer "):
            token = token[7:].strip()

        if token != expected:
            logger.warning("Gateway event received with invalid relay token")
            raise HTTPException(status_code=403, detail="Invalid relay token")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def serve(self) -> None:
        """Run the server until it is asked to stop."""
        config = uvicorn.Config(
            self._app,
            host=self._config.host,
            port=self._config.port,
            log_level="info",
        )
        self._server = uvicorn.Server(config)
        logger.info(
            "Event server listening on http://%s:%s", self._config.host, self._config.port
        )
        await self._server.serve()

    def stop(self) -> None:
        if self._server:
            self._server.should_exit = True
        logger.info("Event server stopped")
