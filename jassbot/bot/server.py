"""
Jassbot Server

Hosts the Matrix sync loop inside a FastAPI app so operators get a health
check and outcome counters alongside the bot.

Endpoints:
- GET /health: Health check
- GET /stats: Dispatch outcome counters

Pipeline (per incoming message):
1. Sync loop receives a timeline event
2. MatrixHandler turns it into a Message (plain text only)
3. Dispatcher parses, queries the doc service, formats and replies
"""

import asyncio
import logging
from collections import Counter
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from fastapi import FastAPI

from ..common.config import load_config, configure_logging, JassbotConfig
from ..common.doc_client import DocServiceClient
from ..common.errors import ConfigError, MatrixError
from .dispatcher import Dispatcher, DispatchStatus
from .handlers import MatrixHandler, Message
from .matrix_client import MatrixClient, extract_next_batch

logger = logging.getLogger("jassbot.bot.server")


# Global state
config: Optional[JassbotConfig] = None
matrix_client: Optional[MatrixClient] = None
matrix_handler: Optional[MatrixHandler] = None
dispatcher: Optional[Dispatcher] = None
sync_task: Optional["asyncio.Task[None]"] = None
outcomes: Counter = Counter()
started_at: Optional[datetime] = None
last_sync_at: Optional[datetime] = None

# Strong references to in-flight message tasks
_pending: Set["asyncio.Task[DispatchStatus]"] = set()


# =============================================================================
# Message handling
# =============================================================================

async def handle_message(
    message: Message,
    handler: MatrixHandler,
    dispatcher: Dispatcher,
) -> DispatchStatus:
    """Run one message through the Dispatcher and count the outcome"""
    logger.debug("Handling %s from %s in %s", message.event_id, message.sender, message.room_id)
    status = await dispatcher.handle(message.text, handler.reply_sender(message.room_id))
    outcomes[status.value] += 1
    return status


def _on_task_done(task: "asyncio.Task[DispatchStatus]") -> None:
    _pending.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        outcomes["error"] += 1
        logger.error("Message handler crashed", exc_info=exc)


def dispatch_sync_payload(
    payload: Dict[str, Any],
    handler: MatrixHandler,
    dispatcher: Dispatcher,
) -> List["asyncio.Task[DispatchStatus]"]:
    """Spawn one independent task per processable message in a sync payload"""
    tasks = []
    for message in handler.iter_messages(payload):
        task = asyncio.create_task(handle_message(message, handler, dispatcher))
        _pending.add(task)
        task.add_done_callback(_on_task_done)
        tasks.append(task)
    return tasks


async def sync_forever(
    client: MatrixClient,
    handler: MatrixHandler,
    dispatcher: Dispatcher,
    timeout_ms: int = 30000,
    retry_delay: float = 5.0,
) -> None:
    """
    Long-poll /sync and dispatch new messages until cancelled.

    The first sync only establishes the starting token: its events predate
    startup and are not answered.
    """
    global last_sync_at

    since: Optional[str] = None
    while since is None:
        try:
            since = extract_next_batch(await client.sync(since=None, timeout_ms=0))
        except MatrixError as e:
            logger.warning("Initial sync failed, retrying in %.0fs: %s", retry_delay, e)
            await asyncio.sleep(retry_delay)

    logger.info("Initial sync done, listening for commands")

    while True:
        try:
            payload = await client.sync(since=since, timeout_ms=timeout_ms)
        except MatrixError as e:
            logger.warning("Sync failed, retrying in %.0fs: %s", retry_delay, e)
            await asyncio.sleep(retry_delay)
            continue

        last_sync_at = datetime.now(timezone.utc)
        since = extract_next_batch(payload, fallback=since)
        dispatch_sync_payload(payload, handler, dispatcher)


# =============================================================================
# App lifecycle
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log in and start the sync loop on startup"""
    global config, matrix_client, matrix_handler, dispatcher, sync_task, started_at

    config = load_config()
    configure_logging(config.log_level)
    print("[Jassbot] Starting up...")

    if not config.matrix.password:
        raise ConfigError("Missing PASSWORD env variable")

    doc_client = DocServiceClient(
        api_base=config.doc_service.api_base,
        timeout=config.doc_service.timeout,
    )
    dispatcher = Dispatcher(doc_client, doc_base=config.doc_service.doc_base)
    print(f"[Jassbot] Doc service: {config.doc_service.api_base}")

    matrix_client = MatrixClient(
        homeserver=config.matrix.homeserver,
        user_id=config.matrix.user_id,
    )
    await matrix_client.login(config.matrix.password, device_name=config.matrix.device_name)
    print(f"[Jassbot] Logged in as {config.matrix.user_id} on {config.matrix.homeserver}")

    matrix_handler = MatrixHandler(matrix_client)
    started_at = datetime.now(timezone.utc)
    sync_task = asyncio.create_task(sync_forever(
        matrix_client,
        matrix_handler,
        dispatcher,
        timeout_ms=config.matrix.sync_timeout_ms,
        retry_delay=config.matrix.retry_delay,
    ))
    print("[Jassbot] Ready to answer commands")

    yield

    print("[Jassbot] Shutting down...")
    sync_task.cancel()
    try:
        await sync_task
    except asyncio.CancelledError:
        pass
    await matrix_client.close()


app = FastAPI(
    title="Jassbot",
    description="Matrix bot answering JASS reference questions",
    version="0.1.0",
    lifespan=lifespan,
)


# =============================================================================
# Endpoints
# =============================================================================

@app.get("/health")
async def health():
    """Health check endpoint"""
    syncing = sync_task is not None and not sync_task.done()
    return {
        "status": "healthy" if syncing else "degraded",
        "service": "jassbot",
        "logged_in": matrix_client.is_logged_in if matrix_client else False,
        "syncing": syncing,
        "last_sync_at": last_sync_at.isoformat() if last_sync_at else None,
    }


@app.get("/stats")
async def get_stats():
    """Dispatch outcome counters since startup"""
    return {
        "service": "jassbot",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "started_at": started_at.isoformat() if started_at else None,
        "in_flight": len(_pending),
        "outcomes": {status.value: outcomes[status.value] for status in DispatchStatus},
        "errors": outcomes["error"],
    }


# =============================================================================
# CLI Entry Point
# =============================================================================

def run_server():
    """Run the Jassbot server"""
    import uvicorn

    config = load_config()

    print(f"[Jassbot] Starting server on port {config.server.port}")
    uvicorn.run(
        "jassbot.bot.server:app",
        host=config.server.host,
        port=config.server.port,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
