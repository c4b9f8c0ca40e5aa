# mehu/services/app.py
from __future__ import annotations

from typing import Optional

from mehu.common.logging import get_logger, level_from_name
from mehu.common.settings import Settings, get_settings
from mehu.database.core.main import create_db_engine, init_schema
from mehu.database.store import Store
from mehu.domain.dataclasses.reports import DispatchReport
from mehu.domain.errors import ConstraintViolation, PollerFailed, StartupError, TransportError
from mehu.services.dispatch.dispatcher import Dispatcher
from mehu.services.telegram.client import BotApiClient
from mehu.services.telegram.poller import Poller

logger = get_logger(__name__)


def create_client(cfg: Settings) -> BotApiClient:
    """Build the Bot API client and check the credentials once with getMe."""
    client = BotApiClient(
        cfg.telegram_api_key,
        base_url=cfg.telegram.base_url,
        request_timeout=cfg.telegram.request_timeout_sec,
    )
    try:
        me = client.get_me()
    except TransportError as e:
        client.close()
        raise StartupError(f"Bot API rejected the credentials: {e}") from e
    logger.info("Authenticated as @%s (id=%s)", me.username, me.id)
    return client


def create_store(cfg: Settings) -> Store:
    engine = create_db_engine(cfg.database_url, echo=cfg.db.echo)
    if cfg.db.auto_create:
        init_schema(engine)
    logger.info("Database: %s", engine.url.render_as_string(hide_password=True))
    return Store.from_engine(engine)


def run(
    cfg: Optional[Settings] = None,
    *,
    client: Optional[BotApiClient] = None,
    store: Optional[Store] = None,
) -> DispatchReport:
    """
    Start the poller thread and run the dispatcher on the calling thread
    until the event channel closes. Always stops the poller on the way out;
    raises PollerFailed when the loop died instead of stopping on request.
    """
    cfg = cfg or get_settings()
    client = client or create_client(cfg)
    store = store or create_store(cfg)

    poller = Poller.from_settings(client, cfg.telegram)
    # replies go back out through the poller
    dispatcher = Dispatcher(store, poller, cfg=cfg.dispatch)

    events = poller.start()
    try:
        report = dispatcher.run(events)
    finally:
        events.close()
        # an in-flight long poll is allowed to finish
        poller.stop(wait=True, timeout=cfg.telegram.poll_timeout_sec + cfg.telegram.request_timeout_sec)
        stats = poller.stats()
        logger.info(
            "Shutdown: %d poll(s), %d failure(s), %d update(s), %d event(s) delivered",
            stats.polls, stats.failures, stats.updates_received, stats.events_delivered,
        )

    if poller.failure is not None:
        raise PollerFailed(f"poll loop died: {poller.failure!r}") from poller.failure
    return report


def main() -> int:
    cfg = get_settings()
    get_logger("mehu", level=level_from_name(cfg.log_level))
    try:
        run(cfg)
    except StartupError as e:
        logger.error("Startup failed: %s", e)
        return 2
    except ConstraintViolation as e:
        logger.critical("Store integrity failure, stopping: %s", e)
        return 1
    except PollerFailed as e:
        logger.critical("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
