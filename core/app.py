import asyncio
import signal
import sys

from dotenv import load_dotenv

from core.context import AppContext
from core.orchestrator import RoundOrchestrator
from core.votes import VoteEventProcessor
from runtime.version import as_string
from services.discord.client import DiscordClient
from services.discord.polls import MAX_POLL_ANSWERS
from services.menu.provider import HttpMenuProvider
from shared.config.system import SystemConfig, load_system_config
from shared.logging.logger import get_logger
from shared.storage.paths import resolve_ledger_path
from shared.storage.state_store import LedgerStore

log = get_logger("core.app")


def build_runtime(config: SystemConfig) -> tuple[AppContext, RoundOrchestrator, VoteEventProcessor]:
    """Wire the core components around one explicitly owned context."""
    store = LedgerStore(resolve_ledger_path(config.storage.ledger_path))
    ctx = AppContext.from_store(store)

    menu = HttpMenuProvider(
        url=config.menu.url,
        entrants_heading=config.menu.entrants_heading,
        seconds_heading=config.menu.seconds_heading,
        oversized_label=config.menu.oversized_label,
        timeout_seconds=config.menu.timeout_seconds,
    )
    orchestrator = RoundOrchestrator(
        ctx,
        menu,
        entrants_question=config.polls.entrants_question,
        seconds_question=config.polls.seconds_question,
        max_poll_options=MAX_POLL_ANSWERS,
    )
    return ctx, orchestrator, VoteEventProcessor(ctx)


async def main(stop_event: asyncio.Event):
    # --------------------------------------------------
    # ENV + CONFIG
    # --------------------------------------------------
    load_dotenv()
    log.info("Environment variables loaded")
    log.info(f"{as_string()} booting")

    config = load_system_config()
    if not config.menu.url:
        log.warning("No menu url configured; /makepoll will report the menu as unavailable")

    # --------------------------------------------------
    # CORE SYSTEMS
    # --------------------------------------------------
    ctx, orchestrator, votes = build_runtime(config)

    # --------------------------------------------------
    # TRANSPORT
    # --------------------------------------------------
    client = DiscordClient(
        orchestrator=orchestrator,
        votes=votes,
        rankings=ctx.rankings,
        poll_duration_hours=config.polls.duration_hours,
    )
    client_task = asyncio.create_task(client.run())

    # --------------------------------------------------
    # BLOCK UNTIL SHUTDOWN SIGNAL OR CLIENT EXIT
    # --------------------------------------------------
    stop_task = asyncio.create_task(stop_event.wait())
    done, _ = await asyncio.wait(
        {client_task, stop_task},
        return_when=asyncio.FIRST_COMPLETED,
    )

    log.info("Shutdown initiated")

    try:
        await client.shutdown()
    except Exception as e:
        log.warning(f"Discord shutdown error ignored: {e}")

    stop_task.cancel()
    if client_task in done and not client_task.cancelled() and client_task.exception():
        log.error(f"Discord client exited with error: {client_task.exception()}")

    log.info("Lunch poll bot stopped")


# ----------------------------------------------------------------------
# SIGNAL HANDLING (WINDOWS-SAFE)
# ----------------------------------------------------------------------

def _install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    stop_event: asyncio.Event,
):
    """
    Windows-safe Ctrl+C handler.
    Uses signal.signal + asyncio.Event to unwind cleanly.
    """

    def _handler(signum, frame):
        try:
            loop.call_soon_threadsafe(stop_event.set)
        except Exception:
            stop_event.set()

    try:
        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
    except Exception:
        pass


# ----------------------------------------------------------------------
# ENTRYPOINT
# ----------------------------------------------------------------------

def run():
    stop_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    _install_signal_handlers(loop, stop_event)

    try:
        loop.run_until_complete(main(stop_event))

    except KeyboardInterrupt:
        log.info("KeyboardInterrupt received, shutdown initiated")
        try:
            stop_event.set()
            loop.run_until_complete(asyncio.sleep(0))
        except Exception:
            pass

    finally:
        # --------------------------------------------------
        # CANCEL REMAINING TASKS (CLEANLY)
        # --------------------------------------------------
        pending = [t for t in asyncio.all_tasks(loop) if not t.done()]
        for task in pending:
            task.cancel()

        if pending:
            try:
                loop.run_until_complete(
                    asyncio.gather(*pending, return_exceptions=True)
                )
            except Exception:
                pass

        try:
            loop.run_until_complete(loop.shutdown_asyncgens())
        except Exception:
            pass

        asyncio.set_event_loop(None)
        loop.close()


if __name__ == "__main__":
    run()
    sys.exit(0)
