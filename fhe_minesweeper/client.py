"""
Client wiring: user events in, state machines and board view out.
"""

import asyncio
import logging
import signal
import sys
from typing import Optional, Set

from fhe_minesweeper.blockchain import ContractArtifact, wallet_from_config
from fhe_minesweeper.board_sync import BoardSyncEngine
from fhe_minesweeper.config import ClientConfig
from fhe_minesweeper.contract_handle import ContractHandle
from fhe_minesweeper.encryption import EncryptionInstanceProvider, EncryptionParams
from fhe_minesweeper.errors import MinesweeperError, WalletUnavailable
from fhe_minesweeper.interaction import CellInteractionController
from fhe_minesweeper.scheduler import PeriodicTask
from fhe_minesweeper.session import ConnectionSession, SessionContext
from fhe_minesweeper.view import BoardView, TerminalView


logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Commands: connect | deploy | attach <address> | <row> <col> | help | quit"
)


class MinesweeperClient:
    """Main client class."""

    def __init__(
        self,
        config: ClientConfig,
        artifact: ContractArtifact,
        *,
        wallet=None,
        view: Optional[BoardView] = None,
        encryption_provider: Optional[EncryptionInstanceProvider] = None,
    ):
        self.config = config
        self.view = view or TerminalView()
        self.context = SessionContext()

        if wallet is None:
            wallet = wallet_from_config(config.rpc_url, config.private_key)

        # Initialize components
        self.session = ConnectionSession(self.context, wallet, self.view)
        self.contract_handle = ContractHandle(
            self.context,
            artifact,
            self.view,
            deploy_timeout=config.deploy_timeout_seconds,
            write_timeout=config.write_timeout_seconds,
        )
        self.sync_engine = BoardSyncEngine(self.contract_handle, self.view, config.board_size)
        self.controller = CellInteractionController(self.context, self.contract_handle, config.board_size)
        self.encryption = encryption_provider or EncryptionInstanceProvider(EncryptionParams.from_config(config))
        self.poll_timer = PeriodicTask(config.poll_interval_seconds, self.sync_engine.on_tick, name="board poll")

        self._reveal_tasks: Set[asyncio.Task] = set()
        self._command_tasks: Set[asyncio.Task] = set()
        self._encryption_task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    # Event handlers

    async def on_connect_clicked(self) -> None:
        try:
            await self.session.connect()
        except WalletUnavailable as e:
            logger.error(f"\033[31m❌ {e}\033[0m")
            self.view.set_connect_enabled(False)

    async def on_deploy_clicked(self) -> None:
        try:
            await self.contract_handle.deploy_new()
        except MinesweeperError as e:
            self.view.alert(str(e))

    async def on_attach_requested(self, address: str) -> None:
        try:
            await self.contract_handle.attach(address)
        except MinesweeperError as e:
            self.view.alert(str(e))

    def on_cell_clicked(self, row: int, col: int) -> asyncio.Task:
        """Start a reveal without waiting for it, so other cells stay clickable."""
        task = asyncio.create_task(self.controller.request_reveal(row, col))
        self._reveal_tasks.add(task)
        task.add_done_callback(self._reveal_tasks.discard)
        return task

    async def handle_command(self, line: str) -> None:
        """Dispatch one line of user input."""
        parts = line.strip().split()
        if not parts:
            return

        command = parts[0].lower()
        if command == "connect":
            await self.on_connect_clicked()
        elif command == "deploy":
            await self.on_deploy_clicked()
        elif command == "attach" and len(parts) == 2:
            await self.on_attach_requested(parts[1])
        elif command in ("quit", "exit"):
            self.request_stop()
        elif command == "help":
            self.view.notify(HELP_TEXT)
        elif len(parts) == 2 and all(part.lstrip("-").isdigit() for part in parts):
            self.on_cell_clicked(int(parts[0]), int(parts[1]))
        else:
            self.view.alert(f"Unknown command '{line.strip()}'. {HELP_TEXT}")

    # Lifecycle

    async def _init_encryption(self) -> None:
        try:
            await self.encryption.init()
        except Exception:
            logger.warning("\033[33m⚠️  Continuing without an encryption instance\033[0m")

    def _on_stdin_ready(self) -> None:
        line = sys.stdin.readline()
        if not line:
            # EOF
            self.request_stop()
            return
        task = asyncio.create_task(self.handle_command(line))
        self._command_tasks.add(task)
        task.add_done_callback(self._command_tasks.discard)

    def request_stop(self) -> None:
        logger.info("Received shutdown request")
        if self._stop_event is not None:
            self._stop_event.set()

    async def start(self) -> None:
        """Start background work and enable the connect affordance."""
        logger.info("Starting FHE Minesweeper client...")
        self._stop_event = asyncio.Event()
        self._encryption_task = asyncio.create_task(self._init_encryption())
        self.poll_timer.start()
        self.view.set_connect_enabled(True)

    async def stop(self) -> None:
        """Stop the client."""
        logger.info("Stopping FHE Minesweeper client...")
        await self.poll_timer.cancel()

        pending = list(self._reveal_tasks | self._command_tasks)
        if self._encryption_task is not None:
            pending.append(self._encryption_task)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        logger.info("Client stopped")

    async def run(self, *, attach_address: Optional[str] = None, auto_deploy: bool = False) -> None:
        """Run the interactive client until quit, EOF or a signal."""
        await self.start()

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self.request_stop)
        loop.add_reader(sys.stdin.fileno(), self._on_stdin_ready)

        try:
            if attach_address or auto_deploy:
                await self.on_connect_clicked()
                if self.context.connection.is_connected:
                    if attach_address:
                        await self.on_attach_requested(attach_address)
                    else:
                        await self.on_deploy_clicked()

            self.view.notify(HELP_TEXT)
            await self._stop_event.wait()
        finally:
            loop.remove_reader(sys.stdin.fileno())
            await self.stop()
