"""
Main entry point for the FHE Minesweeper client.
"""

import asyncio
import logging
import sys
from typing import Optional

import click
from dotenv import load_dotenv

from fhe_minesweeper.blockchain import load_artifact
from fhe_minesweeper.client import MinesweeperClient
from fhe_minesweeper.config import ClientConfig


class ColoredFormatter(logging.Formatter):
    """Colored formatter for client logs."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    # Component colors
    COMPONENT_COLORS = {
        'client': '\033[94m',           # Blue
        'session': '\033[93m',          # Yellow
        'contract_handle': '\033[95m',  # Magenta
        'board_sync': '\033[96m',       # Cyan
        'interaction': '\033[91m',      # Red
        'encryption': '\033[90m',       # Dark gray
        'transactions': '\033[92m',     # Green
        'connection': '\033[92m',       # Green
    }

    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record):
        level_color = self.COLORS.get(record.levelname, '')

        component_name = record.name.split('.')[-1] if '.' in record.name else record.name
        component_color = self.COMPONENT_COLORS.get(component_name, '')

        timestamp = self.formatTime(record)

        if level_color or component_color:
            formatted = f"{self.BOLD}{level_color}[{record.levelname}]{self.RESET} "
            formatted += f"{component_color}[{component_name}]{self.RESET} "
            formatted += f"{timestamp} - {record.getMessage()}"
        else:
            formatted = f"[{record.levelname}] [{component_name}] {timestamp} - {record.getMessage()}"

        return formatted


def setup_logging(level: str = "INFO"):
    """Setup colored logging for the client."""
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColoredFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.addHandler(console_handler)

    # Quiet noisy loggers
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('web3').setLevel(logging.WARNING)


@click.group()
def cli():
    """FHE Minesweeper client CLI."""
    pass


@cli.command()
@click.option("--attach", "attach_address", default=None, help="Attach to an existing game contract.")
@click.option("--deploy", "auto_deploy", is_flag=True, help="Connect and deploy a new board on start.")
@click.option("--log-level", default="INFO", show_default=True, help="Logging level.")
def play(attach_address: Optional[str], auto_deploy: bool, log_level: str):
    """Play Minesweeper against an encrypted on-chain board."""
    setup_logging(log_level)

    # Load environment variables
    load_dotenv()

    config = ClientConfig.from_env()
    artifact = load_artifact(config.artifact_path)

    client = MinesweeperClient(config, artifact)

    try:
        asyncio.run(client.run(
            attach_address=attach_address or config.contract_address,
            auto_deploy=auto_deploy,
        ))
    except KeyboardInterrupt:
        print("\n\033[93m[INFO] Shutting down client...\033[0m")
    except Exception as e:
        print(f"\n\033[31m[ERROR] Client crashed: {e}\033[0m")
        raise


if __name__ == "__main__":
    cli()
