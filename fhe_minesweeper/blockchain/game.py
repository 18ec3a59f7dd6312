"""
Minesweeper contract surface.
"""

from typing import Any

from web3.contract import Contract


# Read: full board of raw cell codes
GET_BOARD = "getBoard"
# Write: reveal the cell at (row, col)
PICK_MINE = "pickMine"


def contract_function(contract: Contract, operation: str, *args: Any):
    """Bind ``operation`` on the contract to ``args``."""
    try:
        function = getattr(contract.functions, operation)
    except AttributeError:
        raise ValueError(f"Contract has no function '{operation}'") from None
    return function(*args)
