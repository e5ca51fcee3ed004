import logging
from pathlib import Path
from typing import List

from tickstore.core.config import settings

logger = logging.getLogger(__name__)


class FileSymbolSource:
    """Ordered symbols from a newline-delimited file."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path or settings.SYMBOLS_FILE)

    async def get_symbols(self) -> List[str]:
        if not self.path.exists():
            raise FileNotFoundError(f"Symbols file not found: {self.path}")
        symbols = parse_symbols(self.path.read_text(encoding="utf-8"))
        logger.info("Loaded %s symbols from %s", len(symbols), self.path)
        return symbols


def parse_symbols(text: str) -> List[str]:
    symbols = []
    for line in text.splitlines():
        symbol = line.strip()
        # Blank lines and comments
        if not symbol or symbol.startswith("#"):
            continue
        symbols.append(symbol)
    return symbols
