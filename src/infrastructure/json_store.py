import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class JsonFileStore:
    """
    One catalog stored as a JSON array in a single file.
    Every read loads the whole file and every write rewrites it; there is no
    locking, so concurrent read-modify-write cycles are last-writer-wins.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    async def read_all(self) -> List[Dict[str, Any]]:
        """Returns the stored records, or an empty list if the file is missing or unreadable."""
        return await asyncio.to_thread(self._read)

    async def write_all(self, records: List[Dict[str, Any]]) -> None:
        await asyncio.to_thread(self._write, records)

    def _read(self) -> List[Dict[str, Any]]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {self.path}, treating it as empty: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"{self.path} does not hold a JSON array, treating it as empty.")
            return []
        return data

    def _write(self, records: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
