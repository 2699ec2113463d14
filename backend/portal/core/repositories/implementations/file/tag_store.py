from __future__ import annotations

import asyncio
import json
import os
import re
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from portal.core.repositories.tag_store import TagStateStore
from portal.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_.-]")


class FileTagStateStore(TagStateStore):
    """Stores each snapshot as a JSON document in a directory.

    Writes go to a temporary file that replaces the target, so a crash mid-write
    never leaves a truncated snapshot behind.
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        return self._directory / f"{_UNSAFE_CHARS_RE.sub('_', key)}.json"

    async def load(self, key: str) -> dict[str, Any] | None:
        path = self._path_for(key)

        def _read() -> dict[str, Any] | None:
            if not path.exists():
                return None
            with path.open(encoding="utf-8") as fh:
                data = json.load(fh)
            if not isinstance(data, dict):
                raise ValueError(f"Snapshot at {path} is not a JSON object")
            return data

        return await self._run(_read)

    async def save(self, key: str, state: dict[str, Any]) -> None:
        path = self._path_for(key)

        def _write() -> None:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(state, fh, ensure_ascii=False, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

        await self._run(_write)
        logger.debug("Saved tag snapshot %s (%d tags)", path.name, len(state))

    async def ping(self) -> bool:
        return await self._run(lambda: self._directory.exists() or self._directory.parent.exists())

    async def _run(self, func: Callable[[], Any]) -> Any:
        return await asyncio.to_thread(func)
