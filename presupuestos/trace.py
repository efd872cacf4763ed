"""Sinks for intermediate pipeline artifacts.

The payload builder hands every stage's output to a sink. The default
sink does nothing; :class:`DirectoryTraceSink` dumps JSON files for
debugging. Write failures are logged and never reach the caller.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

log = logging.getLogger(__name__)


class TraceSink(Protocol):
    def write(self, name: str, data: Any) -> None: ...


class NullTraceSink:
    def write(self, name: str, data: Any) -> None:
        pass


class MemoryTraceSink:
    """Keep artifacts in a dict (handy in tests and notebooks)."""

    def __init__(self) -> None:
        self.records: dict[str, Any] = {}

    def write(self, name: str, data: Any) -> None:
        self.records[name] = data


class DirectoryTraceSink:
    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def write(self, name: str, data: Any) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path = self.directory / name
            path.write_text(
                json.dumps(data, indent=2, ensure_ascii=False, default=str),
                encoding="utf-8",
            )
            log.debug("Saved %s", path)
        except (OSError, TypeError, ValueError) as exc:
            log.error("Could not save %s in %s: %s", name, self.directory, exc)


def make_sink(directory: Path | str | None) -> TraceSink:
    return DirectoryTraceSink(directory) if directory else NullTraceSink()
