"""
Session log reading.

Reads line-delimited JSON event files from a session directory.
"""

import json
from pathlib import Path
from typing import Any, Iterator, List, Union

from usage_dashboard.core.events import UsageEvent, parse_usage_event

PathLike = Union[str, Path]


def read_jsonl(file_path: PathLike) -> Iterator[Any]:
    """Yield one parsed JSON value per non-empty line.

    Lines that fail to parse are dropped without complaint; a session
    file may end in a partial line if its writer crashed. Undecodable
    bytes are replaced rather than aborting the file.

    Args:
        file_path: Path to a .jsonl file

    Yields:
        Parsed JSON values in file order
    """
    with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
        for line in f:
            trimmed = line.strip()
            if not trimmed:
                continue
            try:
                yield json.loads(trimmed)
            except (ValueError, RecursionError):
                continue


def list_log_files(directory: PathLike, suffix: str = ".jsonl") -> List[Path]:
    """List log files in a session directory, sorted by name.

    Returns an empty list when the directory does not exist.
    """
    path = Path(directory)
    if not path.is_dir():
        return []
    return sorted(p for p in path.iterdir() if p.is_file() and p.name.endswith(suffix))


def read_usage_events(file_path: PathLike) -> Iterator[UsageEvent]:
    """Yield the billable usage events of one log file."""
    for record in read_jsonl(file_path):
        event = parse_usage_event(record)
        if event is not None:
            yield event
