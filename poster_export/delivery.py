import logging
from pathlib import Path
from typing import List, Protocol, Tuple

logger = logging.getLogger(__name__)


class DeliveryError(RuntimeError):
    """Raised when a sink refuses or fails to store a file."""


class DownloadSink(Protocol):
    def deliver(self, file_name: str, data: bytes) -> None:
        ...


class DirectorySink:
    """
    Writes each delivered file into `directory`, one file per download.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def deliver(self, file_name: str, data: bytes) -> None:
        if not file_name or Path(file_name).name != file_name:
            raise DeliveryError(f"Refusing to write outside {self.directory}: {file_name!r}")

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path = self.directory / file_name
            path.write_bytes(data)
        except OSError as exc:
            raise DeliveryError(f"Could not write {file_name}") from exc

        logger.info("Saved %s (%d bytes)", path, len(data))


class MemorySink:
    """Keeps delivered files in order; handy for embedding and tests."""

    def __init__(self) -> None:
        self.files: List[Tuple[str, bytes]] = []

    def deliver(self, file_name: str, data: bytes) -> None:
        self.files.append((file_name, data))

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.files]
