from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union
import logging
import threading

from app.core.config import settings
from app.core.exceptions import InvalidInputError
from app.schemas.audit import (
    ACTION_LABEL,
    ACTOR_LABEL,
    ENTRY_PREFIX,
    TIMESTAMP_FORMAT,
    AuditLogEntry,
    parse_sequence,
    single_line,
)
from app.schemas.statistics import AuditLogStatistics

logger = logging.getLogger(__name__)

ERROR_MARKER = "ERROR"
SUCCESS_MARKERS = ("successfully", "performed")

HEADER_RULE = "====================================="


class AuditLog:
    """
    Durable, append-only, human-readable action log backed by a single text file.

    The sequence counter is never stored on its own: it is rebuilt on construction
    by scanning the file for structured ``LOG-####`` lines. Each append opens,
    writes and closes the file. I/O failures are logged, never raised.
    """

    def __init__(self, path: Union[str, Path], actor: Optional[str] = None):
        self._path = Path(path)
        actor = single_line(actor).strip() if actor else ""
        self._actor = actor or settings.AUDIT_DEFAULT_ACTOR
        self._lock = threading.RLock()
        self._sequence = 0

        self._initialize_file()
        self._sequence = self._recover_sequence()
        logger.info(f"Audit log opened at {self._path} (last sequence: {self._sequence})")

    @property
    def path(self) -> Path:
        return self._path.resolve()

    @property
    def actor(self) -> str:
        return self._actor

    @property
    def sequence(self) -> int:
        return self._sequence

    # Startup

    def _initialize_file(self):
        if self._path.exists():
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(f"{HEADER_RULE}\n")
                f.write("  CUSTOMER REGISTRY\n")
                f.write("  AUDIT LOG FILE\n")
                f.write(f"  Created: {datetime.now().strftime(TIMESTAMP_FORMAT)}\n")
                f.write(f"{HEADER_RULE}\n")
                f.write("\n")
        except OSError as e:
            logger.error(f"Failed to initialize audit log file {self._path}: {e}")

    def _recover_sequence(self) -> int:
        highest = 0
        try:
            with open(self._path, encoding="utf-8") as f:
                for line in f:
                    if not line.startswith(ENTRY_PREFIX):
                        continue
                    sequence = parse_sequence(line)
                    if sequence is None:
                        logger.debug(f"Skipping malformed log line: {line.rstrip()}")
                        continue
                    highest = max(highest, sequence)
        except FileNotFoundError:
            return 0
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to recover audit log sequence: {e}")
        return highest

    # Writing

    def append(self, action: str, description: str) -> Optional[AuditLogEntry]:
        """Write one structured entry. Returns the entry, or None if the write failed."""
        with self._lock:
            entry = AuditLogEntry(
                sequence=self._sequence + 1,
                actor=self._actor,
                action=action,
                description=description,
            )
            try:
                with open(self._path, "a", encoding="utf-8") as f:
                    f.write(entry.render() + "\n")
                    f.flush()
            except OSError as e:
                logger.error(f"Failed to write audit log entry ({action}): {e}")
                return None

            self._sequence = entry.sequence
            return entry

    def append_error(self, action: str, error: BaseException) -> Optional[AuditLogEntry]:
        description = f"{ERROR_MARKER}: {type(error).__name__} - {error}"
        return self.append(action, description)

    def set_actor(self, new_actor: str):
        new_actor = single_line(new_actor or "").strip()
        if not new_actor:
            raise InvalidInputError("Actor must not be blank")
        with self._lock:
            # The transition is written under the outgoing actor.
            self.append("ACTOR_CHANGE", f"Actor changed from {self._actor} to {new_actor}")
            self._actor = new_actor

    def export(self, destination: Union[str, Path]) -> bool:
        destination = Path(destination)
        if self._is_own_file(destination):
            # Opening the destination for writing would truncate the log itself.
            logger.error(f"Refusing to export audit log onto itself: {destination}")
            return False
        with self._lock:
            try:
                with open(self._path, encoding="utf-8", newline="") as reader, \
                        open(destination, "w", encoding="utf-8", newline="") as writer:
                    for line in reader:
                        writer.write(line)
            except OSError as e:
                logger.error(f"Failed to export audit log to {destination}: {e}")
                return False

            self.append("EXPORT", f"Logs exported to: {destination}")
            return True

    def _is_own_file(self, destination: Path) -> bool:
        if destination.resolve() == self.path:
            return True
        try:
            return destination.exists() and destination.samefile(self._path)
        except OSError:
            return False

    # Reading

    def _read_lines(self) -> List[str]:
        try:
            with open(self._path, encoding="utf-8") as f:
                return [line.rstrip("\r\n") for line in f]
        except FileNotFoundError:
            logger.error(f"Audit log file not found: {self._path}")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read audit log: {e}")
        return []

    def read_all(self) -> List[str]:
        return [line for line in self._read_lines() if line.startswith(ENTRY_PREFIX)]

    def read_last(self, limit: int) -> List[str]:
        if limit <= 0:
            return []
        return self.read_all()[-limit:]

    def entries(self) -> List[AuditLogEntry]:
        parsed = []
        for line in self.read_all():
            entry = AuditLogEntry.parse(line)
            if entry is not None:
                parsed.append(entry)
        return parsed

    def find_by_action(self, action: str) -> List[str]:
        needle = f"{ACTION_LABEL}{action}"
        return [line for line in self.read_all() if needle in line]

    def find_by_actor(self, actor: str) -> List[str]:
        needle = f"{ACTOR_LABEL}{actor}"
        return [line for line in self.read_all() if needle in line]

    def statistics(self) -> AuditLogStatistics:
        lines = self.read_all()
        errors = 0
        successes = 0
        for line in lines:
            if ERROR_MARKER in line:
                errors += 1
            elif any(marker in line for marker in SUCCESS_MARKERS):
                successes += 1

        return AuditLogStatistics(
            total_entries=len(lines),
            successful_operations=successes,
            errors=errors,
            current_actor=self._actor,
        )
