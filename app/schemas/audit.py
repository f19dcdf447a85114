from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
import re

# Structured entry wire format. Lines without the LOG- prefix are header/decorative.
ENTRY_PREFIX = "LOG-"
TIMESTAMP_FORMAT = "%d/%m/%Y %H:%M:%S"
ACTOR_LABEL = "Usuario: "
ACTION_LABEL = "Acción: "

# Four or more digits: %04d widens past 9999, so a fixed 4-character slice would
# misread the counter. Anything else after the prefix (e.g. LOG-0037abc) is skipped.
SEQUENCE_PATTERN = re.compile(r"^LOG-(\d{4,})\b")
ENTRY_PATTERN = re.compile(
    r"^LOG-(?P<sequence>\d{4,}) \| (?P<timestamp>\d{2}/\d{2}/\d{4} \d{2}:\d{2}:\d{2}) \| "
    r"Usuario: (?P<actor>.*?) \| Acción: (?P<action>.*?) \| (?P<description>.*)$"
)
CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

def single_line(value: str) -> str:
    """Replace line breaks and other control characters so a field cannot span lines."""
    return CONTROL_CHARS.sub(" ", value)

def parse_sequence(line: str) -> Optional[int]:
    """Sequence number of a structured line, or None when the prefix is malformed."""
    match = SEQUENCE_PATTERN.match(line)
    if not match:
        return None
    return int(match.group(1))

class AuditLogEntry(BaseModel):
    sequence: int
    timestamp: datetime = Field(default_factory=datetime.now)
    actor: str
    action: str
    description: str

    @field_validator('actor', 'action', 'description', mode='before')
    @classmethod
    def flatten_fields(cls, v):
        if isinstance(v, str):
            return single_line(v)
        return v

    def render(self) -> str:
        return (
            f"{ENTRY_PREFIX}{self.sequence:04d} | {self.timestamp.strftime(TIMESTAMP_FORMAT)} | "
            f"{ACTOR_LABEL}{self.actor} | {ACTION_LABEL}{self.action} | {self.description}"
        )

    @classmethod
    def parse(cls, line: str) -> Optional["AuditLogEntry"]:
        match = ENTRY_PATTERN.match(line.rstrip("\r\n"))
        if not match:
            return None
        try:
            timestamp = datetime.strptime(match.group("timestamp"), TIMESTAMP_FORMAT)
        except ValueError:
            return None
        return cls(
            sequence=int(match.group("sequence")),
            timestamp=timestamp,
            actor=match.group("actor"),
            action=match.group("action"),
            description=match.group("description"),
        )

class ActorChangeRequest(BaseModel):
    actor: str

class ExportRequest(BaseModel):
    destination: str

class ExportResponse(BaseModel):
    destination: str
    exported: bool
