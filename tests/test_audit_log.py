import pytest
from app.core.audit_log import AuditLog
from app.core.config import settings
from app.core.exceptions import InvalidInputError
from app.schemas.audit import AuditLogEntry


def write_log(path, count, noise=True):
    lines = [
        "=====================================",
        "  CUSTOMER REGISTRY",
        "  AUDIT LOG FILE",
        "  Created: 01/02/2024 09:00:00",
        "=====================================",
        "",
    ]
    for n in range(1, count + 1):
        lines.append(f"LOG-{n:04d} | 01/02/2024 09:{n % 60:02d}:00 | Usuario: admin | Acción: ADD_CUSTOMER | Entry {n}")
        if noise and n == count // 2:
            lines.append("LOG-XXXX | corrupted line")
            lines.append("random decorative text")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_new_log_file_gets_header(tmp_path):
    path = tmp_path / "nested" / "logs.txt"
    log = AuditLog(path, "tester")

    assert path.exists()
    content = path.read_text(encoding="utf-8")
    assert content.startswith("=====")
    assert "AUDIT LOG FILE" in content
    assert log.sequence == 0
    assert log.read_all() == []
    assert log.actor == "tester"


def test_blank_actor_falls_back_to_default(tmp_path):
    log = AuditLog(tmp_path / "logs.txt", "   ")
    assert log.actor == settings.AUDIT_DEFAULT_ACTOR
    assert AuditLog(tmp_path / "other.txt").actor == settings.AUDIT_DEFAULT_ACTOR


def test_sequence_recovery_skips_noise(tmp_path):
    path = tmp_path / "logs.txt"
    write_log(path, 37)

    log = AuditLog(path, "admin")
    assert log.sequence == 37

    entry = log.append("LOGIN", "Session started")
    assert entry.sequence == 38
    assert log.read_all()[-1].startswith("LOG-0038 | ")


def test_sequence_recovery_takes_maximum(tmp_path):
    path = tmp_path / "logs.txt"
    path.write_text(
        "LOG-0005 | 01/02/2024 09:00:00 | Usuario: a | Acción: X | y\n"
        "LOG-0012 | 01/02/2024 09:00:00 | Usuario: a | Acción: X | y\n"
        "LOG-0003 | 01/02/2024 09:00:00 | Usuario: a | Acción: X | y\n",
        encoding="utf-8"
    )
    log = AuditLog(path)
    assert log.sequence == 12
    assert log.append("X", "next").sequence == 13


def test_sequence_survives_restart(tmp_path):
    path = tmp_path / "logs.txt"
    first = AuditLog(path, "admin")
    for n in range(4):
        first.append("ADD_CUSTOMER", f"Customer {n} added successfully")

    second = AuditLog(path, "admin")
    assert second.sequence == 4
    assert second.append("REMOVE_CUSTOMER", "gone").sequence == 5


def test_read_last_window(tmp_path):
    path = tmp_path / "logs.txt"
    write_log(path, 10, noise=False)
    log = AuditLog(path)

    last_three = log.read_last(3)
    assert [line[:8] for line in last_three] == ["LOG-0008", "LOG-0009", "LOG-0010"]
    assert len(log.read_last(100)) == 10
    assert log.read_last(0) == []
    assert log.read_last(-1) == []


def test_read_all_skips_header_and_noise(tmp_path):
    path = tmp_path / "logs.txt"
    write_log(path, 6)
    log = AuditLog(path)

    lines = log.read_all()
    # The malformed LOG- line is still an entry line for reads, but not parseable
    assert len(lines) == 7
    assert all(line.startswith("LOG-") for line in lines)
    assert len(log.entries()) == 6


def test_append_round_trip(tmp_path):
    log = AuditLog(tmp_path / "logs.txt", "cajero-1")
    written = log.append("DEPOSIT", "Deposit performed for C0001")

    lines = log.read_all()
    assert lines == [written.render()]

    parsed = AuditLogEntry.parse(lines[0])
    assert parsed.sequence == 1
    assert parsed.actor == "cajero-1"
    assert parsed.action == "DEPOSIT"
    assert parsed.description == "Deposit performed for C0001"
    assert parsed.timestamp == written.timestamp.replace(microsecond=0)


def test_entry_format(tmp_path):
    log = AuditLog(tmp_path / "logs.txt", "admin")
    log.append("ADD_CUSTOMER", "Customer C1 added successfully")

    line = log.read_all()[0]
    assert line.startswith("LOG-0001 | ")
    assert " | Usuario: admin | Acción: ADD_CUSTOMER | Customer C1 added successfully" in line


def test_append_error_embeds_type_and_message(tmp_path):
    log = AuditLog(tmp_path / "logs.txt")
    log.append_error("WITHDRAW", ValueError("insufficient funds"))
    assert log.read_all()[0].endswith("Acción: WITHDRAW | ERROR: ValueError - insufficient funds")


def test_find_by_action_and_actor(tmp_path):
    log = AuditLog(tmp_path / "logs.txt", "alice")
    log.append("ADD_CUSTOMER", "one")
    log.append("LOOKUP_CUSTOMER", "two")
    log.set_actor("bob")
    log.append("ADD_CUSTOMER", "three")

    added = log.find_by_action("ADD_CUSTOMER")
    assert [line[:8] for line in added] == ["LOG-0001", "LOG-0004"]

    assert len(log.find_by_actor("alice")) == 3  # includes the ACTOR_CHANGE entry
    assert [line[:8] for line in log.find_by_actor("bob")] == ["LOG-0004"]
    assert log.find_by_action("NOTHING") == []


def test_set_actor_logs_transition_before_switching(tmp_path):
    log = AuditLog(tmp_path / "logs.txt", "alice")
    log.set_actor("bob")

    line = log.read_all()[-1]
    assert "Usuario: alice | Acción: ACTOR_CHANGE | Actor changed from alice to bob" in line
    assert log.actor == "bob"

    with pytest.raises(InvalidInputError):
        log.set_actor("  ")
    assert log.actor == "bob"


def test_statistics(tmp_path):
    log = AuditLog(tmp_path / "logs.txt", "alice")
    log.append("ADD_CUSTOMER", "Customer C1 added successfully")
    log.append("LOOKUP_CUSTOMER", "Lookup performed for customer C1")
    log.append_error("ADD_CUSTOMER", KeyError("C1"))
    log.append("NOTE", "plain note")

    stats = log.statistics()
    assert stats.total_entries == 4
    assert stats.successful_operations == 2
    assert stats.errors == 1
    assert stats.current_actor == "alice"
    assert "Total Entries: 4" in stats.render()


def test_export_copies_verbatim(tmp_path):
    path = tmp_path / "logs.txt"
    write_log(path, 5)
    log = AuditLog(path)
    original = path.read_text(encoding="utf-8")

    destination = tmp_path / "export.txt"
    assert log.export(destination) is True

    assert destination.read_text(encoding="utf-8") == original
    assert f"Acción: EXPORT | Logs exported to: {destination}" in log.read_all()[-1]
    assert log.sequence == 6


def test_export_failure_returns_false(tmp_path):
    log = AuditLog(tmp_path / "logs.txt")
    log.append("X", "y")

    assert log.export(tmp_path / "missing-dir" / "export.txt") is False
    assert log.find_by_action("EXPORT") == []


def test_write_failure_is_not_fatal(tmp_path):
    # A directory cannot be opened as the log file
    log = AuditLog(tmp_path)
    assert log.sequence == 0
    assert log.append("ADD_CUSTOMER", "lost") is None
    assert log.sequence == 0
    assert log.read_all() == []


def test_line_breaks_cannot_forge_entries(tmp_path):
    path = tmp_path / "logs.txt"
    log = AuditLog(path, "teller\nLOG-5000")
    forged = "Ana\nLOG-9999 | 01/01/2024 00:00:00 | Usuario: root | Acción: FORGED"
    entry = log.append("ADD\r\nCUSTOMER", forged)

    lines = log.read_all()
    assert len(lines) == 1
    assert lines == [entry.render()]
    assert "\n" not in entry.description and "\r" not in entry.action

    reopened = AuditLog(path)
    assert reopened.sequence == 1
    assert reopened.entries()[0].description == entry.description


def test_set_actor_flattens_line_breaks(tmp_path):
    log = AuditLog(tmp_path / "logs.txt", "alice")
    log.set_actor("bob\nLOG-0777")
    log.append("NOTE", "after")

    assert log.actor == "bob LOG-0777"
    assert len(log.read_all()) == 2
    assert AuditLog(tmp_path / "logs.txt").sequence == 2
    with pytest.raises(InvalidInputError):
        log.set_actor("\n\r")


def test_suffixed_sequence_is_skipped(tmp_path):
    path = tmp_path / "logs.txt"
    path.write_text(
        "LOG-0004 | 01/02/2024 09:00:00 | Usuario: a | Acción: X | y\n"
        "LOG-0037abc | 01/02/2024 09:00:00 | Usuario: a | Acción: X | y\n",
        encoding="utf-8"
    )
    assert AuditLog(path).sequence == 4


def test_export_onto_itself_is_refused(tmp_path):
    path = tmp_path / "logs.txt"
    log = AuditLog(path)
    for n in range(3):
        log.append("ADD_CUSTOMER", f"Customer {n} added successfully")
    before = path.read_text(encoding="utf-8")

    assert log.export(path) is False
    assert log.export(tmp_path / "." / "logs.txt") is False

    assert path.read_text(encoding="utf-8") == before
    assert len(log.read_all()) == 3
    assert log.find_by_action("EXPORT") == []
