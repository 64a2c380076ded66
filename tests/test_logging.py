import logging

from backend.logging_config import PIIRedactingFilter


def _record(msg, *args):
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)


def test_identifiers_and_phones_are_redacted():
    record = _record("Created patient %s with phone %s", "123456789012", "9876543210")

    assert PIIRedactingFilter().filter(record)
    assert record.getMessage() == "Created patient [REDACTED_AADHAAR] with phone [REDACTED_PHONE]"


def test_other_numbers_untouched():
    record = _record("Batch processed: %s new, %s updated", 12, 3)
    PIIRedactingFilter().filter(record)
    assert record.getMessage() == "Batch processed: 12 new, 3 updated"
