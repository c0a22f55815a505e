from __future__ import annotations

from examcheck.domain import ConfigurationError


def parse_identifiers(text: str) -> list[str]:
    # One identifier per line; CRLF and LF both accepted, blank lines skipped.
    lines = text.replace("\r\n", "\n").split("\n")
    return [line for line in lines if line]


def read_identifiers(path: str) -> list[str]:
    # Read on every call so edits to the file apply without a restart.
    try:
        # newline="" keeps a lone \r inside its line; only CRLF is treated as a line break.
        with open(path, "r", encoding="utf-8", newline="") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Failed to read identifiers from {path}: {e}") from e

    identifiers = parse_identifiers(text)
    if not identifiers:
        raise ConfigurationError(f"No identifiers present in {path}. Please add at least one.")
    return identifiers
