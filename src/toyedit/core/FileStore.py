# toyedit/core/FileStore.py
"""toyedit.core.FileStore
========================

Line-based persistence for toyedit documents.

Loading
-------
`FileStore.load(path)` detects the file encoding with `chardet` from a sample
of the raw bytes, then decodes the file line by line. A file that cannot be
opened (missing, a directory, no permission) is not an error for the editor:
the failure is logged and an empty list is returned, which the Document turns
into a single empty row.

Saving
------
`FileStore.save(path, lines)` writes one line per row, each terminated by a
line break, in the encoding detected at load time unless the caller names
another one. Every failure is raised as `ResourceWriteFailure` so the
caller can report it; nothing is swallowed.
"""

import codecs
import logging
import os
from typing import Iterable, Optional

import chardet

from toyedit.core.exceptions import ResourceUnavailable, ResourceWriteFailure

logger = logging.getLogger("toyedit")

CHARDET_SAMPLE_SIZE = 1024 * 20
CHARDET_MIN_CONFIDENCE = 0.75


class FileStore:
    """Reads and writes documents as sequences of text lines.

    Attributes:
        default_encoding (str): Encoding used when detection is inconclusive.
        encoding (str): Encoding of the last successfully loaded file; used
            by `save()`.
    """

    def __init__(self, default_encoding: str = "utf-8") -> None:
        self.default_encoding = default_encoding
        self.encoding = default_encoding

    def detect_encoding(self, raw_sample: bytes) -> list[tuple[str, str]]:
        """Return the (encoding, errors) attempts to make, most likely first."""
        attempts: list[tuple[str, str]] = []
        if raw_sample:
            result = chardet.detect(raw_sample)
            guess: Optional[str] = result.get("encoding")
            confidence = result.get("confidence") or 0.0
            if guess and guess.lower() == "ascii":
                # utf-8 is a superset of ascii
                guess = "utf-8"
            logger.debug(
                "Chardet detected encoding '%s' with confidence %.2f", guess, confidence
            )
            if guess and confidence >= CHARDET_MIN_CONFIDENCE:
                attempts.append((guess, "strict"))
            elif guess:
                attempts.append((guess, "replace"))

        for candidate in ((self.default_encoding, "strict"), (self.default_encoding, "replace")):
            if candidate not in attempts:
                attempts.append(candidate)
        return attempts

    def _read_lines(self, path: str) -> list[str]:
        try:
            with open(path, "rb") as f_binary:
                raw_sample = f_binary.read(CHARDET_SAMPLE_SIZE)
        except OSError as e:
            raise ResourceUnavailable(f"Cannot open '{path}' for reading: {e}") from e

        last_error: Optional[Exception] = None
        for encoding, errors in self.detect_encoding(raw_sample):
            try:
                with open(path, "r", encoding=encoding, errors=errors) as f:
                    lines = [line[:-1] if line.endswith("\n") else line for line in f]
                self.encoding = encoding
                logger.debug(
                    "Read '%s' using encoding '%s' (errors=%s)", path, encoding, errors
                )
                return lines
            except (UnicodeDecodeError, LookupError) as e:
                logger.debug("Decoding '%s' as %s failed: %s", path, encoding, e)
                last_error = e
            except OSError as e:
                raise ResourceUnavailable(f"Cannot read '{path}': {e}") from e

        raise ResourceUnavailable(f"Cannot decode '{path}': {last_error}")

    def load(self, path: str) -> list[str]:
        """Return the lines of `path`, or [] if it cannot be read."""
        self.encoding = self.default_encoding
        try:
            lines = self._read_lines(path)
        except ResourceUnavailable as e:
            logger.info("Source unavailable, starting with an empty document: %s", e)
            return []
        logger.info(
            "Loaded '%s' (%d lines, encoding %s)", path, len(lines), self.encoding
        )
        return lines

    def save(self, path: str, lines: Iterable[str], encoding: Optional[str] = None) -> int:
        """Write `lines` to `path`, one per row. Returns the number of lines written.

        `encoding` defaults to the encoding of the last load.
        """
        encoding = encoding or self.encoding
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise ResourceWriteFailure(path, f"unknown encoding {encoding!r}") from e
        if os.path.isdir(path):
            raise ResourceWriteFailure(path, "is a directory")

        count = 0
        try:
            with open(path, "w", encoding=encoding, errors="replace", newline="\n") as f:
                for line in lines:
                    f.write(line)
                    f.write("\n")
                    count += 1
        except OSError as e:
            logger.error("Failed to write file '%s': %s", path, e, exc_info=True)
            raise ResourceWriteFailure(path, e.strerror or str(e)) from e

        logger.debug("Successfully wrote %d lines to '%s'", count, path)
        return count
