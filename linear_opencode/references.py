"""Detection and parsing of ``@opencode`` command references in free text.

A reference starts at a marker and runs up to the next marker or the end of
the text, so one comment can carry several commands back to back::

    @opencode run-tests --verbose @opencode deploy staging

yields two references, ``"@opencode run-tests --verbose "`` and
``"@opencode deploy staging"``.
"""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass, field
from typing import Iterator, Sequence

MARKER = "@opencode"
DEFAULT_ACTION = "help"

_WORD_CHAR = re.compile(r"\w")
_MARKER_RE = re.compile(re.escape(MARKER), re.IGNORECASE)


@dataclass(frozen=True)
class Position:
    start: int
    end: int


@dataclass(frozen=True)
class Reference:
    raw: str
    position: Position
    context: str

    @property
    def body(self) -> str:
        """Reference text with the leading marker removed."""
        return _strip_marker(self.raw)


@dataclass
class Command:
    raw: str
    action: str
    args: list[str] = field(default_factory=list)
    options: dict[str, str | bool] = field(default_factory=dict)
    reference: Reference | None = None

    def display(self) -> str:
        """Command text without the marker, safe to echo back into Linear."""
        parts = [f"opencode {self.action}", *self.args]
        for name, value in self.options.items():
            prefix = "--" if len(name) > 1 else "-"
            parts.append(f"{prefix}{name}" if value is True else f"{prefix}{name}={value}")
        return " ".join(parts)


def _iter_marker_starts(text: str) -> Iterator[int]:
    for match in _MARKER_RE.finditer(text):
        # "@opencoder" is not a marker
        after = match.end()
        if after >= len(text) or not _WORD_CHAR.match(text[after]):
            yield match.start()


def _strip_marker(raw: str) -> str:
    return _MARKER_RE.sub("", raw, count=1).strip()


def detect(text: str | None) -> list[Reference]:
    """Return every reference in ``text`` in left-to-right order."""
    if not text:
        return []

    starts = list(_iter_marker_starts(text))
    context = text.strip()
    references: list[Reference] = []
    for i, start in enumerate(starts):
        end = starts[i + 1] if i + 1 < len(starts) else len(text)
        references.append(
            Reference(raw=text[start:end], position=Position(start, end), context=context)
        )
    return references


def has_reference(text: str | None) -> bool:
    if not text:
        return False
    return next(_iter_marker_starts(text), None) is not None


def extract_action(reference: Reference) -> str:
    """First whitespace-delimited token after the marker, lower-cased."""
    tokens = reference.body.split()
    if not tokens or not _WORD_CHAR.search(tokens[0]):
        return DEFAULT_ACTION
    return tokens[0].lower()


def has_options(reference: Reference, names: Sequence[str]) -> bool:
    """Substring check for ``--name`` or `` -name``.

    This is an approximation: a flag-like word inside free text also counts.
    """
    search = reference.raw.lower()
    return any(
        f"--{name.lower()}" in search or f" -{name.lower()}" in search
        for name in names
    )


def _tokenize(body: str) -> list[str]:
    try:
        return shlex.split(body)
    except ValueError:
        # Unbalanced quotes
        return body.split()


def parse_command(reference: Reference) -> Command:
    action = extract_action(reference)
    tokens = _tokenize(reference.body)
    if tokens and tokens[0].lower() == action:
        tokens = tokens[1:]

    args: list[str] = []
    options: dict[str, str | bool] = {}
    for token in tokens:
        if token.startswith("--") and len(token) > 2:
            name, sep, value = token[2:].partition("=")
            options[name.lower()] = value if sep else True
        elif token.startswith("-") and len(token) > 1 and not token[1:].isdigit():
            for flag in token[1:]:
                options[flag.lower()] = True
        else:
            args.append(token)

    return Command(
        raw=reference.raw.strip(),
        action=action,
        args=args,
        options=options,
        reference=reference,
    )


def extract_commands(text: str | None) -> list[Command]:
    return [parse_command(ref) for ref in detect(text)]
