"""Section framing for multi-repository command output.

Output from several repositories is concatenated into one stream, each part
framed as:

    @@HAPI_REPO <percent-encoded repo name>
    <trimmed output>
    @@HAPI_REPO_END

Repo names are percent-encoded so whitespace and other characters survive the
line-oriented framing. A stream with no markers at all is legacy output from a
single repository and splits into one unnamed section.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import quote, unquote

__all__ = [
    "REPO_SECTION_END",
    "REPO_SECTION_PREFIX",
    "RepoSection",
    "decode_repo_name",
    "encode_repo_name",
    "sections_by_repo",
    "split_sections",
    "wrap_section",
]

REPO_SECTION_PREFIX = "@@HAPI_REPO "
REPO_SECTION_END = "@@HAPI_REPO_END"

# Left unescaped in repo names: RFC 3986 unreserved marks plus !*'()
_UNRESERVED = "-_.!~*'()"


@dataclass(frozen=True, slots=True)
class RepoSection:
    """One repository's output; ``repo`` is None in legacy mode."""

    repo: str | None
    body: str

    @property
    def key(self) -> str:
        return self.repo or ""


def encode_repo_name(name: str) -> str:
    return quote(name, safe=_UNRESERVED)


def decode_repo_name(encoded: str) -> str:
    """Percent-decode a repo name; undecodable input is returned unchanged."""
    try:
        return unquote(encoded, errors="strict")
    except UnicodeDecodeError:
        return encoded


def wrap_section(repo_name: str, output: str) -> str:
    """Frame one repository's output."""
    header = f"{REPO_SECTION_PREFIX}{encode_repo_name(repo_name)}"
    body = output.strip()
    if not body:
        return f"{header}\n{REPO_SECTION_END}"
    return f"{header}\n{body}\n{REPO_SECTION_END}"


def split_sections(text: str) -> list[RepoSection]:
    """Split a framed stream back into sections, in stream order.

    A start marker closes any open section. Lines outside a section are
    dropped once a marker has been seen; if the stream has no marker at all
    the whole text is returned as one unnamed section.
    """
    sections: list[RepoSection] = []
    current_repo: str | None = None
    current_lines: list[str] = []
    has_markers = False

    def flush() -> None:
        nonlocal current_repo, current_lines
        if current_repo is None:
            return
        sections.append(RepoSection(current_repo, "\n".join(current_lines).strip()))
        current_repo = None
        current_lines = []

    for line in text.split("\n"):
        if line.startswith(REPO_SECTION_PREFIX):
            has_markers = True
            flush()
            current_repo = decode_repo_name(line[len(REPO_SECTION_PREFIX) :].strip())
            current_lines = []
            continue
        if line.strip() == REPO_SECTION_END:
            has_markers = True
            flush()
            continue
        if current_repo is not None:
            current_lines.append(line)

    if has_markers:
        flush()
        return sections

    return [RepoSection(None, text.strip())]


def sections_by_repo(sections: Iterable[RepoSection]) -> dict[str, str]:
    """Map section key ("" for legacy) to body; later duplicates win."""
    return {section.key: section.body for section in sections}
