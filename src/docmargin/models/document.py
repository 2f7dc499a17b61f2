"""Data model for entries in the document tree."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath


def title_from_filename(filename: str) -> str:
    """Derive a display title from a Markdown filename.

    ``contract-of-sale.md`` becomes ``Contract Of Sale``. Only the first
    letter of each hyphen-separated word is changed.
    """
    stem = filename.removesuffix(".md")
    return " ".join(word[:1].upper() + word[1:] for word in stem.split("-"))


@dataclass(frozen=True, slots=True)
class DocumentEntry:
    """A Markdown document under the docs root.

    Attributes:
        path: POSIX path relative to the docs root.
        title: Display title derived from the filename.
    """

    path: str
    title: str

    @classmethod
    def from_path(cls, relative: PurePosixPath) -> DocumentEntry:
        return cls(path=relative.as_posix(), title=title_from_filename(relative.name))

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "title": self.title}
