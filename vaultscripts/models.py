"""Data models for vault entries."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Every entry lives directly under this folder of the vault
ENTRIES_DIR = "entries"


class EntryKind(str, Enum):
    """Kinds of entries, identified by the first tag of an entry."""

    INQUIRY = "inquiry"
    INFORMAL = "informal"
    FORMAL = "formal"
    THOUGHT = "thought"
    PRACTICE = "practice"
    LOG = "log"

    @property
    def tag(self) -> str:
        return f"#{self.value}"

    @property
    def has_status(self) -> bool:
        """Whether the kind carries a development status as its second tag."""
        return self in STATUS_KINDS

    @classmethod
    def from_tags(cls, tags: Any) -> "EntryKind | None":
        """Return the kind named by the first tag, if any."""
        if not isinstance(tags, list) or not tags:
            return None
        first = tags[0]
        if not isinstance(first, str) or not first.startswith("#"):
            return None
        try:
            return cls(first[1:])
        except ValueError:
            return None


STATUS_KINDS = frozenset({EntryKind.INFORMAL, EntryKind.FORMAL, EntryKind.THOUGHT})


class Status(str, Enum):
    """Ordered development status of an entry, stored as an emoji tag."""

    SEED = "🌰"
    SPROUT = "🌱"
    SAPLING = "🌿"
    TREE = "🌲"

    @property
    def is_underdeveloped(self) -> bool:
        return self in (Status.SEED, Status.SPROUT)


class FormalType(str, Enum):
    """Types of formal entries."""

    DEFINITION = "definition"
    THEOREM = "theorem"
    LEMMA = "lemma"
    PROPOSITION = "proposition"

    @property
    def is_provable(self) -> bool:
        return self in PROVABLE_FORMAL_TYPES


FORMAL_TYPES = tuple(FormalType)
PROVABLE_FORMAL_TYPES = (FormalType.THEOREM, FormalType.LEMMA, FormalType.PROPOSITION)

# Tags other than "#informal" that mark a note as informal
INFORMAL_MARKERS = frozenset({"#informal", "ℹ️"})


# Decoded frontmatter values. Scalars stay plain Python values
# (str, bool, int, float); links and dates get their own variants.


@dataclass(frozen=True)
class Link:
    """A wiki-link value, resolved to a vault-relative note path."""

    path: str
    display: str | None = None
    subpath: str | None = None

    @property
    def name(self) -> str:
        """Note name (file stem) the link points at."""
        return self.path.rsplit("/", 1)[-1].removesuffix(".md")


@dataclass(frozen=True)
class DateStamp:
    """A date or datetime value kept in its ISO 8601 form."""

    iso: str


@dataclass
class RawEntry:
    """An entry as read from the host, before validation."""

    path: str  # vault-relative, e.g. "entries/Theorem AB-0.md"
    title: str  # filename without extension
    frontmatter: dict[str, Any] = field(default_factory=dict)

    @property
    def tags(self) -> list[Any]:
        tags = self.frontmatter.get("tags")
        return tags if isinstance(tags, list) else []

    @property
    def kind(self) -> EntryKind | None:
        return EntryKind.from_tags(self.frontmatter.get("tags"))


@dataclass
class Entry:
    """Base class for validated entries."""

    path: str
    title: str
    tags: list[str]
    frontmatter: dict[str, Any]  # the full decoded mapping, extra keys included

    kind = None

    @property
    def status(self) -> Status | None:
        if len(self.tags) > 1:
            try:
                return Status(self.tags[1])
            except ValueError:
                return None
        return None


@dataclass
class InquiryEntry(Entry):
    """An inquiry about a source or an open question."""

    parents: list[Link] = field(default_factory=list)
    source_key: str = ""
    source_link: str | Link = ""
    done: bool = False

    kind = EntryKind.INQUIRY


@dataclass
class PracticeEntry(Entry):
    """A practice entry: exercises taken from a source."""

    parents: list[Link] = field(default_factory=list)
    source_key: str = ""
    source_link: str | Link = ""
    one_or_many: str = "one"
    done: bool = False

    kind = EntryKind.PRACTICE


@dataclass
class InformalEntry(Entry):
    """An informal note, optionally carrying a formal ID."""

    aliases: list[str] = field(default_factory=list)
    parents: list[Link] = field(default_factory=list)
    formal_id: str = ""

    kind = EntryKind.INFORMAL


@dataclass
class FormalEntry(Entry):
    """A definition, theorem, lemma or proposition."""

    aliases: list[str] = field(default_factory=list)
    parents: list[Link] = field(default_factory=list)
    formal_type: FormalType = FormalType.DEFINITION
    proved: bool | None = None  # None for unprovable types

    kind = EntryKind.FORMAL


@dataclass
class ThoughtEntry(Entry):
    """A free-form thought."""

    aliases: list[str] = field(default_factory=list)
    parents: list[Link] = field(default_factory=list)

    kind = EntryKind.THOUGHT


@dataclass
class LogEntry(Entry):
    """A dated log."""

    aliases: list[str] = field(default_factory=list)
    date: DateStamp = field(default_factory=lambda: DateStamp(""))

    kind = EntryKind.LOG
