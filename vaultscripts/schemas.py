"""Frontmatter schemas for each entry kind.

A schema is an ordered list of field rules. Validation stops at the first
failing field and reports it as a FieldError; keys that no rule names are
ignored. Every field a schema lists is required unless its rule says
otherwise.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable
from urllib.parse import urlparse

from .grammar import (
    is_valid_bibtex_key,
    is_valid_formal_id,
    is_valid_source_key,
    parse_source_key_prefix,
)
from .models import (
    FORMAL_TYPES,
    INFORMAL_MARKERS,
    DateStamp,
    Entry,
    EntryKind,
    FormalEntry,
    FormalType,
    InformalEntry,
    InquiryEntry,
    Link,
    LogEntry,
    PracticeEntry,
    RawEntry,
    Status,
    ThoughtEntry,
)
from .vault.values import is_iso_datetime

if TYPE_CHECKING:
    from .vault.repository import EntryRepository

MARKDOWN_LINK_PATTERN = re.compile(r"\[(.*)\]\((.*)\)")
STATUS_VALUES = tuple(s.value for s in Status)
MISSING = object()


@dataclass(frozen=True)
class FieldError:
    """The first field of an entry that failed validation."""

    field: str
    code: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ValidationOutcome:
    """Either a typed entry or the field error that rejected it."""

    entry: Entry | None = None
    error: FieldError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ValidationContext:
    raw: RawEntry
    repository: "EntryRepository"


Check = Callable[[Any, ValidationContext], "FieldError | None"]


@dataclass(frozen=True)
class FieldRule:
    name: str
    check: Check
    required: bool = True


def _error(name: str, code: str, message: str) -> FieldError:
    return FieldError(field=name, code=f"{name}.{code}", message=message)


def _missing(name: str) -> FieldError:
    return _error(name, "required", f"`{name}` is missing.")


# ---------------------------------------------------------------------------
# Field checks
# ---------------------------------------------------------------------------


def tags_rule(kind: EntryKind) -> FieldRule:
    """The kind tag first, then a status for kinds that carry one."""

    def check(value: Any, ctx: ValidationContext) -> FieldError | None:
        if not isinstance(value, list):
            return _error("tags", "base", "`tags` is not an array.")
        if kind.has_status:
            if len(value) != 2:
                return _error("tags", "length", "`tags` must contain two values only.")
            if value[0] != kind.tag or value[1] not in STATUS_VALUES:
                return _error(
                    "tags",
                    "only",
                    f"`tags` must contain '{kind.tag}' and a status ({', '.join(STATUS_VALUES)}).",
                )
        else:
            if len(value) != 1:
                return _error("tags", "length", "`tags` must contain one value only.")
            if value[0] != kind.tag:
                return _error("tags", "only", f"`tags` must contain '{kind.tag}'.")
        return None

    return FieldRule("tags", check)


def _check_parents(value: Any, ctx: ValidationContext) -> FieldError | None:
    if not isinstance(value, list):
        return _error("parents", "base", "`parents` is not an array.")
    for item in value:
        if not isinstance(item, Link):
            break
        linked = ctx.repository.resolve_link(item)
        tags = linked.get("tags") if linked else None
        if not isinstance(tags, list) or not INFORMAL_MARKERS.intersection(
            t for t in tags if isinstance(t, str)
        ):
            break
    else:
        return None
    return _error(
        "parents", "only", "`parents` can only have links to notes with tag #informal or ℹ️."
    )


def _check_aliases(value: Any, ctx: ValidationContext) -> FieldError | None:
    if not isinstance(value, list):
        return _error("aliases", "base", "`aliases` is not an array.")
    for alias in value:
        if not isinstance(alias, str):
            return _error("aliases", "item", "`aliases` has non-string value.")
        if not alias:
            return _error("aliases", "empty", "`aliases` has an empty string.")
    return None


def source_key_rule(allow_sourceless: bool) -> FieldRule:
    """A valid source key equal to the one in the entry's own title.

    The empty string is accepted as is.
    """
    is_valid = is_valid_source_key if allow_sourceless else is_valid_bibtex_key

    def check(value: Any, ctx: ValidationContext) -> FieldError | None:
        if not isinstance(value, str):
            return _error("source-key", "base", "`source-key` is not a string.")
        if value == "":
            return None
        if not is_valid(value):
            return _error("source-key", "invalid", "`source-key` is not a valid string.")
        title_key = parse_source_key_prefix(ctx.raw.title)
        if not title_key:
            return _error("source-key", "no-title-key", "Cannot get title source key.")
        if title_key != value:
            return _error("source-key", "mismatch", "`source-key` mismatch.")
        return None

    return FieldRule("source-key", check)


def is_http_url(url: str) -> bool:
    if any(c.isspace() for c in url):
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _check_source_link(value: Any, ctx: ValidationContext) -> FieldError | None:
    if isinstance(value, Link):
        return None
    if isinstance(value, (dict, list, DateStamp)):
        return _error("source-link", "not-link", "`source-link` is not a link object.")
    if not isinstance(value, str):
        return _error("source-link", "type", "`source-link` is not a string or link object.")
    if value == "":
        return None
    match = MARKDOWN_LINK_PATTERN.fullmatch(value)
    if match is None:
        return _error(
            "source-link", "invalid", "`source-link` is not an empty or markdown link string."
        )
    display, url = match.groups()
    if not display:
        return _error(
            "source-link", "no-display", "`source-link` is a markdown link with no display text."
        )
    if not url:
        return _error("source-link", "no-url", "`source-link` is a markdown link with no URL.")
    if not is_http_url(url):
        return _error(
            "source-link", "no-http", "`source-link` is a markdown link with a non-HTTP URL."
        )
    return None


def _check_done(value: Any, ctx: ValidationContext) -> FieldError | None:
    if not isinstance(value, bool):
        return _error("done", "base", "`done` is not a boolean.")
    return None


def _check_one_or_many(value: Any, ctx: ValidationContext) -> FieldError | None:
    if not isinstance(value, str):
        return _error("one-or-many", "base", "`one-or-many` is not a string.")
    if value not in ("one", "many"):
        return _error("one-or-many", "only", "`one-or-many` is not a valid string.")
    return None


def _check_formal_id(value: Any, ctx: ValidationContext) -> FieldError | None:
    if not isinstance(value, str):
        return _error("formal-id", "base", "`formal-id` is not a string.")
    if value and not is_valid_formal_id(value):
        return _error("formal-id", "only", "`formal-id` is not a valid string.")
    return None


def _check_type(value: Any, ctx: ValidationContext) -> FieldError | None:
    if not isinstance(value, str):
        return _error("type", "base", "`type` is not a string.")
    if value not in {t.value for t in FORMAL_TYPES}:
        return _error("type", "only", "`type` is not a valid string.")
    return None


def _check_proved(value: Any, ctx: ValidationContext) -> FieldError | None:
    # Runs after `type` passed, so the type is known to be valid
    provable = FormalType(ctx.raw.frontmatter["type"]).is_provable
    if not provable:
        if value is not MISSING:
            return _error("proved", "forbidden", "`proved` exists when it should not.")
        return None
    if value is MISSING:
        return _missing("proved")
    if not isinstance(value, bool):
        return _error("proved", "base", "`proved` is not a boolean.")
    return None


def _check_date(value: Any, ctx: ValidationContext) -> FieldError | None:
    if not isinstance(value, DateStamp) or not is_iso_datetime(value.iso):
        return _error("date", "base", "`date` is not a valid ISO 8601 string.")
    return None


PARENTS = FieldRule("parents", _check_parents)
ALIASES = FieldRule("aliases", _check_aliases)
SOURCE_LINK = FieldRule("source-link", _check_source_link)
DONE = FieldRule("done", _check_done)
ONE_OR_MANY = FieldRule("one-or-many", _check_one_or_many)
FORMAL_ID = FieldRule("formal-id", _check_formal_id, required=False)
TYPE = FieldRule("type", _check_type)
# Presence depends on `type`; the check handles the missing case itself
PROVED = FieldRule("proved", _check_proved, required=False)
DATE = FieldRule("date", _check_date)


SCHEMAS: dict[EntryKind, list[FieldRule]] = {
    EntryKind.INQUIRY: [
        tags_rule(EntryKind.INQUIRY),
        PARENTS,
        source_key_rule(allow_sourceless=False),
        SOURCE_LINK,
        DONE,
    ],
    EntryKind.PRACTICE: [
        tags_rule(EntryKind.PRACTICE),
        PARENTS,
        source_key_rule(allow_sourceless=True),
        SOURCE_LINK,
        ONE_OR_MANY,
        DONE,
    ],
    EntryKind.INFORMAL: [tags_rule(EntryKind.INFORMAL), ALIASES, PARENTS, FORMAL_ID],
    EntryKind.FORMAL: [tags_rule(EntryKind.FORMAL), ALIASES, PARENTS, TYPE, PROVED],
    EntryKind.THOUGHT: [tags_rule(EntryKind.THOUGHT), ALIASES, PARENTS],
    EntryKind.LOG: [tags_rule(EntryKind.LOG), ALIASES, DATE],
}


def check_fields(raw: RawEntry, kind: EntryKind, repository: "EntryRepository") -> FieldError | None:
    """Return the first failing field of `raw` under the schema of `kind`."""
    ctx = ValidationContext(raw=raw, repository=repository)
    for rule in SCHEMAS[kind]:
        value = raw.frontmatter.get(rule.name, MISSING)
        if value is MISSING and rule.required:
            return _missing(rule.name)
        if value is MISSING and rule is not PROVED:
            continue
        error = rule.check(value, ctx)
        if error is not None:
            return error
    return None


def validate_entry(
    raw: RawEntry,
    repository: "EntryRepository",
    kind: EntryKind | None = None,
) -> ValidationOutcome:
    """Validate an entry under the schema of `kind` (default: its first tag)."""
    kind = kind or raw.kind
    if kind is None:
        return ValidationOutcome(
            error=_error(
                "tags",
                "kind",
                "`tags` must start with one of "
                + ", ".join(k.tag for k in EntryKind)
                + ".",
            )
        )
    error = check_fields(raw, kind, repository)
    if error is not None:
        return ValidationOutcome(error=error)
    return ValidationOutcome(entry=build_entry(raw, kind))


def build_entry(raw: RawEntry, kind: EntryKind) -> Entry:
    """Build the typed record of an entry that passed validation."""
    fm = raw.frontmatter
    base = dict(path=raw.path, title=raw.title, tags=list(fm["tags"]), frontmatter=fm)
    if kind is EntryKind.INQUIRY:
        return InquiryEntry(
            **base,
            parents=fm["parents"],
            source_key=fm["source-key"],
            source_link=fm["source-link"],
            done=fm["done"],
        )
    if kind is EntryKind.PRACTICE:
        return PracticeEntry(
            **base,
            parents=fm["parents"],
            source_key=fm["source-key"],
            source_link=fm["source-link"],
            one_or_many=fm["one-or-many"],
            done=fm["done"],
        )
    if kind is EntryKind.INFORMAL:
        return InformalEntry(
            **base,
            aliases=fm["aliases"],
            parents=fm["parents"],
            formal_id=fm.get("formal-id", ""),
        )
    if kind is EntryKind.FORMAL:
        return FormalEntry(
            **base,
            aliases=fm["aliases"],
            parents=fm["parents"],
            formal_type=FormalType(fm["type"]),
            proved=fm.get("proved"),
        )
    if kind is EntryKind.THOUGHT:
        return ThoughtEntry(**base, aliases=fm["aliases"], parents=fm["parents"])
    return LogEntry(**base, aliases=fm["aliases"], date=fm["date"])
