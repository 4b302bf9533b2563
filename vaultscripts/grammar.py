"""Title, source-key and formal-ID grammars.

Each grammar is assembled from small named patterns (word, phrase, trail
segment, source key) so that every rule can be exercised on its own. The
public predicates always match the whole string.

Title formats:
- OPEN_TITLE:   free text made of words, e.g. "O'Brien's Theorem"
- PATH_TITLE:   "{source-key} trail", e.g. "{smith_2001} ch1 > sec2.3 > Proof sketch"
- FORMAL_AUTO:  "{Type} {code-class}-{count}", e.g. "Theorem AB.CD-0"
- LOG_TITLE:    "{YYYY.MM.DDTHH.MM.SSZ} open title"
"""

import re
from datetime import datetime, timezone

from .models import FORMAL_TYPES, FormalType

SOURCELESS_KEY = "$"
NULL_CODE_CLASS = "$"

# Character classes (Unicode aware)
LETTER = r"[^\W\d_]"
ALNUM = r"[^\W_]"
HYPHEN = "[-–]"


def word_pattern() -> str:
    """A word: letter/digit runs with joins, contractions and hyphenation."""
    run = (
        rf"\.?{ALNUM}+(?:[./\\]{ALNUM}+)*"
        rf"(?:(?:'{LETTER}+){{1,2}}|\.)?"
    )
    contraction = rf"'{LETTER}+(?:'{LETTER}+){{0,2}}"
    initial = rf"{LETTER}'"
    affix = f"(?:{run}|{contraction}|{initial})"
    center = rf"(?:{run}|{contraction}|{initial}|'{LETTER}')"
    return f"{affix}(?:(?:{HYPHEN}{center})*{HYPHEN}{affix})?"


def phrase_pattern() -> str:
    """A phrase: a word, or words enclosed in quotes, parentheses or angle brackets."""
    word = word_pattern()
    quoted_item = rf"(?:{word}|\({word}\))"
    paren_item = rf'(?:{word}|"{word}")'
    quoted = f'"{quoted_item}(?: {quoted_item})*"'
    parenthesized = rf"\({paren_item}(?: {paren_item})*\)"
    angled = f"<{word}(?: {word})*>"
    return f"(?:{word}|{quoted}|{parenthesized}|{angled})"


def open_title_pattern() -> str:
    phrase = phrase_pattern()
    return f"{phrase}(?: {phrase})*"


def bibtex_key_pattern() -> str:
    """author[_ShortTitle]_year, year being four digits or N.D."""
    author = r"[a-z]+"
    short_title = r"[A-Z0-9][A-Za-z0-9]*"
    year = r"(?:[0-9]{4}|N\.D\.)"
    return f"{author}(?:_{short_title})?_{year}"


def source_key_pattern() -> str:
    return rf"(?:{bibtex_key_pattern()}|{re.escape(SOURCELESS_KEY)})"


def trail_segment_pattern() -> str:
    """A short section code such as "ch", "sec2" or "ex12.3.1"."""
    return r"[a-z]{2,3}(?:[0-9]{1,4}(?:\.[0-9]{1,4})*)?"


def source_trail_pattern() -> str:
    segment = trail_segment_pattern()
    heading = open_title_pattern()
    return f"(?:{segment}(?: > {segment})*(?: > {heading})?|{heading})"


def formal_id_pattern() -> str:
    return r"[A-Z]{2,4}"


def code_class_pattern() -> str:
    fid = formal_id_pattern()
    return rf"(?:{re.escape(NULL_CODE_CLASS)}|{fid}(?:\.{fid})*)"


OPEN_TITLE_REGEX = re.compile(open_title_pattern(), re.IGNORECASE)
RESERVED_TITLE_REGEX = re.compile(r"untitled(?: [0-9]+)?", re.IGNORECASE)
BIBTEX_KEY_REGEX = re.compile(bibtex_key_pattern())
SOURCE_KEY_REGEX = re.compile(source_key_pattern())
SOURCE_TRAIL_REGEX = re.compile(source_trail_pattern())
PATH_TITLE_REGEX = re.compile(rf"\{{{source_key_pattern()}\}}(?: {source_trail_pattern()})?")
SOURCE_KEY_PREFIX_REGEX = re.compile(rf"\{{({source_key_pattern()})\}}(?= |$)")
FORMAL_ID_REGEX = re.compile(formal_id_pattern())
CODE_CLASS_REGEX = re.compile(code_class_pattern())
FORMAL_AUTO_TITLE_REGEX = re.compile(
    rf"({'|'.join(t.value.capitalize() for t in FORMAL_TYPES)}) "
    rf"({code_class_pattern()})-(0|[1-9][0-9]*)"
)
LOG_DATE_CODE_FORMAT = "%Y.%m.%dT%H.%M.%SZ"
LOG_TITLE_REGEX = re.compile(
    rf"\{{[0-9]{{4}}\.[0-9]{{2}}\.[0-9]{{2}}T[0-9]{{2}}\.[0-9]{{2}}\.[0-9]{{2}}Z\}} "
    rf"({open_title_pattern()})"
)


def _matches(regex: re.Pattern, value) -> bool:
    return isinstance(value, str) and regex.fullmatch(value) is not None


def is_reserved_title(title) -> bool:
    """Check for the titles new notes receive by default ("Untitled", "Untitled 2", ...)."""
    return _matches(RESERVED_TITLE_REGEX, title)


def is_valid_bibtex_key(value) -> bool:
    return _matches(BIBTEX_KEY_REGEX, value)


def is_valid_source_key(value) -> bool:
    """Check for a BibTeX key or the sourceless key."""
    return _matches(SOURCE_KEY_REGEX, value)


def is_valid_source_trail(value) -> bool:
    return _matches(SOURCE_TRAIL_REGEX, value)


def is_valid_open_title(title) -> bool:
    return not is_reserved_title(title) and _matches(OPEN_TITLE_REGEX, title)


def is_valid_path_title(title) -> bool:
    return not is_reserved_title(title) and _matches(PATH_TITLE_REGEX, title)


def is_valid_log_title(title) -> bool:
    match = LOG_TITLE_REGEX.fullmatch(title) if isinstance(title, str) else None
    return match is not None and not is_reserved_title(match.group(1))


def is_valid_formal_id(value) -> bool:
    return _matches(FORMAL_ID_REGEX, value)


def is_formal_auto_title(title) -> bool:
    return _matches(FORMAL_AUTO_TITLE_REGEX, title)


def parse_formal_auto_title(title) -> tuple[FormalType, str, int] | None:
    """Split an auto-title into (type, code class, count)."""
    if not isinstance(title, str):
        return None
    match = FORMAL_AUTO_TITLE_REGEX.fullmatch(title)
    if match is None:
        return None
    type_name, code_class, count = match.groups()
    return FormalType(type_name.lower()), code_class, int(count)


def format_formal_auto_title(formal_type: FormalType | str, code_class: str, count: int) -> str:
    type_name = formal_type.value if isinstance(formal_type, FormalType) else formal_type
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    return f"{capitalize(type_name)} {code_class}-{count}"


def parse_source_key_prefix(title) -> str:
    """Return the source key in braces at the start of `title`, or ""."""
    if not isinstance(title, str):
        return ""
    match = SOURCE_KEY_PREFIX_REGEX.match(title)
    return match.group(1) if match else ""


def format_path_title(source_key: str, source_trail: str = "") -> str:
    return f"{{{source_key}}} {source_trail}" if source_trail else f"{{{source_key}}}"


def format_log_title(title: str, when: datetime) -> str:
    """Prefix `title` with the UTC date code of `when`."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    code = when.astimezone(timezone.utc).strftime(LOG_DATE_CODE_FORMAT)
    return f"{{{code}}} {title}"


def capitalize(value: str) -> str:
    """Uppercase the first character only ("theorem" -> "Theorem")."""
    if not isinstance(value, str):
        raise TypeError("capitalize must be called on a string")
    return value[:1].upper() + value[1:]


def to_filename(title: str) -> str:
    """Replace path separators, which cannot appear in a note name."""
    return re.sub(r"[/\\]", "-", title)
