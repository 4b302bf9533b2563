"""Tests for wiki-link parsing and frontmatter value decoding."""

from datetime import date, datetime, timezone

from vaultscripts.models import DateStamp, Link
from vaultscripts.vault.parser import extract_links, links_to, parse_wikilink, rewrite_links
from vaultscripts.vault.values import decode_frontmatter, decode_value, encode_value, is_iso_datetime


def test_extract_links_dedupes_and_lowercases() -> None:
    content = "See [[Group Theory]], [[group theory|groups]] and [[Rings#Ideals]]."
    assert extract_links(content) == ["group theory", "rings"]


def test_parse_wikilink() -> None:
    assert parse_wikilink("[[A#Sec|shown]]") == ("A", "Sec", "shown")
    assert parse_wikilink("[[A]]") == ("A", None, None)
    assert parse_wikilink("[[A]] and [[B]]") is None
    assert parse_wikilink("plain") is None


def test_links_to_is_case_insensitive() -> None:
    assert links_to("x [[group theory]]", "entries/Group Theory.md")
    assert not links_to("x [[Group Theory]]", "entries/Rings.md")


def test_rewrite_links_keeps_section_and_display() -> None:
    content = "see [[Theorem AB-2|the theorem]] and [[Theorem AB-2#Proof]] but not [[Theorem AB-20]]"
    updated = rewrite_links(content, "entries/Theorem AB-2.md", "entries/Theorem AB-1.md")
    assert updated == (
        "see [[Theorem AB-1|the theorem]] and [[Theorem AB-1#Proof]] but not [[Theorem AB-20]]"
    )


def test_rewrite_links_keeps_folder_form() -> None:
    content = "[[entries/Old]]"
    assert rewrite_links(content, "entries/Old.md", "entries/New.md") == "[[entries/New]]"


def test_decode_links() -> None:
    assert decode_value("[[Group Theory]]") == Link(path="entries/Group Theory.md")
    assert decode_value("[[notes/Other|shown]]") == Link(path="notes/Other.md", display="shown")
    assert decode_value("[[A#Sec]]") == Link(path="entries/A.md", subpath="Sec")
    assert decode_value("[[A]] and [[B]]") == "[[A]] and [[B]]"


def test_decode_dates() -> None:
    assert decode_value(date(2024, 1, 2)) == DateStamp("2024-01-02")
    stamp = decode_value(datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
    assert stamp == DateStamp("2024-01-02T03:04:05+00:00")
    assert decode_value("2024-01-02T03:04:05Z") == DateStamp("2024-01-02T03:04:05Z")
    assert decode_value("2024-02-30") == "2024-02-30"


def test_decode_scalars_and_lists() -> None:
    assert decode_value("hello") == "hello"
    assert decode_value(True) is True
    assert decode_value(3) == 3
    assert decode_value(["[[A]]", "b"]) == [Link(path="entries/A.md"), "b"]


def test_decode_frontmatter_handles_empty() -> None:
    assert decode_frontmatter(None) == {}
    assert decode_frontmatter({"parents": ["[[A]]"]}) == {"parents": [Link(path="entries/A.md")]}


def test_encode_value_inverts_decode() -> None:
    assert encode_value(Link(path="entries/Group Theory.md")) == "[[Group Theory]]"
    assert encode_value(Link(path="notes/Other.md", display="x")) == "[[notes/Other|x]]"
    assert encode_value(Link(path="entries/A.md", subpath="Sec")) == "[[A#Sec]]"
    assert encode_value(DateStamp("2024-01-02")) == "2024-01-02"


def test_is_iso_datetime() -> None:
    assert is_iso_datetime("2024-01-02")
    assert is_iso_datetime("2024-01-02T03:04:05+00:00")
    assert is_iso_datetime("2024-01-02T03:04:05Z")
    assert not is_iso_datetime("2024-02-30")
    assert not is_iso_datetime("yesterday")
