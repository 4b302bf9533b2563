"""Tests for the read-only report views."""

import io

import pytest
from rich.console import Console

from conftest import formal, informal, inquiry
from vaultscripts.views import build_view, render_view


def _log(date: str) -> dict:
    return {"tags": ["#log"], "aliases": [], "date": date}


def test_unresolved_inquiries(write_entry, repository) -> None:
    write_entry("Why Groups", inquiry(**{"source-link": "[[Group Theory|groups]]"}))
    write_entry("Why Rings", inquiry(done=True))
    write_entry("Broken", inquiry(done="maybe"))

    view = build_view(repository, "inquiries")
    assert view.invalid == [["Broken", "`done` is not a boolean."]]
    assert view.pending == [["Why Groups", "", "groups"]]


def test_unresolved_informals_use_status(write_entry, repository) -> None:
    write_entry("Group Theory", informal("🌱", aliases=["Groups"], **{"formal-id": "GT"}))
    write_entry("Rings", informal("🌲"))

    view = build_view(repository, "informals")
    assert view.pending == [["Group Theory (Groups)", "GT", "🌱"]]


def test_formal_views_split_by_type(write_entry, repository) -> None:
    write_entry("Group", formal("definition"))
    write_entry("Theorem $-0", formal("theorem"))
    write_entry("Theorem $-1", formal("theorem", proved=True))

    unprovable = build_view(repository, "unprovable-formals")
    assert unprovable.pending == [["Group", "definition", "🌱"]]

    provable = build_view(repository, "provable-formals")
    assert provable.pending == [["Theorem $-0", "theorem", "🌱", "no"]]


def test_logs_most_recent_first(write_entry, repository) -> None:
    write_entry("{2024.01.01T00.00.00Z} Old", _log("2024-01-01T00:00:00+00:00"))
    write_entry("{2024.03.01T00.00.00Z} New", _log("2024-03-01T00:00:00+00:00"))
    write_entry("{2024.02.01T00.00.00Z} Mid", _log("2024-02-01T00:00:00+00:00"))
    write_entry("{2024.04.01T00.00.00Z} Bad", _log("soon"))

    view = build_view(repository, "logs", limit=2)
    assert [row[0] for row in view.pending] == [
        "{2024.03.01T00.00.00Z} New",
        "{2024.02.01T00.00.00Z} Mid",
    ]
    assert [row[0] for row in view.invalid] == ["{2024.04.01T00.00.00Z} Bad"]


def test_logs_order_by_instant(write_entry, repository) -> None:
    write_entry("{2024.03.01T01.00.00+02.00} Offset", _log("2024-03-01T01:00:00+02:00"))
    write_entry("{2024.02.29T23.30.00Z} Late", _log("2024-02-29T23:30:00Z"))
    write_entry("{2024.03.01} Day", _log("2024-03-01"))

    view = build_view(repository, "logs")
    assert [row[1] for row in view.pending] == [
        "2024-03-01",
        "2024-02-29T23:30:00Z",
        "2024-03-01T01:00:00+02:00",
    ]


def test_source_contents(write_entry, repository) -> None:
    write_entry("{smith_2001} ch1", inquiry("smith_2001"))
    write_entry("{smith_2001} ch2", inquiry("smith_2001", done=True))
    write_entry("{jones_1999} ch1", inquiry("jones_1999"))

    view = build_view(repository, "source-contents", entry="{smith_2001} ch1")
    assert [row[0] for row in view.pending] == ["{smith_2001} ch1", "{smith_2001} ch2"]
    assert view.pending[1][3] == "yes"


@pytest.mark.parametrize(
    "title, message",
    [
        ("Missing", "No entry titled 'Missing'."),
        ("Group Theory", "Entry must be an `#inquiry` or `#practice`."),
    ],
)
def test_source_contents_messages(write_entry, repository, title, message) -> None:
    write_entry("Group Theory", informal())
    view = build_view(repository, "source-contents", entry=title)
    assert view.message == message


def test_descendants(write_entry, repository) -> None:
    write_entry("Group Theory", informal())
    write_entry("Rings", informal(parents=["[[Group Theory]]"]))
    write_entry("Fields", informal(parents=["[[Rings]]"]))
    write_entry("Musing", {"tags": ["#thought", "🌱"], "aliases": [], "parents": ["[[Group Theory]]"]})

    view = build_view(repository, "descendants", entry="Group Theory")
    assert view.pending == [["Rings", "Group Theory", "🌱"]]

    assert build_view(repository, "descendants", entry="Musing").message == "Entry must be `#informal`."


def test_render_view(write_entry, repository) -> None:
    write_entry("Why Groups", inquiry())
    buffer = io.StringIO()
    console = Console(file=buffer, width=120)

    render_view(build_view(repository, "inquiries"), console)
    output = buffer.getvalue()
    assert "Pending (1)" in output
    assert "Why Groups" in output

    render_view(build_view(repository, "thoughts"), console)
    assert "No unresolved thoughts found." in buffer.getvalue()


def test_view_to_dict(write_entry, repository) -> None:
    write_entry("Why Groups", inquiry())
    data = build_view(repository, "inquiries").to_dict()
    assert data["pending"] == [{"Inquiry": "Why Groups", "Source Key": "", "Source Link": ""}]
    assert data["invalid"] == []
