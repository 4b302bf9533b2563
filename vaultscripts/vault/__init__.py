"""Vault access: host capabilities, frontmatter decoding and the entry repository."""

from .host import FileSystemHost, HostContext
from .parser import extract_links, parse_wikilink, rewrite_links
from .repository import EntryRepository, entry_path
from .values import decode_frontmatter, decode_value, encode_value

__all__ = [
    "FileSystemHost",
    "HostContext",
    "EntryRepository",
    "entry_path",
    "extract_links",
    "parse_wikilink",
    "rewrite_links",
    "decode_frontmatter",
    "decode_value",
    "encode_value",
]
