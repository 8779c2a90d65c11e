"""Path formatting for generated commands."""

import re
from typing import Optional

DEFAULT_SOURCE_NAME = "input.mp4"
DEFAULT_OUTPUT_BASE = "output"
OUTPUT_SUFFIX = "_compressed"

_TRAILING_SEPARATORS = re.compile(r"[\\/]+$")
_PLAIN_WORD = re.compile(r"[A-Za-z0-9_.,:+-]+")


def clean_directory(directory: Optional[str]) -> str:
    """Trim whitespace and trailing separators from a working directory."""
    if not directory:
        return ""
    return _TRAILING_SEPARATORS.sub("", directory.strip())


def base_name(file_name: str) -> str:
    """File name without any leading directories."""
    return re.split(r"[\\/]", file_name)[-1]


def has_directory(file_name: str) -> bool:
    """Whether ``file_name`` already carries a directory component."""
    return "/" in file_name or "\\" in file_name


def quote(text: str) -> str:
    """Wrap in double quotes, escaping embedded quotes."""
    return '"' + text.replace('"', '\\"') + '"'


def quote_if_needed(text: str) -> str:
    """Return ``text`` as a single shell word, quoting only when it has to be."""
    if _PLAIN_WORD.fullmatch(text):
        return text
    return quote(text)


def quote_path(directory: str, file_name: str) -> str:
    """Join ``file_name`` onto ``directory`` and quote the result.

    The separator follows the directory's own style: backslash when it
    contains one, forward slash otherwise. Names that already carry a
    directory are quoted unchanged.

    Example:
        quote_path("D:\\Videos\\", "a.mkv")  # '"D:\\Videos\\a.mkv"'
        quote_path("/data", "a.mkv")         # '"/data/a.mkv"'
        quote_path("", "a.mkv")              # '"a.mkv"'
    """
    directory = clean_directory(directory)
    if not directory or has_directory(file_name):
        return quote(file_name)
    separator = "\\" if "\\" in directory else "/"
    return quote(f"{directory}{separator}{file_name}")


def output_file_name(source_name: Optional[str], extension: str) -> str:
    """``<source base name>_compressed.<extension>``."""
    if source_name:
        name = base_name(source_name)
        dot = name.rfind(".")
        stem = name[:dot] if dot > 0 else name
    else:
        stem = DEFAULT_OUTPUT_BASE
    return f"{stem}{OUTPUT_SUFFIX}.{extension}"
