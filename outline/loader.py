"""
Page loading.

Accepted inputs:
- a JSON file holding a list of {"page_number", "content"} objects, or
  {"pages": [...]} with the same objects
- a directory of page_NNNN.txt / page_NNNN.md files (number taken from the name)
"""

import json
import re
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from outline.errors import OutlineError
from outline.schemas import Page, PageStore

PAGE_FILE_PATTERN = re.compile(r"^page_(\d+)\.(txt|md)$")


class PageLoadError(OutlineError):
    pass


def load_pages(path: Union[str, Path]) -> PageStore:
    path = Path(path).expanduser()
    if not path.exists():
        raise PageLoadError(f"Pages not found: {path}")

    if path.is_dir():
        return _load_directory(path)
    return _load_json(path)


def _load_json(path: Path) -> PageStore:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PageLoadError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("pages")
    if not isinstance(data, list):
        raise PageLoadError(f"{path} must contain a list of pages or an object with a 'pages' list")

    try:
        return PageStore(Page.model_validate(item) for item in data)
    except ValidationError as e:
        raise PageLoadError(f"Invalid page entry in {path}: {e}") from e


def _load_directory(path: Path) -> PageStore:
    pages = []
    for file in sorted(path.iterdir()):
        match = PAGE_FILE_PATTERN.match(file.name)
        if not match or not file.is_file():
            continue
        number = int(match.group(1))
        if number < 1:
            continue
        try:
            content = file.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise PageLoadError(f"{file} is not valid UTF-8: {e}") from e
        pages.append(Page(page_number=number, content=content))

    if not pages:
        raise PageLoadError(f"No page_NNNN.txt or page_NNNN.md files in {path}")
    return PageStore(pages)
