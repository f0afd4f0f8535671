"""Cursor pagination over Okta ``Link`` headers.

Okta returns the next page as a header of the form::

    link: <https://mycompany.okta.com/api/v1/apps?after=0oa1ab2c&limit=50>; rel="next"
"""
from __future__ import annotations
from typing import Callable, Iterator, Mapping, Optional

from .response import HeaderValue, NormalizedResponse

NEXT_SUFFIX = '>; rel="next"'


def _link_values(headers: Mapping[str, HeaderValue]) -> list[str]:
    value = headers.get("link")
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def has_next_page(headers: Mapping[str, HeaderValue]) -> bool:
    """True when one of the ``link`` header values points to a next page."""
    return any("next" in link for link in _link_values(headers))


def next_page_url(headers: Mapping[str, HeaderValue]) -> Optional[str]:
    """Extract the next page URL from the ``link`` header.

    This is Okta's fixed textual convention, not general RFC 8288 parsing.
    """
    for link in _link_values(headers):
        if "next" in link:
            return link.replace("<", "").replace(NEXT_SUFFIX, "")
    return None


def iter_pages(
    first: NormalizedResponse,
    fetch: Callable[[str], NormalizedResponse],
    max_pages: Optional[int] = None,
) -> Iterator[NormalizedResponse]:
    """Yield the first response and every following page, in order.

    Args:
        first: Response of the initial request
        fetch: Issues a GET for a page URL and returns its NormalizedResponse
        max_pages: Total pages to yield including the first (None = until
            Okta stops sending a next link)
    """
    yield first
    count = 1
    url = next_page_url(first.headers)
    while url is not None:
        if max_pages is not None and count >= max_pages:
            return
        page = fetch(url)
        count += 1
        yield page
        url = next_page_url(page.headers)


def flatten_pages(pages) -> list:
    """Concatenate the records of each page (flattened one level), in order.

    Pages with a failed status carry an error body, not records, and are skipped.
    """
    records: list = []
    for page in pages:
        if page.status.failed:
            continue
        if isinstance(page.data, list):
            records.extend(page.data)
        elif page.data is not None:
            records.append(page.data)
    return records


def paginate(
    first: NormalizedResponse,
    fetch: Callable[[str], NormalizedResponse],
    max_pages: Optional[int] = None,
) -> list:
    """Walk every page and return all records as one flat list."""
    return flatten_pages(iter_pages(first, fetch, max_pages))
