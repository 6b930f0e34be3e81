"""Tests for Link header generation."""

from urllib.parse import parse_qs, urlparse

from cursorpage.pagination.links import create_link_header


BASE_URL = "https://api.example.com/v1/records"


def parse_links(header):
    """Map rel to parsed query parameters."""
    links = {}
    for part in header.split(", "):
        url, rel = part.split("; ")
        links[rel.split('"')[1]] = parse_qs(urlparse(url.strip("<>")).query)
    return links


class TestCreateLinkHeader:
    """Test RFC 8288 Link headers."""

    def test_no_cursors(self):
        """No cursors means no header."""
        assert create_link_header(BASE_URL, {"limit": "10"}) is None

    def test_next_only(self):
        """Only a next link is produced on the first page."""
        header = create_link_header(BASE_URL, {"limit": "10"}, next_cursor="abc")

        assert header == f'<{BASE_URL}?limit=10&cursor=abc&direction=next>; rel="next"'

    def test_next_and_prev(self):
        """Both links carry the current parameters and their direction."""
        header = create_link_header(
            BASE_URL,
            {"limit": "10", "sort_by": "title", "stage": None},
            next_cursor="n1",
            prev_cursor="p1",
        )

        links = parse_links(header)
        assert links["next"] == {"limit": ["10"], "sort_by": ["title"], "cursor": ["n1"], "direction": ["next"]}
        assert links["prev"] == {"limit": ["10"], "sort_by": ["title"], "cursor": ["p1"], "direction": ["prev"]}

    def test_stale_cursor_replaced(self):
        """The request's own cursor and direction are not repeated."""
        header = create_link_header(
            BASE_URL, {"cursor": "old", "direction": "prev"}, prev_cursor="new"
        )

        assert parse_links(header)["prev"] == {"cursor": ["new"], "direction": ["prev"]}

    def test_values_are_escaped(self):
        """Parameter values are URL-encoded."""
        header = create_link_header(BASE_URL, {"search": "a&b c"}, next_cursor="abc")

        assert "search=a%26b+c" in header
