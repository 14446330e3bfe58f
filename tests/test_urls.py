"""Tests for URL and route joining."""

import pytest

from segbird.errors import InvalidEventError
from segbird.urls import check_event, route_path, url_join


class TestUrlJoin:

    @pytest.mark.parametrize("base", ["http://orders:3000", "http://orders:3000/"])
    @pytest.mark.parametrize("prefix", ["/segbird", "segbird", "/segbird/", "segbird/"])
    @pytest.mark.parametrize("event", ["created", "/created", "created/"])
    def test_exactly_one_slash_between_segments(self, base, prefix, event):
        assert url_join(base, prefix, event) == "http://orders:3000/segbird/created"

    def test_base_url_with_path(self):
        assert url_join("https://api.example.com/v1/", "/segbird", "order.created") == (
            "https://api.example.com/v1/segbird/order.created"
        )

    def test_collapses_duplicate_slashes_inside_parts(self):
        assert url_join("http://orders", "//seg//bird//", "created") == "http://orders/seg/bird/created"

    def test_keeps_scheme_separator(self):
        assert url_join("https://orders", "x").startswith("https://orders/")

    def test_skips_empty_parts(self):
        assert url_join("http://orders", "", "created") == "http://orders/created"
        assert url_join() == ""

    @pytest.mark.parametrize(
        "prefix, event, expected",
        [
            ("/segbird", "order.created", "/segbird/order.created"),
            ("segbird", "order.created", "/segbird/order.created"),
            ("/segbird/", "/order.created", "/segbird/order.created"),
            ("/", "ping", "/ping"),
        ],
    )
    def test_route_path_is_absolute(self, prefix, event, expected):
        assert route_path(prefix, event) == expected


class TestCheckEvent:

    @pytest.mark.parametrize("event", ["created", "order.created", "orders/created", "v1..2"])
    def test_valid(self, event):
        assert check_event(event) == event

    @pytest.mark.parametrize("event", ["", "..", "../admin", "orders/../admin", "./x", "a\\b", "created?admin=1", "created#x", None])
    def test_rejects_names_that_escape_the_route(self, event):
        with pytest.raises(InvalidEventError):
            check_event(event)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            check_event("..")
