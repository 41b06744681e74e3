"""
Unit Tests for the discovery orchestrator.

Scenarios mirror the webmention.rocks discovery suite, fed through
StaticSource so no network access is needed.

Test Coverage:
    - Header phase priority over markup
    - Markup fallback only when headers carry no candidate
    - No fallback when a header candidate fails to resolve
    - Empty candidates raise InvalidValueError
    - Parsable protocol conformance

Running Tests:
    $ pytest tests/test_parser.py -v
"""
import asyncio

import pytest

from webmention.errors import InvalidHeaderError, InvalidValueError, ParseError
from webmention.parser import Parsable, parse, parse_parts
from webmention.source import StaticSource


BASE = "https://example.org/a"


def discover(base_url, link_headers=None, body=""):
    return asyncio.run(parse(StaticSource(base_url, link_headers or [], body)))


class TestDiscoveryScenarios:
    """End-to-end discovery over pre-fetched parts."""

    def test_header_absolute_endpoint(self):
        headers = ['<https://example.org/a/endpoint>; rel="webmention"']
        assert discover(BASE, headers) == "https://example.org/a/endpoint"

    def test_markup_relative_endpoint(self):
        body = '<html><head><link rel="webmention" href="/a/endpoint"></head></html>'
        assert discover(BASE, [], body) == "https://example.org/a/endpoint"

    def test_header_multi_token_rel(self):
        headers = ['</a/endpoint>; rel="webmention important"']
        assert discover(BASE, headers) == "https://example.org/a/endpoint"

    def test_absolute_candidate_bypasses_base_query(self):
        headers = ['<https://example.org/b/endpoint?query=yes>; rel="webmention"']
        result = discover("https://example.org/a?x=1", headers)
        assert result == "https://example.org/b/endpoint?query=yes"

    def test_header_wins_over_body(self):
        headers = ['</from-header>; rel="webmention"']
        body = '<link rel="webmention" href="/from-body">'
        assert discover(BASE, headers, body) == "https://example.org/from-header"

    @pytest.mark.parametrize("extra_headers", [[], ['</style.css>; rel="stylesheet"']])
    def test_malformed_header_falls_through_to_markup(self, extra_headers):
        headers = ["</bad>; rel"] + extra_headers
        body = '<link rel="webmention" href="/from-body">'
        assert discover(BASE, headers, body) == "https://example.org/from-body"

    def test_malformed_header_then_valid_header(self):
        headers = ["</bad>; rel", "</good>; rel=webmention"]
        assert discover(BASE, headers) == "https://example.org/good"

    def test_last_matching_header_value_used(self):
        headers = ["</first>; rel=webmention", "</last>; rel=webmention"]
        assert discover(BASE, headers) == "https://example.org/last"

    def test_nothing_advertised(self):
        headers = ['<https://example.org/>; rel="canonical"']
        body = '<html><body><a href="/about" rel="author">me</a></body></html>'
        assert discover(BASE, headers, body) is None

    def test_empty_document(self):
        assert discover(BASE) is None

    def test_non_default_port_kept(self):
        headers = ["</webmention>; rel=webmention"]
        assert discover("http://localhost:8080/post", headers) == "http://localhost:8080/webmention"

    def test_default_port_dropped(self):
        headers = ["</webmention>; rel=webmention"]
        assert discover("https://example.org:443/post", headers) == "https://example.org/webmention"

    def test_relative_to_request_path(self):
        body = '<link rel="webmention" href="22/webmention">'
        result = discover("https://webmention.rocks/test/22", [], body)
        assert result == "https://webmention.rocks/test/22/webmention"

    def test_link_tag_without_href_skipped(self):
        body = """
        <link rel="webmention">
        <link rel="webmention" href="/test/20/webmention">
        """
        result = discover("https://webmention.rocks/test/20", [], body)
        assert result == "https://webmention.rocks/test/20/webmention"

    def test_padded_absolute_href(self):
        body = '<link rel="webmention" href=" https://example.org/wm ">'
        assert discover("https://example.org/a/b", [], body) == "https://example.org/wm"

    def test_newline_padded_relative_href(self):
        body = '<link rel="webmention" href="\n  /webmention\n">'
        assert discover("https://example.org/a/b", [], body) == "https://example.org/webmention"

    def test_internationalised_header_endpoint(self):
        headers = ["<https://例え.jp/wm>; rel=webmention"]
        assert discover(BASE, headers) == "https://xn--r8jz45g.jp/wm"

    def test_single_header_with_multiple_values(self):
        headers = ['<https://webmention.rocks/test/19/webmention/error>; rel="other", '
                   '<https://webmention.rocks/test/19/webmention>; rel="webmention"']
        result = discover("https://webmention.rocks/test/19", headers)
        assert result == "https://webmention.rocks/test/19/webmention"


class TestDiscoveryErrors:
    """Candidates that are present but unusable."""

    def test_empty_markup_candidate_is_error(self):
        with pytest.raises(InvalidValueError):
            discover(BASE, [], '<link rel="webmention" href="">')

    def test_whitespace_markup_candidate_is_error(self):
        with pytest.raises(InvalidValueError):
            discover(BASE, [], '<link rel="webmention" href=" \n ">')

    def test_empty_header_candidate_is_error(self):
        with pytest.raises(InvalidValueError):
            discover(BASE, ["<>; rel=webmention"])

    def test_header_resolution_failure_does_not_fall_back(self):
        headers = ["<#comments>; rel=webmention"]
        body = '<link rel="webmention" href="/from-body">'
        with pytest.raises(InvalidHeaderError):
            discover(BASE, headers, body)

    def test_errors_are_parse_errors(self):
        with pytest.raises(ParseError):
            discover(BASE, [], '<link rel="webmention" href="#x">')


class TestParseParts:
    """Synchronous entry point."""

    def test_returns_endpoint(self):
        assert parse_parts(BASE, ["</wm>; rel=webmention"], "") == "https://example.org/wm"

    def test_returns_none(self):
        assert parse_parts(BASE, [], "<p>nothing</p>") is None


class TestParsable:
    """Any object with into_parser_parts() can feed the parser."""

    def test_static_source_is_parsable(self):
        assert isinstance(StaticSource(BASE), Parsable)

    def test_custom_source(self):
        class FixtureSource:
            async def into_parser_parts(self):
                return BASE, [], '<a rel="webmention" href="https://hooks.example/wm">x</a>'

        assert asyncio.run(parse(FixtureSource())) == "https://hooks.example/wm"

    def test_source_errors_propagate(self):
        class FailingSource:
            async def into_parser_parts(self):
                raise ConnectionError("boom")

        with pytest.raises(ConnectionError):
            asyncio.run(parse(FailingSource()))

    def test_concurrent_discoveries_are_independent(self):
        sources = [
            StaticSource(f"https://site{i}.example/post", [f"</wm{i}>; rel=webmention"])
            for i in range(3)
        ]

        async def run_all():
            return await asyncio.gather(*(parse(source) for source in sources))

        assert asyncio.run(run_all()) == [
            "https://site0.example/wm0",
            "https://site1.example/wm1",
            "https://site2.example/wm2",
        ]
