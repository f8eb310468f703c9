"""
Include path search (search.py)

Tests DirectorySearcher ordering, generators, the search bound and the
traversal guard.
"""

import logging

import pytest

from static_simple.context import DebugTrace
from static_simple.search import (
    DirectorySearcher,
    DynamicDirectories,
    StaticDirectories,
    MAX_SEARCH,
)

from tests.conftest import write_file


@pytest.fixture
def overlays(tmp_path):
    a = tmp_path / "a"
    b = tmp_path / "b"
    write_file(a, "images/logo.jpg", "A")
    write_file(b, "images/logo.jpg", "B")
    write_file(b, "only-b.txt", "B")
    return a, b


# ============================================================================
# Static entries
# ============================================================================

class TestStaticSearch:

    def test_first_directory_wins(self, overlays):
        a, b = overlays
        found = DirectorySearcher().locate("/images/logo.jpg", [str(a), str(b)])
        assert found == (a / "images/logo.jpg").absolute()
        assert found.read_text() == "A"

    def test_order_is_respected(self, overlays):
        a, b = overlays
        found = DirectorySearcher().locate("/images/logo.jpg", [b, a])
        assert found.read_text() == "B"

    def test_falls_through_to_later_entry(self, overlays):
        a, b = overlays
        found = DirectorySearcher().locate("only-b.txt", [a, b])
        assert found == (b / "only-b.txt").absolute()

    def test_not_found(self, overlays):
        a, b = overlays
        assert DirectorySearcher().locate("/missing.txt", [a, b]) is None

    def test_directories_are_not_files(self, overlays):
        a, _ = overlays
        assert DirectorySearcher().locate("/images", [a]) is None

    def test_missing_directory_is_skipped(self, overlays, tmp_path):
        a, _ = overlays
        found = DirectorySearcher().locate("/images/logo.jpg", [tmp_path / "nope", a])
        assert found.read_text() == "A"

    def test_trailing_separator(self, overlays):
        a, _ = overlays
        found = DirectorySearcher().locate("/images/logo.jpg", [str(a) + "/"])
        assert found == (a / "images/logo.jpg").absolute()

    def test_static_directories_provider(self, overlays):
        a, b = overlays
        found = DirectorySearcher().locate("only-b.txt", [StaticDirectories((a, b))])
        assert found.read_text() == "B"

    def test_empty_entries_are_skipped(self, overlays):
        a, _ = overlays
        found = DirectorySearcher().locate("/images/logo.jpg", ["", None, a])
        assert found.read_text() == "A"

    def test_traversal_is_refused(self, overlays):
        a, b = overlays
        assert DirectorySearcher().locate("/../b/only-b.txt", [a]) is None
        assert DirectorySearcher().locate("images/../../b/only-b.txt", [a]) is None

    def test_empty_path(self, overlays):
        a, _ = overlays
        assert DirectorySearcher().locate("/", [a]) is None

    def test_trace_records_match(self, overlays):
        a, _ = overlays
        trace = DebugTrace(enabled=True)
        DirectorySearcher().locate("/images/logo.jpg", [a], trace=trace)
        assert trace.messages == [str(a / "images/logo.jpg")]

    def test_idempotent(self, overlays):
        a, b = overlays
        searcher = DirectorySearcher()
        first = searcher.locate("/images/logo.jpg", [a, b])
        second = searcher.locate("/images/logo.jpg", [a, b])
        assert first == second


# ============================================================================
# Dynamic entries
# ============================================================================

class TestDynamicSearch:

    def test_generator_receives_context(self, overlays):
        a, b = overlays
        seen = []

        def dirs_for(ctx):
            seen.append(ctx)
            return [b]

        found = DirectorySearcher().locate(
            "/images/logo.jpg", [DynamicDirectories(dirs_for), a], ctx="ctx",
        )
        assert seen == ["ctx"]
        assert found.read_text() == "B"

    def test_generator_results_splice_in_place(self, overlays, tmp_path):
        a, b = overlays
        c = tmp_path / "c"
        write_file(c, "images/logo.jpg", "C")

        found = DirectorySearcher().locate(
            "/images/logo.jpg",
            [tmp_path / "empty", DynamicDirectories(lambda ctx: [tmp_path / "none", c]), a],
        )
        assert found.read_text() == "C"

    def test_generator_may_return_providers(self, overlays):
        a, b = overlays
        inner = DynamicDirectories(lambda ctx: [b])
        found = DirectorySearcher().locate(
            "/images/logo.jpg", [DynamicDirectories(lambda ctx: [inner]), a],
        )
        assert found.read_text() == "B"

    def test_generator_error_is_logged_and_skipped(self, overlays, caplog):
        a, _ = overlays

        def broken(ctx):
            raise RuntimeError("no tenant")

        with caplog.at_level(logging.ERROR, logger="static_simple.search"):
            found = DirectorySearcher().locate(
                "/images/logo.jpg", [DynamicDirectories(broken), a],
            )

        assert found.read_text() == "A"
        assert "Static::Simple: include_path error: no tenant" in caplog.text

    def test_generator_must_return_a_sequence(self, overlays, caplog):
        a, _ = overlays
        with caplog.at_level(logging.ERROR, logger="static_simple.search"):
            found = DirectorySearcher().locate(
                "/images/logo.jpg", [DynamicDirectories(lambda ctx: str(a)), a],
            )
        assert found is not None
        assert "include_path error" in caplog.text

    def test_generator_may_return_plain_callables(self, overlays):
        a, b = overlays
        seen = []

        def tenant_dirs(ctx):
            seen.append(ctx)
            return [b]

        found = DirectorySearcher().locate(
            "/images/logo.jpg", [DynamicDirectories(lambda ctx: [tenant_dirs]), a], ctx="ctx",
        )
        assert seen == ["ctx"]
        assert found.read_text() == "B"

    def test_non_directory_entries_are_logged_and_skipped(self, overlays, caplog):
        a, _ = overlays
        with caplog.at_level(logging.ERROR, logger="static_simple.search"):
            found = DirectorySearcher().locate(
                "/images/logo.jpg", [DynamicDirectories(lambda ctx: [42]), a],
            )

        assert found.read_text() == "A"
        assert "Static::Simple: include_path error: not a directory: 42" in caplog.text

    def test_self_requeuing_generator_terminates(self, overlays):
        a, _ = overlays
        calls = []

        def forever(ctx):
            calls.append(1)
            return [provider]

        provider = DynamicDirectories(forever)
        found = DirectorySearcher().locate("/images/logo.jpg", [provider, a])

        assert found is None
        assert len(calls) == MAX_SEARCH - 1


# ============================================================================
# Search bound
# ============================================================================

class TestSearchBound:

    def test_at_most_63_entries_are_examined(self, tmp_path):
        target = tmp_path / "target"
        write_file(target, "x.txt", "x")
        misses = [tmp_path / f"miss{i}" for i in range(62)]

        assert DirectorySearcher().locate("x.txt", misses + [target]) is not None
        assert DirectorySearcher().locate("x.txt", misses + [tmp_path / "m", target]) is None

    def test_empty_entries_count_toward_bound(self, tmp_path):
        target = tmp_path / "target"
        write_file(target, "x.txt", "x")

        assert DirectorySearcher().locate("x.txt", [""] * 62 + [target]) is not None
        assert DirectorySearcher().locate("x.txt", [""] * 63 + [target]) is None

    def test_custom_bound(self, tmp_path):
        target = tmp_path / "target"
        write_file(target, "x.txt", "x")
        searcher = DirectorySearcher(max_search=3)
        assert searcher.locate("x.txt", ["", target]) is not None
        assert searcher.locate("x.txt", ["", "", target]) is None
