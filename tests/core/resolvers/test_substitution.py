# tests/core/resolvers/test_substitution.py
from __future__ import annotations

import pytest

from switchboard.core.errors import SubstitutionNoOp
from switchboard.core.resolvers.context import ExecutionContext
from switchboard.core.resolvers.substitution import parse_structured, substitute


def context_after(*steps: tuple[str, object], original_input=None) -> ExecutionContext:
    ctx = ExecutionContext(original_input=original_input or {})
    for name, output in steps:
        ctx.record(name, output)
    return ctx


class TestStringSubstitution:
    def test_prev_injects_whole_output(self):
        ctx = context_after(("getUser", {"id": 7}))

        result = substitute("/posts?userId=$prev.id", {}, ctx)

        assert result == '/posts?userId={"id":7}'

    def test_prev_without_accessor(self):
        ctx = context_after(("getUser", {"id": 7}))

        assert substitute("/posts?user=$prev", {}, ctx) == '/posts?user={"id":7}'

    def test_prev_left_alone_before_first_step(self):
        ctx = ExecutionContext()

        assert substitute("/posts?userId=$prev.id", {}, ctx) == "/posts?userId=$prev.id"

    def test_prev_is_latest_step(self):
        ctx = context_after(("a", [1]), ("b", [2]))

        assert substitute("x=$prev", {}, ctx) == "x=[2]"

    def test_named_step(self):
        ctx = context_after(("getUser", {"id": 7}), ("getPosts", [{"id": 11}]))

        result = substitute("/comments?postId=$steps.getPosts[0].id&u=$steps.getUser", {}, ctx)

        assert result == '/comments?postId=[{"id":11}]&u={"id":7}'

    def test_named_step_does_not_match_longer_name(self):
        ctx = context_after(("getUser", 1), ("getUserPosts", 2))

        assert substitute("$steps.getUserPosts/$steps.getUser", {}, ctx) == "2/1"

    def test_input_string_is_raw(self):
        ctx = ExecutionContext()

        assert substitute("/users/$input.userId", {"userId": "abc"}, ctx) == "/users/abc"

    def test_input_non_string_is_json(self):
        ctx = ExecutionContext()
        original = {"limit": 10, "flags": {"a": True}}

        result = substitute("?limit=$input.limit&f=$input.flags", original, ctx)

        assert result == '?limit=10&f={"a":true}'

    def test_unknown_input_field_untouched(self):
        ctx = ExecutionContext()

        assert substitute("/x/$input.missing", {"other": 1}, ctx) == "/x/$input.missing"

    def test_structured_result_is_parsed(self):
        ctx = context_after(("getUser", {"id": 7, "name": "ada"}))

        assert substitute("$prev", {}, ctx) == {"id": 7, "name": "ada"}

    def test_list_result_is_parsed(self):
        ctx = context_after(("ids", [1, 2, 3]))

        assert substitute("$prev", {}, ctx) == [1, 2, 3]

    def test_unparsable_structured_text_stays_string(self):
        ctx = ExecutionContext()

        assert substitute("{$input.name", {"name": "ada"}, ctx) == "{ada"

    def test_unchanged_json_text_is_not_parsed(self):
        ctx = context_after(("a", 1))

        assert substitute('{"literal": true}', {}, ctx) == '{"literal": true}'

    def test_no_markers_is_identity(self):
        ctx = context_after(("a", {"id": 1}), original_input={"q": "x"})

        assert substitute("/plain/path?x=1", {"q": "x"}, ctx) == "/plain/path?x=1"

    def test_passes_run_in_order(self):
        # $prev is replaced before $input, so input text containing "$prev"
        # is not itself substituted
        ctx = context_after(("a", 1))

        assert substitute("$input.raw", {"raw": "$prev"}, ctx) == "$prev"


class TestStructuredSubstitution:
    def test_mapping_values_are_substituted(self):
        ctx = context_after(("getUser", {"id": 7}))
        body = {"author": "$prev", "limit": 5, "nested": {"user": "$steps.getUser"}}

        result = substitute(body, {}, ctx)

        assert result == {"author": {"id": 7}, "limit": 5, "nested": {"user": {"id": 7}}}

    def test_list_items_are_substituted(self):
        ctx = ExecutionContext()

        assert substitute(["$input.a", 1], {"a": "x"}, ctx) == ["x", 1]

    @pytest.mark.parametrize("value", [None, 42, 1.5, True, False])
    def test_scalars_unchanged(self, value):
        ctx = context_after(("a", 1))

        assert substitute(value, {"a": 1}, ctx) is value

    def test_mapping_without_markers_is_equal(self):
        ctx = context_after(("a", 1))
        value = {"k": "v", "n": [1, {"x": None}]}

        assert substitute(value, {}, ctx) == value


class TestParseStructured:
    def test_valid(self):
        assert parse_structured('{"a":1}') == {"a": 1}

    def test_invalid_raises_noop(self):
        with pytest.raises(SubstitutionNoOp):
            parse_structured("{not json")
