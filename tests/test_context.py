"""Tests for bracket-notation expansion and query/body merging."""

from formgate.context import RequestContext, expand_brackets, merge_sources


class TestExpandBrackets:
    def test_nested_keys(self):
        result = expand_brackets([
            ("fields[name]", "Ada"),
            ("fields[email]", "ada@example.com"),
            ("options[reCaptcha][siteKey]", "k"),
            ("options[redirect]", "https://example.com/thanks"),
        ])
        assert result == {
            "fields": {"name": "Ada", "email": "ada@example.com"},
            "options": {"reCaptcha": {"siteKey": "k"}, "redirect": "https://example.com/thanks"},
        }

    def test_plain_keys_untouched(self):
        assert expand_brackets([("g-recaptcha-response", "tok")]) == {"g-recaptcha-response": "tok"}

    def test_empty_brackets_build_list(self):
        result = expand_brackets([("fields[tags][]", "a"), ("fields[tags][]", "b")])
        assert result == {"fields": {"tags": ["a", "b"]}}

    def test_malformed_key_kept_literal(self):
        assert expand_brackets([("fields[name", "x")]) == {"fields[name": "x"}

    def test_later_value_replaces_earlier(self):
        assert expand_brackets([("a", "1"), ("a", "2")]) == {"a": "2"}


class TestMergeSources:
    def test_body_used_when_query_empty(self):
        fields, options = merge_sources({}, {"fields": {"n": 1}, "options": {"o": 2}})
        assert fields == {"n": 1}
        assert options == {"o": 2}

    def test_query_preferred_per_key(self):
        fields, options = merge_sources(
            {"options": {"redirect": "https://q.example"}},
            {"fields": {"n": "body"}, "options": {"redirect": "https://b.example", "extra": 1}},
        )
        assert fields == {"n": "body"}
        # the whole mapping comes from the query, no deep merge
        assert options == {"redirect": "https://q.example"}

    def test_empty_query_options_still_win(self):
        _, options = merge_sources({"options": {}}, {"options": {"o": 1}})
        assert options == {}

    def test_blank_query_value_falls_back_to_body(self):
        fields, _ = merge_sources({"fields": ""}, {"fields": {"n": 1}})
        assert fields == {"n": 1}

    def test_options_default_to_empty(self):
        fields, options = merge_sources({}, {})
        assert fields is None
        assert options == {}

    def test_non_mapping_options_ignored(self):
        _, options = merge_sources({"options": "oops"}, {})
        assert options == {}


class TestRequestContext:
    def test_redirect_properties(self, entry_params):
        context = RequestContext(
            params=entry_params,
            options={"redirect": "https://e.com/ok", "redirectError": "https://e.com/err"},
        )
        assert context.redirect == "https://e.com/ok"
        assert context.redirect_error == "https://e.com/err"

    def test_empty_redirects_are_none(self, entry_params):
        context = RequestContext(params=entry_params, options={"redirect": ""})
        assert context.redirect is None
        assert context.redirect_error is None
