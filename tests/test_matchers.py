"""
Tests for output text matchers
"""

import pytest

from armguard.rules.matchers import (
    LIST_FUNCTION_PATTERN,
    find_list_function_calls,
    find_parameter_reference,
    in_expression,
    preceding_boundary,
    secure_parameter_pattern,
)


class TestPrecedingBoundary:
    """Tests for the backward '[' / '\"' scan."""

    def test_expression_boundary(self):
        text = '"[concat(\'a\', listKeys(x))]"'
        index = text.index("listKeys")
        assert preceding_boundary(text, index) == "["
        assert in_expression(text, index)

    def test_string_boundary(self):
        text = '"see listKeys(x) for details"'
        index = text.index("listKeys")
        assert preceding_boundary(text, index) == '"'
        assert not in_expression(text, index)

    def test_no_boundary(self):
        assert preceding_boundary("listKeys(x)", 0) is None
        assert not in_expression("listKeys(x)", 0)

    def test_escaped_quote_is_skipped(self):
        """A backslash-escaped quote is not a string boundary."""
        text = '"[concat(\\"x\\", parameters(\'pw\'))]"'
        index = text.index("parameters")
        assert preceding_boundary(text, index) == "["

    def test_escaped_bracket_is_skipped(self):
        text = '"note \\[ parameters(\'pw\')"'
        index = text.index("parameters")
        assert preceding_boundary(text, index) == '"'

    def test_escaped_backslash_does_not_escape(self):
        """An even run of backslashes leaves the quote unescaped."""
        text = '"[a]", "dir\\\\", parameters(\'pw\')'
        index = text.index("parameters")
        assert preceding_boundary(text, index) == '"'


class TestListFunctionCalls:
    """Tests for list*() call detection."""

    def test_top_level_list_call(self):
        text = '"[listKeys(parameters(\'acct\'),\'2017-10-01\').keys[0].value]"'
        calls = find_list_function_calls(text)
        assert len(calls) == 1
        assert calls[0].function == "listKeys"
        assert calls[0].text.startswith("[")

    def test_nested_in_concat(self):
        text = '"[concat(\'key=\', listSecrets(variables(\'id\'), \'2020-01-01\').value)]"'
        calls = find_list_function_calls(text)
        assert [c.function for c in calls] == ["listSecrets"]

    def test_inside_function_arguments(self):
        text = '"[base64(listKeys(variables(\'id\'), \'2019-06-01\').keys[0].value)]"'
        calls = find_list_function_calls(text)
        assert [c.function for c in calls] == ["listKeys"]

    def test_whitespace_before_call(self):
        text = '"[concat(\'a\',   listConnectionStrings (variables(\'id\')))]"'
        assert [c.function for c in find_list_function_calls(text)] == ["listConnectionStrings"]

    def test_every_call_is_reported(self):
        text = '"[concat(listKeys(a).k, \',\', listKeys(b).k)]"'
        calls = find_list_function_calls(text)
        assert len(calls) == 2

    def test_user_function_with_list_in_name_is_ignored(self):
        """Names like myListKeys are not preceded by a separator."""
        text = '"[concat(\'prefix \', myListKeys())]"'
        assert find_list_function_calls(text) == []

    def test_namespaced_user_function_is_ignored(self):
        text = '"[contoso.listKeys(\'x\')]"'
        assert find_list_function_calls(text) == []

    def test_plain_string_mention_is_ignored(self):
        text = '"Rotate keys with (listKeys() in the portal)"'
        assert find_list_function_calls(text) == []

    def test_bracket_start_wins_even_in_plain_string(self):
        """A match that itself opens with '[' is always accepted."""
        text = '"docs: [listKeys(x)] returns keys"'
        assert len(find_list_function_calls(text)) == 1

    def test_function_name_requires_suffix(self):
        """'list(' alone is not a list accessor."""
        assert find_list_function_calls('"[list(x)]"') == []

    @pytest.mark.parametrize("function", ["listKeys", "ListKeys", "LISTSECRETS"])
    def test_case_insensitive(self, function):
        assert LIST_FUNCTION_PATTERN.search(f"[{function}(x)")


class TestParameterReference:
    """Tests for secure parameter reference detection."""

    def test_reference_in_expression(self):
        text = '"[concat(\'x\', parameters(\'adminPassword\'))]"'
        assert find_parameter_reference(text, "adminPassword") == text.index("parameters")

    def test_reference_in_plain_string(self):
        text = '"see parameters(\'adminPassword\') in docs"'
        assert find_parameter_reference(text, "adminPassword") is None

    def test_mention_without_reference(self):
        text = '"see parameter \'adminPassword\' in docs"'
        assert find_parameter_reference(text, "adminPassword") is None

    def test_name_must_match_exactly(self):
        text = '"[parameters(\'adminPasswordHint\')]"'
        assert find_parameter_reference(text, "adminPassword") is None

    def test_case_and_whitespace_insensitive(self):
        text = '"[PARAMETERS ( \'AdminPassword\' ) ]"'
        assert find_parameter_reference(text, "adminPassword") is not None

    def test_spans_line_breaks(self):
        text = '"[concat(parameters(\n  \'adminPassword\'\n))]"'
        assert find_parameter_reference(text, "adminPassword") is not None

    def test_regex_characters_in_name_are_literal(self):
        text = '"[parameters(\'a.b\')]"'
        assert find_parameter_reference(text, "a.b") is not None
        assert find_parameter_reference('"[parameters(\'axb\')]"', "a.b") is None

    def test_only_first_reference_is_considered(self):
        text = '"see parameters(\'pw\')", "[parameters(\'pw\')]"'
        assert find_parameter_reference(text, "pw") is None

    def test_pattern_is_cached(self):
        assert secure_parameter_pattern("pw") is secure_parameter_pattern("pw")
