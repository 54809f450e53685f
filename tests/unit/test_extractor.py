# tests/unit/test_extractor.py - Parameter extraction test suite

import pytest

from sqliradar.extractor import ParameterExtractor, extract_title
from sqliradar.models import ParameterContext


@pytest.mark.unit
class TestParameterExtractor:
    """Unit tests for ParameterExtractor."""

    def test_post_login_form(self, login_form_html):
        """Both fields of a POST form share the resolved action and the full field set."""
        params = ParameterExtractor().extract("http://ex.test/account/", login_form_html)

        assert [p.name for p in params] == ["user", "pass"]
        for param in params:
            assert param.method == "POST"
            assert param.context is ParameterContext.FORM_POST
            assert param.action_url == "http://ex.test/login"
            assert param.source == "http://ex.test/account/"
            assert dict(param.form_fields) == {"user": "", "pass": ""}

    def test_url_parameters_come_first(self, login_form_html):
        params = ParameterExtractor().extract("http://ex.test/?next=home", login_form_html)

        assert params[0].name == "next"
        assert params[0].context is ParameterContext.URL_PARAMETER
        assert params[0].action_url == "http://ex.test/?next=home"
        assert params[0].sample_value == "home"

    def test_url_parameters_keep_blank_values(self):
        params = ParameterExtractor().extract_url_parameters("http://ex.test/list?page=&id=7")

        assert [(p.name, p.sample_value) for p in params] == [("page", ""), ("id", "7")]
        assert all(p.method == "GET" for p in params)

    def test_form_field_values(self, sample_html):
        """Select, textarea and hidden inputs contribute their current values."""
        params = ParameterExtractor().extract("http://ex.test/", sample_html)
        by_name = {p.name: p for p in params}

        assert by_name["sort"].sample_value == "desc"
        assert by_name["q"].sample_value == "shoes"
        assert by_name["comment"].sample_value == "hi"
        assert by_name["csrf_token"].sample_value == "abc123"

    def test_form_without_method_is_get(self, sample_html):
        params = ParameterExtractor().extract("http://ex.test/", sample_html)
        search = [p for p in params if p.name in ("q", "sort")]

        assert len(search) == 2
        for param in search:
            assert param.method == "GET"
            assert param.context is ParameterContext.FORM_GET
            assert param.action_url == "http://ex.test/search"

    def test_unnamed_inputs_are_ignored(self, sample_html):
        params = ParameterExtractor().extract("http://ex.test/", sample_html)

        # the submit button has no name
        assert len([p for p in params if p.action_url == "http://ex.test/submit"]) == 4

    def test_form_without_action_posts_to_page(self):
        html = '<form method="post"><input name="email"></form>'
        params = ParameterExtractor().extract("http://ex.test/newsletter?ref=1", html)
        form_params = [p for p in params if p.context is ParameterContext.FORM_POST]

        assert form_params[0].action_url == "http://ex.test/newsletter?ref=1"

    def test_unknown_method_falls_back_to_get(self):
        html = '<form method="put" action="item"><input name="qty"></form>'
        params = ParameterExtractor().extract("http://ex.test/cart/", html)

        assert params[0].method == "GET"
        assert params[0].action_url == "http://ex.test/cart/item"

    def test_malformed_action_posts_to_page(self):
        html = '<form method="post" action="http://[bad/x"><input name="email"></form>'
        params = ParameterExtractor().extract("http://ex.test/signup", html)

        assert [(p.name, p.action_url) for p in params] == [("email", "http://ex.test/signup")]

    def test_page_without_parameters(self):
        assert ParameterExtractor().extract("http://ex.test/", "<p>static</p>") == []


@pytest.mark.unit
class TestExtractTitle:
    """Unit tests for title extraction."""

    def test_title_is_stripped(self):
        assert extract_title("<title>  Shop \n</title>") == "Shop"

    def test_missing_title(self):
        assert extract_title("<p>no title</p>") is None
        assert extract_title("") is None
