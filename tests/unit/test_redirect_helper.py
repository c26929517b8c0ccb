"""
Unit tests for the local sign-in landing URL helper.
"""

import pytest

from authflow.redirect_helper import RedirectHelper


class TestRedirectHelper:
    async def test_explicit_redirect_url_wins(self, request_factory):
        """Test that redirectUrl takes priority over the Referer."""
        request = request_factory(
            params={"redirectUrl": "https://app.example.com/app/42"},
            headers={"Referer": "https://app.example.com/login"},
        )
        assert await RedirectHelper().get_redirect_url(request) == "https://app.example.com/app/42"

    async def test_referer_origin_with_landing_path(self, request_factory):
        """Test that the Referer origin is joined with the landing path."""
        request = request_factory(headers={"Referer": "https://app.example.com/login"})
        assert await RedirectHelper().get_redirect_url(request) == (
            "https://app.example.com/applications"
        )

    async def test_origin_header_fallback(self, request_factory):
        request = request_factory(headers={"Origin": "http://localhost:8080"})
        helper = RedirectHelper(landing_path="/home")
        assert await helper.get_redirect_url(request) == "http://localhost:8080/home"

    async def test_non_http_referer_is_ignored(self, request_factory):
        request = request_factory(headers={"Referer": "android-app://com.example"})
        assert await RedirectHelper().get_redirect_url(request) == "/"

    async def test_default_without_context(self, request_factory):
        helper = RedirectHelper(default_url="/start")
        assert await helper.get_redirect_url(request_factory()) == "/start"

    def test_landing_path_must_be_rooted(self):
        with pytest.raises(ValueError):
            RedirectHelper(landing_path="applications")
