"""Federated OpenID login driven through a Playwright browser window."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qs, urlsplit

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from ..errors import AuthenticationFailed
from ..models import ABANDONED, AuthType, FlowContext, PrepareResult
from .base import Strategy

LOGGER = logging.getLogger(__name__)


def is_callback(url: str, redirect_url: str) -> bool:
    target, current = urlsplit(redirect_url), urlsplit(url)
    return (current.scheme, current.netloc, current.path) == (
        target.scheme,
        target.netloc,
        target.path,
    )


def callback_params(url: str) -> Dict[str, str]:
    """Query (or fragment, for implicit flows) parameters of the redirect."""
    parts = urlsplit(url)
    params = parse_qs(parts.query) or parse_qs(parts.fragment)
    return {key: values[0] for key, values in params.items() if values}


def login_response(params: Mapping[str, str]) -> Dict[str, str]:
    if "error" in params:
        detail = params.get("error_description") or params["error"]
        raise AuthenticationFailed(f"Federated login failed: {detail}")
    if "code" not in params and "id_token" not in params:
        raise AuthenticationFailed("Federated login returned no authorization code")
    keys = ("code", "state", "id_token")
    return {key: params[key] for key in keys if key in params}


class OpenIDStrategy(Strategy):
    """Opens the authority's ``authUrl`` and waits for the redirect back."""

    auth_type = AuthType.FEDERATED_OPENID

    def __init__(
        self,
        redirect_url: str,
        enabled: bool = True,
        headless: bool = False,
        timeout: float = 300.0,
    ) -> None:
        self.redirect_url = redirect_url
        self.enabled = enabled
        self.headless = headless
        self.timeout = timeout

    def is_available(self) -> bool:
        return self.enabled

    def prepare_registration(self, data: Mapping[str, Any], context: FlowContext) -> PrepareResult:
        return self._login(data)

    def prepare_authentication(self, data: Mapping[str, Any], context: FlowContext) -> PrepareResult:
        return self._login(data)

    def _login(self, data: Mapping[str, Any]) -> PrepareResult:
        auth_url: Optional[str] = data.get("authUrl")
        if not auth_url:
            raise AuthenticationFailed("Authority did not provide a login URL")
        redirect_url = data.get("redirectUrl") or self.redirect_url

        params = self._browse(auth_url, redirect_url)
        if params is None:
            return ABANDONED
        return login_response(params)

    def _browse(self, auth_url: str, redirect_url: str) -> Optional[Dict[str, str]]:
        with sync_playwright() as playwright:
            browser = playwright.chromium.launch(headless=self.headless)
            try:
                page = browser.new_page()
                # The authority's redirect target may not be served locally; stop at the URL.
                page.route(f"{redirect_url}*", lambda route: route.fulfill(status=204, body=""))
                LOGGER.info("Opening federated login %s", auth_url)
                try:
                    page.goto(auth_url)
                    page.wait_for_url(
                        lambda url: is_callback(url, redirect_url),
                        timeout=self.timeout * 1000,
                    )
                except PlaywrightError as exc:
                    if page.is_closed():
                        LOGGER.info("Federated login window closed by user")
                        return None
                    raise AuthenticationFailed(f"Federated login did not finish: {exc}") from exc
                return callback_params(page.url)
            finally:
                browser.close()
