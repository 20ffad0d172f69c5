"""Navigation and notification adapters — implement Navigator and Notifier ports."""

from __future__ import annotations

import logging
from urllib.parse import urljoin

import click

log = logging.getLogger('pchat.app')


class BrowserNavigator:
    """Opens navigation targets in the user's browser, relative to the web front-end."""

    def __init__(self, web_base_url: str) -> None:
        self._base = web_base_url.rstrip('/') + '/'

    def resolve(self, target: str) -> str:
        if target.startswith(('http://', 'https://')):
            return target
        return urljoin(self._base, target.lstrip('/'))

    def navigate(self, target: str) -> None:
        url = self.resolve(target)
        log.info('Opening %s', url)
        click.launch(url)


class EchoNotifier:
    """Prints notifications to the terminal (headless commands)."""

    def success(self, title: str, message: str) -> None:
        click.echo(f'{title}: {message}')

    def error(self, title: str, message: str) -> None:
        click.echo(f'{title}: {message}', err=True)


class TextualNotifier:
    """Shows notifications as Textual toasts."""

    def __init__(self, app) -> None:
        self._app = app

    def success(self, title: str, message: str) -> None:
        self._app.notify(message, title=title, timeout=4)

    def error(self, title: str, message: str) -> None:
        self._app.notify(message, title=title, severity='error', timeout=8)
