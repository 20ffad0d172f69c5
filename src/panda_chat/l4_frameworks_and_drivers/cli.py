"""CLI entry point for panda-chat."""

from __future__ import annotations

import asyncio
import sys
import time

import click

from panda_chat import __version__
from panda_chat.l3_interface_adapters.gateways.paths import LOG_DIR, STATE_PATH, TOKEN_PATH

SURFACE_CHOICE = click.Choice(['chatbox', 'floating'])


def _load_configs(config_path: str | None):
    from panda_chat.l3_interface_adapters.gateways.yaml_config_loader import (  # noqa: PLC0415 -- deferred: yaml stack not loaded on --help
        YamlConfigLoader,
    )
    from panda_chat.l4_frameworks_and_drivers.infra_config import (  # noqa: PLC0415 -- deferred: not needed for --help
        APP_CONFIG_DEFAULTS,
        InfraConfig,
    )

    loader = YamlConfigLoader(defaults=APP_CONFIG_DEFAULTS)
    try:
        raw = loader.load_raw(config_path)
        return loader.validate(raw), InfraConfig.model_validate(raw)
    except (FileNotFoundError, ValueError) as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)


def _build_container(config, surface: str, infra, **kwargs):
    from panda_chat.l4_frameworks_and_drivers.container import (  # noqa: PLC0415 -- deferred: aiohttp not loaded on --help
        DependencyContainer,
    )

    return DependencyContainer(
        config,
        surface,
        infra,
        token_path=TOKEN_PATH,
        state_path=STATE_PATH,
        **kwargs,
    )


@click.group(invoke_without_command=True)
@click.option(
    '-c',
    '--config',
    'config_path',
    default=None,
    type=click.Path(exists=True),
    help='Path to YAML config file.',
)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, config_path):
    """panda-chat -- terminal client for the PandaDocs AI template assistant."""
    from panda_chat.l4_frameworks_and_drivers.logging_setup import (  # noqa: PLC0415 -- deferred: not needed for --help
        setup_file_logging,
    )

    setup_file_logging(LOG_DIR)
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path
    if ctx.invoked_subcommand is None:
        ctx.invoke(chat)


@cli.command()
@click.option('-s', '--surface', default='chatbox', type=SURFACE_CHOICE, help='Chat surface to open.')
@click.pass_context
def chat(ctx, surface):
    """Open the interactive chat TUI (default)."""
    config, infra = _load_configs(ctx.obj.get('config_path'))

    from panda_chat.l4_frameworks_and_drivers.app import (  # noqa: PLC0415 -- deferred: Textual TUI not loaded for headless commands
        ChatApp,
    )

    ChatApp(config=config, surface=surface, infra=infra).run()


@cli.command()
@click.argument('text')
@click.option('-s', '--surface', default='chatbox', type=SURFACE_CHOICE, help='Surface whose session to continue.')
@click.pass_context
def send(ctx, text, surface):
    """Send one message and print the assistant's reply."""
    from panda_chat.l3_interface_adapters.controllers.chat_controller import (  # noqa: PLC0415 -- deferred: not needed for --help
        SendStatus,
    )

    config, infra = _load_configs(ctx.obj.get('config_path'))
    container = _build_container(config, surface, infra)
    controller = container.controller

    async def _run():
        await controller.activate()
        try:
            return await controller.send(text)
        finally:
            controller.teardown()

    result = asyncio.run(_run())
    if result.status is not SendStatus.SENT:
        click.echo(f'Error: {result.error or result.status.value}', err=True)
        sys.exit(1)

    reply = controller.messages[-1]
    click.echo(reply.content)
    for template in reply.templates[: container.surface.max_template_cards]:
        click.echo(f'  • {template.title} ({container.surface.price.label(template.price)}) [{template.id}]')
    for button in reply.action_buttons:
        click.echo(f'  [{button.label}]')
    click.echo(f'session: {controller.session_id}', err=True)


@cli.command()
@click.option('-s', '--surface', default='chatbox', type=SURFACE_CHOICE, help='Surface whose session to end.')
@click.pass_context
def clear(ctx, surface):
    """End the saved chat session and forget it locally."""
    config, infra = _load_configs(ctx.obj.get('config_path'))
    container = _build_container(config, surface, infra)
    controller = container.controller
    saved = container.session_store.load()

    async def _run():
        if saved is not None and container.auth_gate.has_credential():
            controller.session = _resumed_session(saved)
        await controller.clear()
        controller.teardown()

    asyncio.run(_run())
    if saved is None:
        click.echo('No saved session.')


def _resumed_session(session_id: str):
    from panda_chat.l1_entities.session import ChatSession  # noqa: PLC0415 -- deferred: pydantic not loaded on --help

    return ChatSession(id=session_id)


@cli.command('set-token')
@click.argument('token')
def set_token(token):
    """Store the bearer token issued by the web login."""
    from panda_chat.l2_use_cases.auth_gate import is_token_valid  # noqa: PLC0415 -- deferred: not needed for --help
    from panda_chat.l3_interface_adapters.gateways.file_credential_store import (  # noqa: PLC0415 -- deferred: not needed for --help
        FileCredentialStore,
    )

    path = FileCredentialStore(TOKEN_PATH).save(token)
    click.echo(f'Token saved to {path}')
    if not is_token_valid(token.strip(), time.time()):
        click.echo('Warning: token is malformed or already expired; requests will ask you to sign in.', err=True)
