import click
import sys
import time
from typing import Optional

try:
    from .utils import load_config, setup_logging, truncate_text
except ImportError:
    from utils import load_config, setup_logging, truncate_text

import requests

from login_tools.quick_login import (
    CredentialManager,
    CredentialError,
    PageError,
    BrowserUnavailableError,
    PageInjector,
    QuickLoginConfig,
    SoupPage,
    create_credential_store,
)
from login_tools.quick_login import __version__


def _fetch_page(app_config: dict, url: str) -> SoupPage:
    """Fetch a page over HTTP for offline instance detection."""
    http_config = app_config.get('http', {})
    session = requests.Session()
    session.headers['User-Agent'] = http_config.get('user_agent', 'quicklogin/1.0')
    return SoupPage.from_url(url, session=session, timeout=http_config.get('timeout', 30))


def _resolve_key(ctx: click.Context, url: Optional[str], key: Optional[str]) -> str:
    """Use --key as given, or identify the instance behind URL."""
    if key:
        return key
    if not url:
        raise click.UsageError("Provide a URL or --key")

    app_config = ctx.obj['config']
    try:
        page = _fetch_page(app_config, url)
    except PageError as e:
        click.echo(f"❌ {e}")
        sys.exit(1)

    manager = CredentialManager(ctx.obj['store'], page, ctx.obj['quick_login'])
    instance_key = manager.resolve_instance_key()
    if not instance_key:
        click.echo("❌ Could not identify the instance for this page.")
        sys.exit(1)
    return instance_key


def _echo_credentials(instance_key: str, records) -> None:
    if not records:
        click.echo(f"No users saved for {instance_key}.")
        return
    click.echo(f"🔑 Saved users for {instance_key}:")
    for position, record in enumerate(records, start=1):
        click.echo(f"  {position}. {record.username}")


@click.group()
@click.version_option(version=__version__, prog_name="quicklogin")
@click.option('--config', '-c',
              type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--store',
              type=click.Path(dir_okay=False),
              help='Credential store file (overrides config)')
@click.option('--verbose', '-v',
              is_flag=True,
              help='Enable verbose logging')
@click.pass_context
def main(ctx: click.Context, config: Optional[str], store: Optional[str], verbose: bool):
    """quicklogin - Save several logins per application instance and apply one from the login page."""
    app_config = load_config(config or 'config.yaml')
    if verbose:
        app_config['logging']['level'] = 'DEBUG'
    if store:
        app_config['storage']['path'] = store
    setup_logging(app_config['logging'])

    ctx.obj = {
        'config': app_config,
        'quick_login': QuickLoginConfig.from_dict(app_config.get('quick_login', {})),
        'store': create_credential_store(app_config['storage']['path']),
    }


@main.command()
@click.argument('url', type=str)
@click.option('--html', 'html_file',
              type=click.Path(exists=True, dir_okay=False),
              help='Read the page from a saved HTML file instead of fetching URL')
@click.pass_context
def detect(ctx: click.Context, url: str, html_file: Optional[str]):
    """Show the instance key and login page status for URL."""
    if html_file:
        with open(html_file, 'r', encoding='utf-8') as f:
            page = SoupPage(f.read(), url)
    else:
        try:
            page = _fetch_page(ctx.obj['config'], url)
        except PageError as e:
            click.echo(f"❌ {e}")
            sys.exit(1)

    store = ctx.obj['store']
    injector = PageInjector(page, store, ctx.obj['quick_login'])
    instance_key = CredentialManager(store, page, ctx.obj['quick_login']).resolve_instance_key()

    click.echo(f"Instance key: {instance_key}")
    click.echo(f"Login page:   {'yes' if injector.is_login_page() else 'no'}")
    click.echo(f"Saved users:  {len(store.get(instance_key))}")


@main.command(name='list')
@click.argument('url', required=False)
@click.option('--key', '-k', help='Instance key (skips page detection)')
@click.option('--all', 'show_all', is_flag=True, help='List every stored instance')
@click.pass_context
def list_users(ctx: click.Context, url: Optional[str], key: Optional[str], show_all: bool):
    """List saved users for an instance."""
    store = ctx.obj['store']
    if show_all:
        instance_keys = store.instance_keys()
        if not instance_keys:
            click.echo("No users saved.")
            return
        for instance_key in instance_keys:
            count = len(store.get(instance_key))
            click.echo(f"{truncate_text(instance_key, 60):<62} {count} user(s)")
        return

    instance_key = _resolve_key(ctx, url, key)
    _echo_credentials(instance_key, store.get(instance_key))


@main.command()
@click.argument('url', required=False)
@click.option('--key', '-k', help='Instance key (skips page detection)')
@click.option('--username', '-u', required=True, help='Username to save')
@click.option('--secret', '-s', help='Password to save (will prompt if not provided)')
@click.pass_context
def add(ctx: click.Context, url: Optional[str], key: Optional[str], username: str, secret: Optional[str]):
    """Save a user for an instance."""
    instance_key = _resolve_key(ctx, url, key)
    if not secret:
        secret = click.prompt(f"Password for {username}", hide_input=True)

    manager = CredentialManager(ctx.obj['store'], config=ctx.obj['quick_login'])
    try:
        records = manager.add_credential(instance_key, username, secret)
    except CredentialError as e:
        click.echo(f"❌ {e}")
        sys.exit(1)
    click.echo(f"✅ Saved {username.strip()} for {instance_key} ({len(records)} user(s))")


@main.command()
@click.argument('position', type=int)
@click.argument('url', required=False)
@click.option('--key', '-k', help='Instance key (skips page detection)')
@click.pass_context
def remove(ctx: click.Context, position: int, url: Optional[str], key: Optional[str]):
    """Remove the user at POSITION (as shown by list)."""
    instance_key = _resolve_key(ctx, url, key)
    manager = CredentialManager(ctx.obj['store'], config=ctx.obj['quick_login'])
    try:
        records = manager.remove_credential(instance_key, position - 1)
    except CredentialError as e:
        click.echo(f"❌ {e}")
        sys.exit(1)
    click.echo(f"🗑️  Removed user #{position}")
    _echo_credentials(instance_key, records)


MANAGE_HELP = """Commands:
  list            show saved users for this page
  add             save a user for this page
  remove N        remove user N
  login N         log in as user N
  quit            close the browser"""


def _manage_prompt(manager: CredentialManager) -> None:
    """Interactive management loop running beside the page injector."""
    click.echo(MANAGE_HELP)
    while True:
        try:
            line = click.prompt('quicklogin', default='list', show_default=False)
        except (click.Abort, EOFError):
            return

        parts = line.split()
        if not parts:
            continue
        command, args = parts[0].lower(), parts[1:]
        if command in ('quit', 'exit', 'q'):
            return
        if command == 'help':
            click.echo(MANAGE_HELP)
            continue

        instance_key = manager.resolve_instance_key()
        if not instance_key:
            click.echo("Not a login page. Navigate to a login page first.")
            continue

        try:
            if command == 'list':
                _echo_credentials(instance_key, manager.list_credentials(instance_key))
            elif command == 'add':
                username = click.prompt('Username')
                secret = click.prompt('Password', hide_input=True)
                manager.add_credential(instance_key, username, secret)
                click.echo(f"✅ Saved {username.strip()}")
            elif command in ('remove', 'login') and len(args) == 1 and args[0].isdigit():
                position = int(args[0]) - 1
                if command == 'remove':
                    manager.remove_credential(instance_key, position)
                    click.echo(f"🗑️  Removed user #{args[0]}")
                elif manager.login(instance_key, position):
                    click.echo(f"🔐 Logging in as user #{args[0]}")
                else:
                    click.echo("Login form not found on this page.")
            else:
                click.echo(f"Unknown command: {line}")
        except CredentialError as e:
            click.echo(f"❌ {e}")


@main.command(name='open')
@click.argument('url', type=str)
@click.option('--headless', is_flag=True, help='Run the browser without a window')
@click.option('--manage', is_flag=True, help='Open an interactive prompt to manage users')
@click.pass_context
def open_browser(ctx: click.Context, url: str, headless: bool, manage: bool):
    """Open URL in a browser with the quick login picker."""
    # Imported here so the other commands do not need Selenium loaded
    from login_tools.quick_login.pages.browser_driver import BrowserSession

    app_config = ctx.obj['config']
    if headless:
        app_config['browser']['headless'] = True

    browser = BrowserSession(app_config)
    try:
        page = browser.open(url)
    except (BrowserUnavailableError, PageError) as e:
        click.echo(f"❌ {e}")
        browser.stop()
        sys.exit(1)

    injector = PageInjector(page, ctx.obj['store'], ctx.obj['quick_login'])
    injector.start()
    click.echo(f"🌐 Quick login active on {url} (Ctrl+C to stop)")

    try:
        if manage:
            _manage_prompt(CredentialManager(ctx.obj['store'], page, ctx.obj['quick_login']))
        else:
            while browser.is_alive():
                time.sleep(1)
    except KeyboardInterrupt:
        click.echo("\n⚠️  Interrupted by user")
    finally:
        injector.stop()
        browser.stop()


if __name__ == '__main__':
    main()
