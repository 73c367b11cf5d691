"""Command line interface for the Jira REST client."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import load_config
from .jira import Jira
from .oauth.settings import (
    OAuthAccessTokenSettings,
    OAuthRequestTokenSettings,
    OAuthSignatureMethod,
)
from .oauth.token_helper import generate_request_token, obtain_access_token
from .remote.errors import JiraClientError, ServerReportedError

logger = logging.getLogger(__name__)

console = Console()

_SIGNATURE_METHODS = [m.value for m in OAuthSignatureMethod]


def _display_error(error: Exception) -> None:
    """Show an error in a panel naming its kind."""
    if isinstance(error, JiraClientError):
        title = f"Jira error: {error.kind.value}"
        lines = [str(error)]
        if error.status_code:
            lines.append(f"Status code: {error.status_code}")
        if isinstance(error, ServerReportedError) and error.errors:
            lines.append(f"Field errors: {error.errors}")
    else:
        title = "Error"
        lines = [str(error)]

    console.print(Panel("\n".join(lines), title=title, border_style="red"))


def _open_jira(ctx: click.Context) -> Jira:
    try:
        config = load_config(ctx.obj.get("config_path"))
    except (ValueError, FileNotFoundError, json.JSONDecodeError) as e:
        _display_error(e)
        sys.exit(1)

    if ctx.obj.get("trace"):
        config.enable_request_trace = True
    return Jira.from_config(config)


def _run(coro):
    try:
        return asyncio.run(coro)
    except (JiraClientError, ValueError) as e:
        _display_error(e)
        sys.exit(1)


@click.group()
@click.option("--config", "-c", type=click.Path(exists=False), help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--trace", is_flag=True, help="Log requests and responses")
@click.version_option(version=__version__, prog_name="jira-rest")
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool, trace: bool):
    """Talk to a Jira server over its REST API.

    \b
    CONFIGURATION:
      Config file: ~/.jira-rest/config.json
      Environment: JIRA_REST_URL, JIRA_REST_USERNAME, JIRA_REST_PASSWORD,
                   JIRA_REST_PROXY_URL, JIRA_REST_TIMEOUT, JIRA_REST_TRACE

    \b
    EXAMPLES:
      jira-rest request GET rest/api/2/serverInfo
      jira-rest projects
      jira-rest versions PROJ
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["trace"] = trace

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
    if trace:
        logging.getLogger("jira_rest.trace").setLevel(logging.INFO)


@cli.command()
@click.argument("method")
@click.argument("resource")
@click.option("--body", "-b", help="JSON request body")
@click.pass_context
def request(ctx, method: str, resource: str, body: Optional[str]):
    """Execute METHOD against RESOURCE and print the JSON reply."""
    jira = _open_jira(ctx)

    async def _request():
        async with jira:
            result = await jira.rest_client.execute_request(method, resource, body)
        console.print_json(data=result)

    _run(_request())


@cli.command()
@click.argument("url")
@click.option(
    "--output", "-o", type=click.Path(dir_okay=False), required=True, help="Target file"
)
@click.pass_context
def download(ctx, url: str, output: str):
    """Download URL into a file."""
    jira = _open_jira(ctx)

    async def _download():
        async with jira:
            data = await jira.rest_client.download_data(url)
        Path(output).write_bytes(data)
        console.print(f"✅ Saved {len(data)} bytes to {output}", style="green")

    _run(_download())


@cli.command()
@click.pass_context
def projects(ctx):
    """List all projects."""
    jira = _open_jira(ctx)

    async def _projects():
        async with jira:
            found = await jira.projects.get_projects()

        table = Table(title="Projects")
        table.add_column("Key", style="cyan")
        table.add_column("Name")
        table.add_column("Lead")
        for project in found:
            lead = project.lead.display_name if project.lead else ""
            table.add_row(project.key, project.name or "", lead or "")
        console.print(table)

    _run(_projects())


@cli.command()
@click.argument("project_key")
@click.pass_context
def versions(ctx, project_key: str):
    """List the versions of PROJECT_KEY."""
    jira = _open_jira(ctx)

    async def _versions():
        async with jira:
            found = await jira.versions.get_versions(project_key)

        table = Table(title=f"Versions of {project_key}")
        table.add_column("Id", style="cyan")
        table.add_column("Name")
        table.add_column("Released")
        table.add_column("Archived")
        for version in found:
            table.add_row(
                version.id or "",
                version.name,
                "yes" if version.released else "no",
                "yes" if version.archived else "no",
            )
        console.print(table)

    _run(_versions())


@cli.group()
def oauth():
    """Three-legged OAuth token exchange."""


@oauth.command("request-token")
@click.option("--url", required=True, help="Jira base URL")
@click.option("--consumer-key", required=True)
@click.option("--consumer-secret", required=True)
@click.option("--callback-url", default="oob", show_default=True)
@click.option(
    "--signature-method",
    type=click.Choice(_SIGNATURE_METHODS),
    default=OAuthSignatureMethod.PLAINTEXT.value,
    show_default=True,
)
def request_token(
    url: str,
    consumer_key: str,
    consumer_secret: str,
    callback_url: str,
    signature_method: str,
):
    """Generate a request token and print the authorization URL."""
    settings = OAuthRequestTokenSettings(
        url=url,
        consumer_key=consumer_key,
        consumer_secret=consumer_secret,
        callback_url=callback_url,
        signature_method=OAuthSignatureMethod(signature_method),
    )

    token = _run(generate_request_token(settings))
    if token is None:
        console.print("❌ Jira did not issue a request token", style="red")
        sys.exit(1)

    console.print(f"Token:         {token.oauth_token}")
    console.print(f"Token secret:  {token.oauth_token_secret}")
    console.print(
        f"Authorize at:  {token.authorize_uri}", style="cyan", soft_wrap=True
    )


@oauth.command("access-token")
@click.option("--url", required=True, help="Jira base URL")
@click.option("--consumer-key", required=True)
@click.option("--consumer-secret", required=True)
@click.option("--request-token", "request_token_value", required=True)
@click.option("--token-secret", required=True)
@click.option("--verifier", help="oauth_verifier handed to the callback")
@click.option(
    "--signature-method",
    type=click.Choice(_SIGNATURE_METHODS),
    default=OAuthSignatureMethod.PLAINTEXT.value,
    show_default=True,
)
def access_token(
    url: str,
    consumer_key: str,
    consumer_secret: str,
    request_token_value: str,
    token_secret: str,
    verifier: Optional[str],
    signature_method: str,
):
    """Exchange an authorized request token for an access token."""
    settings = OAuthAccessTokenSettings(
        url=url,
        consumer_key=consumer_key,
        consumer_secret=consumer_secret,
        oauth_request_token=request_token_value,
        oauth_token_secret=token_secret,
        signature_method=OAuthSignatureMethod(signature_method),
        verifier=verifier,
    )

    token = _run(obtain_access_token(settings))
    if token is None:
        console.print("❌ Access token exchange did not complete", style="red")
        sys.exit(1)
    console.print(f"Access token: {token}")

