"""dzyne CLI."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

console = Console()


def _fail(message: str) -> None:
    console.print(f"[red]{message}[/red]")
    raise SystemExit(1)


def _prepare_db():
    from .database import ensure_schema

    ensure_schema()


def _resolve_user(identifier: str) -> dict:
    from .auth.users import UserRepository

    user = UserRepository().resolve(identifier)
    if not user:
        _fail(f"User not found: {identifier}")
    return user


def _load_json(value: str):
    """Parse a JSON string, or the contents of a JSON file."""
    if not value.lstrip().startswith(("{", "[")):
        path = Path(value)
        if path.is_file():
            value = path.read_text()
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        _fail(f"Invalid JSON: {e}")


@click.group()
def main():
    """dzyne - design profiles for AI coding assistants."""
    pass


@main.command()
def version():
    """Show version."""
    from . import __version__
    console.print(f"dzyne v{__version__}")


@main.command()
def init():
    """Initialize the database."""
    from .config import Config

    console.print(f"[blue]Initializing database at {Config.DB_PATH}[/blue]")
    _prepare_db()
    console.print("[green]Database initialized successfully![/green]")


@main.command()
@click.option("--transport", "-t", type=click.Choice(["stdio", "streamable-http"]),
              default=None, help="MCP transport (default: MCP_TRANSPORT or stdio)")
def serve(transport: str):
    """Run the MCP server."""
    from .server import main as run_server

    run_server(transport)


@main.command()
@click.argument("url")
@click.option("--save", "project_name", default=None, help="Save the tokens as this project's profile")
@click.option("--tag", "tags", multiple=True, help="Tag for the saved profile")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def extract(url: str, project_name: str, tags: tuple, as_json: bool):
    """Extract design tokens from a website."""
    from .design.tokens import extract_design_tokens, tokens_to_css_variables, tokens_to_tailwind_config
    from .firecrawl.ingest import ingest_design_from_url, normalize_url

    url = normalize_url(url)
    console.print(f"[blue]Analyzing {url}...[/blue]")
    result = ingest_design_from_url(url, include_screenshot=True)

    if not result.success or not result.branding:
        _fail(f"Extraction failed: {result.error or 'Could not analyze this site. Try a different URL.'}")

    tokens = extract_design_tokens(result.branding, url)

    if project_name:
        from .design.profiles import DesignProfileRepository

        _prepare_db()
        DesignProfileRepository().save(
            project_name,
            tokens,
            components=result.branding.get("components"),
            tailwind_config=tokens_to_tailwind_config(tokens),
            css_variables=tokens_to_css_variables(tokens),
            source_url=url,
            tags=list(tags),
        )

    if as_json:
        console.print(json.dumps({"url": url, "branding": result.branding, "tokens": tokens}, indent=2))
    else:
        table = Table(title="Colors")
        table.add_column("Token")
        table.add_column("Value")
        for key, value in tokens["colors"].items():
            table.add_row(key, f"[{value}]■[/{value}] {value}")
        console.print(table)

        families = tokens["typography"]["fontFamilies"]
        console.print(f"  Heading font: [cyan]{families['heading']}[/cyan]")
        console.print(f"  Body font:    [cyan]{families['primary']}[/cyan]")
        console.print(f"  Scheme:       {tokens['colorScheme']}")
        console.print(f"  Base unit:    {tokens['spacing']['baseUnit']}px")

    if project_name:
        console.print(f"[green]Saved profile: {project_name}[/green]")


@main.command()
@click.argument("url")
@click.option("--tokens", "tokens_source", default=None, help="New design tokens (JSON or path to JSON file)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def audit(url: str, tokens_source: str, as_json: bool):
    """Audit a site's current design."""
    from .audit import audit_site

    tokens = _load_json(tokens_source) if tokens_source else None
    console.print(f"[blue]Auditing {url}...[/blue]")
    result = audit_site(url, tokens)

    if not result["success"]:
        _fail(f"Audit failed: {result['error']}")

    if as_json:
        console.print(json.dumps(result, indent=2))
        return

    score = result["overallScore"]
    score_style = "green" if score >= 80 else "yellow" if score >= 50 else "red"
    console.print(f"\n[bold]Overall score:[/bold] [{score_style}]{score}/100[/{score_style}]\n")

    table = Table()
    table.add_column("Severity")
    table.add_column("Category")
    table.add_column("Issue", max_width=60)
    for item in result["improvements"]:
        severity = item.get("severity", "")
        style = {"high": "red", "medium": "yellow"}.get(severity, "dim")
        table.add_row(f"[{style}]{severity}[/{style}]", item.get("category", ""), item.get("issue", ""))
    console.print(table)

    if result["quickWins"]:
        console.print("\n[bold]Quick wins:[/bold]")
        for win in result["quickWins"]:
            console.print(f"  - {win}")


# Profiles

@main.group()
def profile():
    """Manage design profiles."""
    pass


@profile.command("list")
@click.option("--user", "user_identifier", default=None, help="Only this user's profiles (id or email)")
def profile_list(user_identifier: str):
    """List design profiles."""
    from .design.profiles import DesignProfileRepository

    _prepare_db()
    user_id = _resolve_user(user_identifier)["id"] if user_identifier else None
    profiles = DesignProfileRepository().list(user_id)

    if not profiles:
        console.print("[yellow]No design profiles found[/yellow]")
        return

    table = Table()
    table.add_column("Project")
    table.add_column("Source", style="dim")
    table.add_column("Primary")
    table.add_column("Tags")
    table.add_column("Updated", style="dim")

    for item in profiles:
        colors = (item["tokens"] or {}).get("colors") or {}
        table.add_row(
            item["project_name"],
            item["source_url"] or "onboarding",
            str(colors.get("primary", "")),
            ", ".join(item["tags"]),
            item["updated_at"][:19],
        )
    console.print(table)


@profile.command("show")
@click.argument("project_name")
@click.option("--css", is_flag=True, help="Print only the CSS variables")
def profile_show(project_name: str, css: bool):
    """Show a design profile."""
    from .design.profiles import DesignProfileRepository

    _prepare_db()
    item = DesignProfileRepository().get(project_name)
    if not item:
        _fail(f"Profile not found: {project_name}")

    if css:
        console.print(item["css_variables"] or "", markup=False)
        return

    console.print(json.dumps({
        "projectName": item["project_name"],
        "sourceUrl": item["source_url"],
        "tokens": item["tokens"],
        "components": item["components"],
        "tailwindConfig": item["tailwind_config"],
        "tags": item["tags"],
    }, indent=2), markup=False)


@profile.command("delete")
@click.argument("project_name")
@click.confirmation_option(prompt="Delete this profile?")
def profile_delete(project_name: str):
    """Delete a design profile."""
    from .design.profiles import DesignProfileRepository

    _prepare_db()
    if not DesignProfileRepository().delete(project_name):
        _fail(f"Profile not found: {project_name}")
    console.print(f"[yellow]Deleted profile: {project_name}[/yellow]")


@profile.command("onboard")
@click.argument("project_name")
@click.option("--colors", required=True, help="Palette JSON: primary, secondary, accent, background, text")
@click.option("--typography", required=True, help="Typography JSON: heading, body, headingClass, bodyClass")
@click.option("--user", "user_identifier", default=None, help="Owner (id or email)")
def profile_onboard(project_name: str, colors: str, typography: str, user_identifier: str):
    """Create a profile from a chosen palette and font pairing."""
    from .design.onboarding import build_profile_from_selection
    from .design.profiles import DesignProfileRepository
    from .errors import ValidationError
    from .utils.validators import validate_project_name

    _prepare_db()
    user_id = _resolve_user(user_identifier)["id"] if user_identifier else None

    try:
        project_name = validate_project_name(project_name)
        built = build_profile_from_selection(_load_json(colors), _load_json(typography))
    except ValidationError as e:
        _fail(str(e))

    DesignProfileRepository().save(
        project_name,
        built["tokens"],
        components=built["components"],
        tailwind_config=built["tailwind_config"],
        css_variables=built["css_variables"],
        user_id=user_id,
    )
    console.print(f"[green]Saved profile: {project_name}[/green]")


# Users

@main.group()
def users():
    """Manage users."""
    pass


@users.command("create")
@click.argument("email")
@click.option("--name", default=None)
def users_create(email: str, name: str):
    """Create a user."""
    from .auth.users import UserRepository
    from .errors import ValidationError

    _prepare_db()
    try:
        user_id = UserRepository().create(email, name)
    except ValidationError as e:
        _fail(str(e))
    console.print(f"[green]Created user {email.strip().lower()}: {user_id}[/green]")


@users.command("list")
def users_list():
    """List users."""
    from .auth.admin import is_admin_email
    from .auth.users import UserRepository

    _prepare_db()
    rows = UserRepository().list()
    if not rows:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim")
    table.add_column("Email")
    table.add_column("Name")
    table.add_column("Admin")
    table.add_column("Stripe", style="dim")
    for user in rows:
        table.add_row(
            user["id"],
            user["email"],
            user["name"] or "",
            "[green]yes[/green]" if is_admin_email(user["email"]) else "",
            user["stripe_customer_id"] or "",
        )
    console.print(table)


# API keys

@main.group()
def keys():
    """Manage API keys."""
    pass


@keys.command("create")
@click.argument("user_identifier")
@click.option("--name", default="Default", help="Key label")
@click.option("--rate-limit", type=int, default=None, help="Calls per minute")
def keys_create(user_identifier: str, name: str, rate_limit: int):
    """Create an API key. The key is shown once."""
    from .auth.api_keys import ApiKeyRepository

    _prepare_db()
    user = _resolve_user(user_identifier)
    created = ApiKeyRepository().create(user["id"], name=name, rate_limit=rate_limit)

    console.print(f"[green]Created key '{created['name']}' ({created['id']})[/green]")
    console.print(f"  {created['key']}")
    console.print("[yellow]Store this key now. It cannot be shown again.[/yellow]")


@keys.command("list")
@click.argument("user_identifier")
def keys_list(user_identifier: str):
    """List a user's API keys."""
    from .auth.api_keys import ApiKeyRepository

    _prepare_db()
    user = _resolve_user(user_identifier)
    rows = ApiKeyRepository().list(user["id"])
    if not rows:
        console.print("[yellow]No API keys found[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Prefix")
    table.add_column("Active")
    table.add_column("Rate limit", justify="right")
    table.add_column("Last used", style="dim")
    for key in rows:
        table.add_row(
            key["id"],
            key["name"],
            key["key_prefix"] + "...",
            "[green]yes[/green]" if key["is_active"] else "[red]no[/red]",
            str(key["rate_limit"]),
            (key["last_used_at"] or "never")[:19],
        )
    console.print(table)


@keys.command("revoke")
@click.argument("user_identifier")
@click.argument("key_id")
def keys_revoke(user_identifier: str, key_id: str):
    """Deactivate an API key."""
    from .auth.api_keys import ApiKeyRepository

    _prepare_db()
    user = _resolve_user(user_identifier)
    if not ApiKeyRepository().revoke(key_id, user["id"]):
        _fail(f"Key not found: {key_id}")
    console.print(f"[yellow]Revoked key: {key_id}[/yellow]")


# Knowledge base

@main.group()
def knowledge():
    """Manage the design knowledge base."""
    pass


@knowledge.command("upload")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--user", "user_identifier", required=True, help="Uploading user (id or email)")
@click.option("--source-name", default=None, help="Display name (default: file name)")
@click.option("--global", "is_global", is_flag=True, help="Admin upload visible to every user")
def knowledge_upload(file_path: str, user_identifier: str, source_name: str, is_global: bool):
    """Parse, chunk and embed a PDF, EPUB, Markdown or text file."""
    from .errors import ApiKeyError, KnowledgeError
    from .knowledge.ingest import upload_document

    _prepare_db()
    user = _resolve_user(user_identifier)
    path = Path(file_path)

    console.print(f"[blue]Indexing {path.name}...[/blue]")
    try:
        result = upload_document(
            path.read_bytes(),
            path.name,
            user["id"],
            source_name=source_name,
            is_global=is_global,
        )
    except (KnowledgeError, ApiKeyError) as e:
        _fail(str(e))

    style = "green" if result["inserted_chunks"] == result["total_chunks"] else "yellow"
    console.print(
        f"[{style}]Indexed '{result['source_name']}' ({result['file_type']}): "
        f"{result['inserted_chunks']}/{result['total_chunks']} chunks[/{style}]"
    )


@knowledge.command("list")
@click.option("--user", "user_identifier", default=None, help="User (id or email)")
@click.option("--global", "is_global", is_flag=True, help="List admin-curated sources")
def knowledge_list(user_identifier: str, is_global: bool):
    """List knowledge sources."""
    from .knowledge.retrieval import KnowledgeRepository

    _prepare_db()
    repo = KnowledgeRepository()
    if is_global:
        sources = repo.list_global_sources()
    elif user_identifier:
        sources = repo.list_sources(_resolve_user(user_identifier)["id"])
    else:
        _fail("Pass --user or --global")

    if not sources:
        console.print("[yellow]No knowledge sources found[/yellow]")
        return

    table = Table()
    table.add_column("Source")
    table.add_column("Type")
    table.add_column("Chunks", justify="right")
    table.add_column("Uploaded", style="dim")
    for source in sources:
        table.add_row(source["sourceName"], source["sourceType"], str(source["chunkCount"]),
                      source["createdAt"][:19])
    console.print(table)


@knowledge.command("delete")
@click.argument("source_name")
@click.option("--user", "user_identifier", default=None, help="Owner (id or email)")
@click.option("--global", "is_global", is_flag=True, help="Delete an admin-curated source")
def knowledge_delete(source_name: str, user_identifier: str, is_global: bool):
    """Delete a knowledge source."""
    from .auth.admin import require_admin
    from .errors import ApiKeyError
    from .knowledge.retrieval import KnowledgeRepository

    _prepare_db()
    repo = KnowledgeRepository()
    if is_global:
        if not user_identifier:
            _fail("Global deletes need --user with an admin account")
        try:
            require_admin(_resolve_user(user_identifier))
        except ApiKeyError as e:
            _fail(str(e))
        removed = repo.delete_global_source(source_name)
    elif user_identifier:
        removed = repo.delete_source(_resolve_user(user_identifier)["id"], source_name)
    else:
        _fail("Pass --user or --global")

    if not removed:
        _fail(f"Source not found: {source_name}")
    console.print(f"[yellow]Deleted {removed} chunks from '{source_name}'[/yellow]")


@knowledge.command("search")
@click.argument("query")
@click.option("--user", "user_identifier", default=None, help="Include this user's sources")
@click.option("--limit", "-n", default=8, help="Number of results")
@click.option("--threshold", default=0.45, help="Minimum similarity")
def knowledge_search(query: str, user_identifier: str, limit: int, threshold: float):
    """Search the knowledge base."""
    from .errors import ValidationError
    from .knowledge.retrieval import search_knowledge
    from .utils.validators import validate_limit, validate_search_query, validate_threshold

    _prepare_db()
    try:
        query = validate_search_query(query)
        limit = validate_limit(limit, max_limit=15)
        threshold = validate_threshold(threshold)
    except ValidationError as e:
        _fail(str(e))

    user_id = _resolve_user(user_identifier)["id"] if user_identifier else None
    results = search_knowledge(user_id, query, limit, threshold)

    if not results:
        console.print("[yellow]No relevant knowledge found[/yellow]")
        return

    for i, chunk in enumerate(results, 1):
        section = f" - {chunk['sectionTitle']}" if chunk["sectionTitle"] else ""
        console.print(f"\n[bold]{i}. {chunk['sourceName']}{section}[/bold] [dim]({chunk['similarity']:.3f})[/dim]")
        console.print(chunk["chunkText"][:300], markup=False)


# Usage and billing

@main.group()
def usage():
    """Show usage and billing."""
    pass


@usage.command("summary")
@click.argument("user_identifier")
def usage_summary(user_identifier: str):
    """Month-to-date billable usage."""
    from .billing.pricing import get_usage_summary

    _prepare_db()
    summary = get_usage_summary(_resolve_user(user_identifier)["id"])

    console.print("\n[bold]Usage This Month[/bold]")
    console.print("-" * 35)
    console.print(f"  Period:      {summary['periodStart'][:10]} to {summary['periodEnd'][:10]}")
    console.print(f"  Calls:       {summary['totalCalls']}")
    console.print(f"  Cost:        ${summary['totalCostCents'] / 100:.2f}")
    console.print("-" * 35)

    for tool, stats in sorted(summary["breakdown"].items()):
        console.print(f"  {tool:<28} {stats['calls']:>5} calls  ${stats['costCents'] / 100:.2f}")


@usage.command("report")
@click.argument("user_identifier")
@click.option("--days", default=30, help="Window in days")
@click.option("--tool", default=None, help="Only this tool")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def usage_report(user_identifier: str, days: int, tool: str, as_json: bool):
    """Daily calls and per-tool statistics."""
    from .billing.pricing import get_usage_report

    _prepare_db()
    report = get_usage_report(_resolve_user(user_identifier)["id"], days=days, tool=tool)

    if as_json:
        console.print(json.dumps(report, indent=2))
        return

    console.print(f"\n[bold]Usage, last {days} days[/bold]: {report['totalCalls']} calls, "
                  f"${report['totalCostCents'] / 100:.2f}")

    if not report["toolBreakdown"]:
        console.print("[yellow]No usage recorded[/yellow]")
        return

    table = Table()
    table.add_column("Tool")
    table.add_column("Calls", justify="right")
    table.add_column("Avg latency", justify="right")
    table.add_column("Error rate", justify="right")
    table.add_column("Cost", justify="right")
    for row in report["toolBreakdown"]:
        error_style = "red" if row["errorRate"] > 10 else "green"
        table.add_row(
            row["tool"],
            str(row["calls"]),
            f"{row['avgLatency']}ms",
            f"[{error_style}]{row['errorRate']}%[/{error_style}]",
            f"${row['costCents'] / 100:.2f}",
        )
    console.print(table)


# Patterns

@main.group()
def patterns():
    """Manage the design pattern library."""
    pass


@patterns.command("add")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
def patterns_add(file_path: str):
    """Add patterns from a JSON file (one object or a list)."""
    from .design.patterns import DesignPatternRepository, build_search_text
    from .utils.openai_embeddings import get_generator

    _prepare_db()
    data = _load_json(file_path)
    items = data if isinstance(data, list) else [data]

    repo = DesignPatternRepository()
    generator = get_generator()
    for item in items:
        if not item.get("source_url") or not item.get("name"):
            _fail("Each pattern needs at least name and source_url")
        embedding = generator.generate(build_search_text(item))
        repo.upsert(item, embedding)
        console.print(f"  [green]+[/green] {item['name']}")

    console.print(f"[green]Stored {len(items)} patterns ({repo.count()} total)[/green]")


@patterns.command("search")
@click.argument("query")
@click.option("--category", default=None)
@click.option("--tag", "tags", multiple=True)
@click.option("--limit", "-n", default=10)
@click.option("--threshold", default=0.5)
def patterns_search(query: str, category: str, tags: tuple, limit: int, threshold: float):
    """Search design patterns."""
    from .tools.pattern_tools import search_design_patterns

    _prepare_db()
    result = search_design_patterns(query, category=category, tags=list(tags) or None,
                                    limit=limit, threshold=threshold)

    if not result["totalResults"]:
        console.print("[yellow]No design patterns matched your query[/yellow]")
        return

    table = Table()
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Tags")
    table.add_column("Similarity", justify="right")
    for item in result["patterns"]:
        table.add_row(item["name"], item["category"] or "", ", ".join(item["tags"]),
                      f"{item['similarity']:.3f}")
    console.print(table)


# Billing webhook

@main.command()
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--signature", required=True, help="Value of the Stripe-Signature header")
def webhook(payload_file: str, signature: str):
    """Apply a Stripe webhook payload."""
    from .billing.stripe_billing import handle_webhook
    from .errors import BillingError

    _prepare_db()
    try:
        result = handle_webhook(Path(payload_file).read_bytes(), signature)
    except BillingError as e:
        _fail(str(e))
    console.print(f"[green]Processed {result['type']}[/green]")


if __name__ == "__main__":
    main()
