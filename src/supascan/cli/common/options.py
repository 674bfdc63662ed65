"""Common CLI options for the CLI."""

import typer

UrlOpt = typer.Option(
    None,
    "--url",
    "-u",
    envvar="SUPASCAN_URL",
    help="Supabase project URL (e.g. https://abc.supabase.co)",
)

KeyOpt = typer.Option(
    None,
    "--key",
    "-k",
    envvar="SUPASCAN_KEY",
    help="Supabase API key (anon or service role)",
)

EmailOpt = typer.Option(
    None,
    "--email",
    "-e",
    envvar="SUPASCAN_EMAIL",
    help="Email for password sign-in",
)

PasswordOpt = typer.Option(
    None,
    "--password",
    "-p",
    envvar="SUPASCAN_PASSWORD",
    help="Password for password sign-in (prompted when --email is given alone)",
)

TokenOpt = typer.Option(
    None,
    "--token",
    "-t",
    envvar="SUPASCAN_TOKEN",
    help="User JWT; takes precedence over email/password",
)

FastDiscoveryOpt = typer.Option(
    False,
    "--fast-discovery",
    "-f",
    envvar="SUPASCAN_FAST_DISCOVERY",
    help="Skip probing ~150 common table names",
)

ExportSqlOpt = typer.Option(
    None,
    "--export-sql",
    "-s",
    envvar="SUPASCAN_EXPORT_SQL",
    help="Write a best-effort SQL schema export to this path",
)

JsonOpt = typer.Option(
    None,
    "--json",
    help="Write the full run result as JSON to this path",
)

QuietOpt = typer.Option(
    False,
    "--quiet",
    "-q",
    help="Don't echo the audit log, only show the summary",
)

NameOpt = typer.Option(
    None,
    "--name",
    help="Regex on collection name",
)

NamespaceOpt = typer.Option(
    [],
    "--namespace",
    help="Only collections in this schema (e.g. public, auth). This is reusable.",
    show_default=False,
)

UseOrOpt = typer.Option(
    False,
    "--or",
    help="Use OR instead of AND between selectors",
)

PickOpt = typer.Option(
    False,
    "--pick",
    help="Interactively pick the collections to extract",
)

YesOpt = typer.Option(
    False,
    "--yes",
    "-y",
    help="Don't ask for confirmation before full discovery",
)
