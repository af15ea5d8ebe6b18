import functools
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from aliasctl import __version__
from aliasctl.codec import parse
from aliasctl.config import Config
from aliasctl.dialects import Dialect
from aliasctl.errors import AliasCtlError, ConfigurationError, NotFoundError
from aliasctl.porter import AliasPorter
from aliasctl.providers import ProviderManager, create_provider
from aliasctl.render import Render
from aliasctl.shell_detector import ShellDetector
from aliasctl.shell_integrator import ShellIntegrator
from aliasctl.storage import AliasStore
from aliasctl.translator import definition_command, generate as generate_alias, translate

console = Console()
render = Render()


class Session:
    """Lazily built config, store and shell settings for one invocation"""

    def __init__(self, shell_override=None, verbose=False):
        self.shell_override = shell_override
        self.verbose = verbose
        self._config = None
        self._store = None

    def debug(self, message):
        if self.verbose:
            console.print(f"[dim]{escape(message)}[/]")

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = Config()
            self.debug(f"config: {self._config.config_path}")
        return self._config

    @property
    def detector(self) -> ShellDetector:
        return ShellDetector()

    @property
    def dialect(self) -> Dialect:
        if self.shell_override:
            return Dialect.from_name(self.shell_override)
        configured = self.config.get("default_shell")
        if configured:
            return Dialect.from_name(configured)
        dialect = self.detector.detect_current_dialect()
        self.debug(f"detected shell: {dialect}")
        return dialect

    @property
    def alias_file(self) -> Path:
        configured = self.config.get("default_alias_file")
        if configured:
            return Path(configured).expanduser()
        return self.detector.default_alias_file(self.dialect)

    def new_store(self) -> AliasStore:
        return AliasStore(
            self.config.store_path,
            auto_backup=self.config.get("auto_backup", True),
            max_backups=self.config.get("max_backups", 10),
        )

    @property
    def store(self) -> AliasStore:
        if self._store is None:
            self._store = self.new_store().load()
            self.debug(f"loaded {len(self._store)} aliases from {self._store.storage_path}")
        return self._store

    def integrator(self) -> ShellIntegrator:
        return ShellIntegrator(self.store, self.dialect, self.alias_file)

    def providers(self) -> ProviderManager:
        return ProviderManager.from_config(
            self.config.get("ai_providers", {}), self.config.get("ai_provider")
        )


def print_error(error: AliasCtlError) -> None:
    message = error.message
    if error.cause is not None:
        message += f": {error.cause}"
    console.print(f"[red]✗[/] {escape(message)}")
    for hint in error.hints:
        console.print(f"[dim]  - {escape(hint)}[/]")


def handle_errors(func):
    """Report AliasCtlError nicely and exit with status 1"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except AliasCtlError as e:
            print_error(e)
            raise SystemExit(1)

    return wrapper


def validate_alias_name(name: str) -> None:
    if not name or "=" in name or any(ch.isspace() for ch in name):
        raise click.BadParameter(
            "alias names cannot be empty or contain '=' or whitespace", param_hint="NAME"
        )


@click.group()
@click.option("--shell", "-s", "shell", help="Shell to work with instead of the configured one")
@click.option("--verbose", "-v", is_flag=True, help="Print diagnostic output")
@click.version_option(version=__version__, prog_name="aliasctl")
@click.pass_context
def main(ctx, shell, verbose):
    """aliasctl - manage shell aliases across bash, zsh, fish, ksh, PowerShell and cmd"""
    ctx.obj = Session(shell_override=shell, verbose=verbose)


@main.command()
@click.argument("name")
@click.argument("command", nargs=-1, required=True)
@click.option("--apply", "apply_now", is_flag=True, help="Also write the alias file")
@click.pass_obj
@handle_errors
def add(session, name, command, apply_now):
    """Add or update an alias for the current shell"""
    validate_alias_name(name)
    command = " ".join(command).strip()
    if not command:
        raise click.BadParameter("alias command cannot be empty", param_hint="COMMAND")
    dialect = session.dialect
    record = session.store.get(name)
    existed = record is not None and record.get(dialect) is not None
    session.store.add(name, command, dialect)
    session.store.save()
    verb = "Updated" if existed else "Added"
    console.print(f"[green]✔[/] {verb} alias [cyan]{escape(name)}[/] = '{escape(command)}' ({dialect})")

    if apply_now:
        integrator = session.integrator()
        count = integrator.apply()
        console.print(f"[green]✔[/] Applied {count} aliases to {integrator.alias_file}")
    else:
        console.print("[dim]💡 Run 'aliasctl apply' to write it to your shell config[/]")


@main.command()
@click.argument("name")
@click.pass_obj
@handle_errors
def remove(session, name):
    """Remove an alias from every shell"""
    if not session.store.remove(name):
        raise NotFoundError.for_alias(name, session.store.names())
    session.store.save()
    console.print(f"[green]✔[/] Removed alias: [cyan]{escape(name)}[/]")


@main.command(name="list")
@click.option("--all", "show_all", is_flag=True, help="Show commands for every shell")
@click.pass_obj
@handle_errors
def list_aliases(session, show_all):
    """List aliases for the current shell"""
    store = session.store
    if show_all:
        records = sorted(store.list_all(), key=lambda r: r.name)
        if not records:
            console.print("[yellow]No aliases found.[/] Add one with 'aliasctl add'")
            return
        table = Table(title=f"Your Aliases ({len(records)} total)")
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Shell", style="yellow")
        table.add_column("Command", style="green")
        for record in records:
            for dialect, command in record.commands.items():
                table.add_row(record.name, dialect.value, command)
        console.print(table)
        return

    dialect = session.dialect
    definitions = sorted(store.list(dialect))
    if not definitions:
        console.print(f"[yellow]No aliases found for {dialect}.[/] Add one with 'aliasctl add'")
        return
    table = Table(title=f"Aliases for {dialect} ({len(definitions)} total)")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Command", style="green")
    for name, command in definitions:
        table.add_row(name, command)
    console.print(table)


@main.command()
@click.option("--dry-run", is_flag=True, help="Show the changes without writing them")
@click.option("--no-backup", is_flag=True, help="Do not back up the shell file first")
@click.pass_obj
@handle_errors
def apply(session, dry_run, no_backup):
    """Write the aliases of the current shell into its alias file"""
    integrator = session.integrator()

    if dry_run:
        old_content, new_content = integrator.preview()
        if old_content == new_content:
            console.print(f"[green]✔[/] {integrator.alias_file} is already up to date")
            return
        render.side_by_side_diff(old_content, new_content)
        return

    count = integrator.apply(backup=not no_backup)
    console.print(f"[green]✔[/] Applied {count} aliases to {integrator.alias_file}")
    console.print("\n[bold]Next steps:[/]")
    console.print("  1. Restart your terminal, OR")
    console.print(f"  2. Reload it: [cyan]source {integrator.alias_file}[/]")


@main.command(name="import")
@click.pass_obj
@handle_errors
def import_aliases(session):
    """Import alias definitions from the current shell's alias file"""
    integrator = session.integrator()
    count = integrator.import_from_shell()
    session.store.save()
    console.print(f"[green]✔[/] Imported {count} aliases from {integrator.alias_file}")


@main.command()
@click.argument("shell")
@click.argument("output", type=click.Path(dir_okay=False))
@click.option("--translate", "use_ai", is_flag=True, help="Convert missing commands with the AI provider")
@click.option("--provider", help="AI provider to use instead of the default")
@click.pass_obj
@handle_errors
def export(session, shell, output, use_ai, provider):
    """Export aliases in another shell's syntax to OUTPUT"""
    target = Dialect.from_name(shell)
    integrator = session.integrator()

    capability = None
    if use_ai:
        capability = session.providers().get(provider)
        capability.check()
        session.debug(f"translating with {capability.name} ({capability.model})")

    def report(name, error):
        console.print(f"[yellow]⚠[/] Skipped '{escape(name)}': {escape(error.message)}")

    count = integrator.export(target, Path(output), capability=capability, on_error=report)
    console.print(f"[green]✔[/] Exported {count} aliases for {target} to {output}")


@main.command()
@click.argument("name")
@click.argument("shell")
@click.option("--provider", help="AI provider to use instead of the default")
@click.option("--save", is_flag=True, help="Store the converted command for SHELL")
@click.pass_obj
@handle_errors
def convert(session, name, shell, provider, save):
    """Convert one alias to another shell's syntax"""
    target = Dialect.from_name(shell)
    source = session.dialect
    record = session.store.get(name)
    if record is None:
        raise NotFoundError.for_alias(name, session.store.names())
    command = record.get(source)
    if command is None:
        raise NotFoundError(
            f"{source} command for alias",
            name,
            hints=[f"Add one with 'aliasctl --shell {source} add {name} ...'"],
        )

    if source == target:
        converted = command
    else:
        capability = session.providers().get(provider)
        capability.check()
        converted = definition_command(translate(command, source, target, capability), target)

    console.print(f"[green]✔[/] {target}: {escape(converted)}")
    if save:
        session.store.add(name, converted, target)
        session.store.save()
        console.print(f"[dim]Saved as the {target} command of '{escape(name)}'[/]")


def split_suggestion(text: str, dialect: Dialect):
    """Name and command from an AI suggestion, None if it cannot be read"""
    definition = parse(text, dialect)
    if definition is not None:
        return definition
    if "=" in text:
        name, command = text.split("=", 1)
        name = name.strip().split()[-1] if name.strip() else ""
        command = command.strip().strip("'\"")
        if name and command:
            return name, command
    return None


@main.command()
@click.argument("command", nargs=-1, required=True)
@click.option("--provider", help="AI provider to use instead of the default")
@click.option("--yes", "-y", is_flag=True, help="Accept the suggestion without asking")
@click.pass_obj
@handle_errors
def generate(session, command, provider, yes):
    """Ask the AI provider to suggest an alias for COMMAND"""
    command = " ".join(command)
    dialect = session.dialect
    capability = session.providers().get(provider)
    capability.check()

    suggestion = generate_alias(command, dialect, capability)
    console.print(f"[cyan]Suggestion:[/] {escape(suggestion)}")

    parsed = split_suggestion(suggestion, dialect)
    if parsed is None:
        console.print("[yellow]⚠[/] Could not read an alias definition from the suggestion")
        if yes:
            return
        name = click.prompt("Alias name")
        alias_command = click.prompt("Command", default=command)
    else:
        name, alias_command = parsed
        if not yes:
            if not click.confirm(f"Add alias '{name}'?", default=True):
                name = click.prompt("Alias name", default=name)
                if not click.confirm(f"Add alias '{name}'?", default=True):
                    console.print("[yellow]Cancelled[/]")
                    return

    validate_alias_name(name)
    session.store.add(name, alias_command, dialect)
    session.store.save()
    console.print(f"[green]✔[/] Added alias [cyan]{escape(name)}[/] = '{escape(alias_command)}' ({dialect})")


@main.command(name="set-shell")
@click.argument("shell")
@click.pass_obj
@handle_errors
def set_shell(session, shell):
    """Remember SHELL as the default shell"""
    dialect = Dialect.from_name(shell)
    session.config.set("default_shell", dialect.value)
    console.print(f"[green]✔[/] Default shell set to {dialect}")


@main.command(name="set-file")
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_obj
@handle_errors
def set_file(session, path):
    """Remember PATH as the alias file to write"""
    alias_file = Path(path).expanduser().resolve()
    session.config.set("default_alias_file", str(alias_file))
    console.print(f"[green]✔[/] Alias file set to {alias_file}")


@main.command(name="detect-shell")
@click.pass_obj
@handle_errors
def detect_shell(session):
    """Detect the running shell and make it the default"""
    detector = session.detector
    dialect = detector.detect_current_dialect()
    alias_file = detector.default_alias_file(dialect)
    session.config.config["default_shell"] = dialect.value
    session.config.config["default_alias_file"] = str(alias_file)
    session.config.save()
    console.print(f"[green]✔[/] Detected shell: [cyan]{dialect}[/]")
    console.print(f"[dim]Alias file: {alias_file}[/]")


@main.command(name="configure-ai")
@click.argument("provider")
@click.argument("endpoint")
@click.argument("model")
@click.option("--api-key", help="API key (required for openai and anthropic)")
@click.option("--default/--no-default", "make_default", default=True,
              help="Use this provider when --provider is not given")
@click.pass_obj
@handle_errors
def configure_ai(session, provider, endpoint, model, api_key, make_default):
    """Add or replace an AI provider"""
    instance = create_provider(provider.lower(), endpoint, model, api_key=api_key)
    instance.check()

    manager = session.providers()
    manager.add(instance, make_default=make_default)
    session.config.config["ai_providers"] = manager.to_config()
    session.config.config["ai_provider"] = manager.default
    session.config.save()

    console.print(f"[green]✔[/] Configured {instance.name} with model {escape(model)}")
    if manager.default == instance.name:
        console.print(f"[dim]{instance.name} is the default provider[/]")
    if api_key:
        console.print(f"[yellow]⚠[/] The API key is stored in plain text in {session.config.config_path}")


@main.command(name="list-providers")
@click.pass_obj
@handle_errors
def list_providers(session):
    """Show configured AI providers"""
    manager = session.providers()
    if not manager.names():
        raise ConfigurationError("no AI providers configured",
                                 hints=["Add one with 'aliasctl configure-ai'"])
    table = Table(title="AI Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Endpoint")
    table.add_column("Model", style="green")
    table.add_column("Default", justify="center")
    for name in manager.names():
        instance = manager.get(name)
        table.add_row(name, instance.endpoint, instance.model, "✔" if name == manager.default else "")
    console.print(table)


@main.command(name="export-store")
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("--format", "-f", "fmt", type=click.Choice(["json", "yaml"]),
              help="Output format, taken from the file suffix when omitted")
@click.option("--filter-shell", help="Only export aliases defined for this shell")
@click.pass_obj
@handle_errors
def export_store(session, file, fmt, filter_shell):
    """Save the whole alias collection to FILE"""
    dialect = Dialect.from_name(filter_shell) if filter_shell else None
    porter = AliasPorter(session.store)
    success, message = porter.export_to_file(Path(file), fmt, dialect=dialect)
    if success:
        console.print(f"[green]✔[/] {message}")
    else:
        console.print(f"[red]✗[/] {message}")
        raise SystemExit(1)


@main.command(name="import-store")
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("--merge/--replace", default=True, help="Merge with existing or replace")
@click.pass_obj
@handle_errors
def import_store(session, file, merge):
    """Load an alias collection saved with export-store"""
    porter = AliasPorter(session.store)
    success, message = porter.import_from_file(Path(file), merge=merge)
    if not success:
        console.print(f"[red]✗[/] {message}")
        raise SystemExit(1)
    session.store.save()
    console.print(f"[green]✔[/] {message}")
    console.print("[dim]💡 Run 'aliasctl apply' to add these to your shell config[/]")


@main.command()
@click.pass_obj
@handle_errors
def restore(session):
    """Restore the alias store from its latest backup"""
    # the current file may be corrupted, so it is never loaded here
    store = session.new_store()
    if store.restore_latest_backup():
        console.print(f"[green]✔[/] Restored {len(store)} aliases from backup")
    else:
        console.print("[yellow]No backups found[/]")


if __name__ == "__main__":
    main()
