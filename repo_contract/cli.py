"""CLI entrypoint for repo-contract."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer

from repo_contract import __version__
from repo_contract.branch_protection import (
    BranchProtectionReport,
    RepositoryStateProvider,
    check_branch_protection,
    summarize_branch_protection,
)
from repo_contract.config import CliConfig, load_cli_config
from repo_contract.contract import Contract
from repo_contract.diff import (
    DiffReport,
    combine_summaries,
    diff_branch_protection,
    diff_required_files,
)
from repo_contract.errors import AlreadyExistsError, ContractError, InvalidConfigError
from repo_contract.github import DEFAULT_API_URL, GithubClient, resolve_repository
from repo_contract.loader import LoadedContract, load_contract, load_document, profile_path_for
from repo_contract.output import (
    render_check_human,
    render_check_json,
    render_diff_human,
    render_diff_json,
    render_diff_yaml,
    render_validate_human,
    render_validate_json,
)
from repo_contract.required_files import RequiredFilesReport, check_required_files
from repo_contract.scaffold import init_contract_files
from repo_contract.schema import schema_json
from repo_contract.validation import validate_contract_file

app = typer.Typer(
    name="repo-contract",
    no_args_is_help=True,
    help="Check a repository against its contract: required files and branch protection.",
)

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_ERROR = 2

_LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase log verbosity (-v, -vv)."),
    ] = 0,
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable colored output.")] = False,
) -> None:
    """Root command callback."""
    _ = version
    logging.basicConfig(
        level=_LOG_LEVELS[min(verbose, len(_LOG_LEVELS) - 1)],
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )
    if no_color:
        ctx.color = False


@app.command("validate")
def validate_command(
    path: Annotated[Path | None, typer.Argument(help="Contract file to validate.")] = None,
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to contract file.")
    ] = None,
    with_profile: Annotated[
        bool, typer.Option("--with-profile", "-p", help="Also validate the referenced profile.")
    ] = False,
    format: Annotated[
        str | None, typer.Option("--format", "-f", help="Output format: human|json.")
    ] = None,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="No output when valid.")] = False,
) -> None:
    """Validate a contract file against the schema."""
    with _handle_errors():
        cli_config = _load_cli_config()
        output_format = _resolve_format(format, cli_config.format, {"human", "json"})
        config_path = cli_config.contract_path(path, config)
        _require_file(config_path, "Contract file not found")

        reports = [validate_contract_file(config_path)]
        if with_profile:
            profile = _profile_name(config_path)
            if profile is not None:
                profile_path = profile_path_for(config_path, profile)
                _require_file(profile_path, "Profile not found")
                reports.append(validate_contract_file(profile_path))

        valid = all(report.valid for report in reports)
        if not (quiet and valid):
            if output_format == "json":
                typer.echo(render_validate_json(reports))
            else:
                typer.echo(render_validate_human(reports))

    raise typer.Exit(code=EXIT_OK if valid else EXIT_VIOLATIONS)


@app.command("check")
def check_command(
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to contract file.")
    ] = None,
    remote: Annotated[
        str | None, typer.Option("--remote", "-r", help="GitHub repository (owner/repo or URL).")
    ] = None,
    rules: Annotated[
        str | None,
        typer.Option(help="Comma-separated rules: required_files,branch_protection."),
    ] = None,
    format: Annotated[
        str | None, typer.Option("--format", "-f", help="Output format: human|json.")
    ] = None,
    strict: Annotated[
        bool, typer.Option("--strict", "-s", help="Treat warnings as failures.")
    ] = False,
    quiet: Annotated[
        bool, typer.Option("--quiet", "-q", help="No output when nothing failed.")
    ] = False,
) -> None:
    """Check the repository against its contract."""
    with _handle_errors():
        cli_config = _load_cli_config()
        selected = cli_config.resolve_rules(rules)
        _reject_remote_required_files(remote, selected)
        config_path = cli_config.contract_path(config)
        _require_file(config_path, "Contract file not found")
        is_strict = cli_config.resolve_strict(True if strict else None)
        output_format = _resolve_format(format, cli_config.format, {"human", "json"})

        loaded = load_contract(config_path)
        branch_reports: list[BranchProtectionReport] = []
        if "branch_protection" in selected:
            branch_reports = _branch_protection_reports(loaded.contract, remote, cli_config)
        files_report: RequiredFilesReport | None = None
        if "required_files" in selected:
            files_report = check_required_files(
                _contract_root(loaded), loaded.contract.required_files
            )

        summary = combine_summaries(
            files_report.summary if files_report is not None else None,
            summarize_branch_protection(branch_reports),
        )
        has_failures = summary.has_failures(strict=is_strict)
        quiet_ok = quiet and summary.error == 0 and summary.warning == 0
        if not quiet_ok:
            if output_format == "json":
                typer.echo(
                    render_check_json(
                        branch_reports, files_report, summary, valid=not has_failures
                    )
                )
            else:
                typer.echo(render_check_human(branch_reports, files_report, summary))

    raise typer.Exit(code=EXIT_VIOLATIONS if has_failures else EXIT_OK)


@app.command("diff")
def diff_command(
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to contract file.")
    ] = None,
    remote: Annotated[
        str | None, typer.Option("--remote", "-r", help="GitHub repository (owner/repo or URL).")
    ] = None,
    rules: Annotated[
        str | None,
        typer.Option(help="Comma-separated rules: required_files,branch_protection."),
    ] = None,
    format: Annotated[
        str | None, typer.Option("--format", "-f", help="Output format: human|json|yaml.")
    ] = None,
) -> None:
    """Show differences between the contract and the repository."""
    with _handle_errors():
        cli_config = _load_cli_config()
        selected = cli_config.resolve_rules(rules)
        _reject_remote_required_files(remote, selected)
        config_path = cli_config.contract_path(config)
        _require_file(config_path, "Contract file not found")
        output_format = _resolve_format(format, cli_config.format, {"human", "json", "yaml"})

        loaded = load_contract(config_path)
        report = DiffReport()
        if "required_files" in selected:
            files_report = check_required_files(
                _contract_root(loaded), loaded.contract.required_files
            )
            report = diff_required_files(files_report.checks)
        if "branch_protection" in selected:
            branch_reports = _branch_protection_reports(loaded.contract, remote, cli_config)
            report.diffs.extend(diff_branch_protection(branch_reports))

        if output_format == "json":
            typer.echo(render_diff_json(report))
        elif output_format == "yaml":
            typer.echo(render_diff_yaml(report), nl=False)
        else:
            typer.echo(render_diff_human(report))

    raise typer.Exit(code=EXIT_VIOLATIONS if report.diffs else EXIT_OK)


@app.command("init")
def init_command(
    output: Annotated[
        Path, typer.Option("--output", "-o", help="Path of the contract file to create.")
    ] = Path("contract.yml"),
    profile: Annotated[
        str | None, typer.Option("--profile", "-p", help="Also create contract.<profile>.yml.")
    ] = None,
    from_repo: Annotated[
        bool, typer.Option("--from-repo", help="Only list files that already exist.")
    ] = False,
    force: Annotated[bool, typer.Option("--force", "-f", help="Overwrite existing files.")] = False,
) -> None:
    """Create a starter contract file."""
    try:
        outcome = init_contract_files(
            Path.cwd(),
            output_path=output,
            profile=profile,
            from_repo=from_repo,
            force=force,
        )
    except AlreadyExistsError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=EXIT_VIOLATIONS) from exc
    for created in outcome.created:
        typer.echo(f"Created: {created}")


@app.command("schema")
def schema_command() -> None:
    """Print the contract JSON Schema."""
    typer.echo(schema_json())


@app.command("config")
def config_command(
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: human|json.")
    ] = "human",
) -> None:
    """Show the resolved CLI configuration."""
    with _handle_errors():
        output_format = _resolve_format(format, None, {"human", "json"})
        cli_config = _load_cli_config()
    payload = cli_config.to_dict()
    payload["contract_path"] = str(cli_config.contract_path())

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- contract_path: {payload['contract_path']}",
        f"- format: {payload['format'] or 'human'}",
        f"- strict: {cli_config.resolve_strict(None)}",
        f"- rules: {cli_config.resolve_rules(None)}",
        f"- github.token: {'set' if cli_config.github.token else 'not set'}",
        f"- github.api_url: {cli_config.github.api_url or DEFAULT_API_URL}",
    ]
    typer.echo("\n".join(lines))


def main() -> None:
    """Console script entrypoint."""
    app()


def build_provider(cli_config: CliConfig) -> GithubClient:
    """Create the GitHub provider; a token is required."""
    token = cli_config.github.token
    if not token:
        raise InvalidConfigError("set GITHUB_TOKEN or github.token in .contract.toml")
    return GithubClient(token, base_url=cli_config.github.api_url or DEFAULT_API_URL)


def _branch_protection_reports(
    contract: Contract,
    remote: str | None,
    cli_config: CliConfig,
) -> list[BranchProtectionReport]:
    if contract.branch_protection is None:
        return []
    repo = resolve_repository(remote, env_repository=cli_config.env_repository, cwd=Path.cwd())
    provider: RepositoryStateProvider = build_provider(cli_config)
    try:
        return check_branch_protection(provider, repo, contract.branch_protection)
    finally:
        close = getattr(provider, "close", None)
        if callable(close):
            close()


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except ContractError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=EXIT_ERROR) from exc


def _load_cli_config() -> CliConfig:
    return load_cli_config(Path.cwd())


def _resolve_format(value: str | None, configured: str | None, allowed: set[str]) -> str:
    if value is not None:
        resolved = value.lower()
        if resolved not in allowed:
            choices = ", ".join(sorted(allowed))
            raise typer.BadParameter(f"format must be one of: {choices}", param_hint="--format")
        return resolved
    if configured is not None and configured.lower() in allowed:
        return configured.lower()
    return "human"


def _require_file(path: Path, message: str) -> None:
    if not path.exists():
        typer.echo(f"{message}: {path}", err=True)
        raise typer.Exit(code=EXIT_ERROR)


def _reject_remote_required_files(remote: str | None, selected: list[str]) -> None:
    if remote is not None and "required_files" in selected:
        typer.echo(
            "required_files cannot be evaluated against a remote repository; "
            "use --rules branch_protection",
            err=True,
        )
        raise typer.Exit(code=EXIT_ERROR)


def _profile_name(config_path: Path) -> str | None:
    document = load_document(config_path)
    if isinstance(document, dict):
        profile = document.get("profile")
        if isinstance(profile, str):
            return profile
    return None


def _contract_root(loaded: LoadedContract) -> Path:
    return loaded.base_path.parent
