import click
import json
from pathlib import Path

from gitcsemver.config import load_config, options_from_config, get_config_path, get_example_config, save_config
from gitcsemver.exit_codes import ConfigError
from gitcsemver.infra import GitRepository


def _root(path: str) -> str:
    repo = GitRepository.open(path)
    return repo.root if repo is not None else str(Path(path).resolve())


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("show")
@click.argument('path', default='.', required=False, type=click.Path(file_okay=False))
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSONL")
@click.option("--path", "show_path", is_flag=True, help="Show the config file path being used")
def show_config(path, pretty, show_path):
    """Show the options of a repository with all merges applied.

    By default, outputs single-line JSON (JSONL format).
    Use --pretty for human-readable formatted output.
    Use --path to see which config file is being used.
    """
    root = _root(path)
    if show_path:
        config_path = get_config_path(root)
        print(json.dumps({"config_path": str(config_path) if config_path else None}))
        return

    try:
        options = options_from_config(load_config(root))
    except ConfigError as e:
        raise click.ClickException(str(e))

    if pretty:
        print(json.dumps(options.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(json.dumps(options.to_dict(), ensure_ascii=False))


@config_cmd.command("init")
@click.argument('path', default='.', required=False, type=click.Path(file_okay=False))
@click.option("--format", "fmt", type=click.Choice(['json', 'toml', 'yaml']), default='json',
              help="File format (default: json)")
@click.option("--force", is_flag=True, help="Overwrite an existing options file")
def init_config(path, fmt, force):
    """Write an options file at the repository root."""
    root = _root(path)
    existing = get_config_path(root)
    if existing is not None and not force:
        raise click.ClickException(f"Options file already exists: {existing} (use --force to overwrite)")

    target = Path(root) / f"gitcsemver.{fmt}"
    save_config(get_example_config(), target)
    click.echo(f"Options written to {target}")
