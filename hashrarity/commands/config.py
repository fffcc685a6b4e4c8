import json
from pathlib import Path

import click

from ..config import load_config, save_config, get_config_path, get_default_config


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("generate")
@click.option("-o", "--output", type=click.Path(dir_okay=False),
              help="Where to write (default: ~/.hashrarity/config.json); .toml/.yaml pick the format")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def generate_config(output, force):
    """Write the default configuration to a file."""
    config_path = Path(output) if output else get_config_path()
    if config_path.exists() and not force:
        raise click.ClickException(f"{config_path} already exists (use --force to overwrite)")

    written = save_config(get_default_config(), config_path)
    click.echo(json.dumps({"config_path": str(written)}))


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSONL")
@click.option("--path", is_flag=True, help="Show the config file path being used")
def show_config(pretty, path):
    """Show the current configuration with all merges applied.

    By default, outputs single-line JSON (JSONL format).
    Use --pretty for human-readable formatted output.
    Use --path to see which config file is being used.
    """
    if path:
        click.echo(json.dumps({"config_path": str(get_config_path())}))
        return

    config = load_config()

    if pretty:
        click.echo(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        click.echo(json.dumps(config, ensure_ascii=False))
