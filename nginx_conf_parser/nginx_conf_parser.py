import json
import logging
from pathlib import Path

import click

from .cli_utils import reconstruct_command_line
from .pipeline import (
    ConverterConfig,
    NginxConfError,
    get_value,
    read_config_file,
    to_python,
    write_config_file,
    write_output,
)

logger = logging.getLogger(__name__)


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option(
    "--to",
    "target",
    default=None,
    type=click.Choice(["json", "conf"]),
    help="Output format (default: conf for .json input, json otherwise)",
)
@click.option("--no-includes", is_flag=True, default=False, help="Keep include directives instead of resolving them")
@click.option("--ignore-include-errors", is_flag=True, default=False, help="Skip includes that match no files")
@click.option("--includes-root", default=None, type=click.Path(file_okay=False, resolve_path=True))
@click.option("--select", "-s", default=None, type=str, help="Dotted path of the subtree to output (JSON output only)")
@click.option(
    "--add-generation-comment",
    is_flag=True,
    default=False,
    help="Prefix generated configuration with the command that produced it",
)
@click.option("--force", "-f", is_flag=True, default=False, help="Overwrite the output file if it exists")
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.argument("path", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.argument("output", type=click.Path(resolve_path=True))
def nginx_conf_parser(
    config,
    target,
    no_includes,
    ignore_include_errors,
    includes_root,
    select,
    add_generation_comment,
    force,
    verbose,
    path,
    output,
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if config is not None:
        with open(config) as f:
            config = ConverterConfig.from_dict(json.load(f))
    else:
        config = ConverterConfig()

    # CLI flags override the config file
    if no_includes:
        config.parse_includes = False
    if ignore_include_errors:
        config.ignore_include_errors = True
    if includes_root is not None:
        config.includes_root = includes_root
    if add_generation_comment:
        config.add_generation_comment = True

    if target is None:
        target = "conf" if Path(path).suffix == ".json" else "json"

    if select is not None and target != "json":
        raise click.UsageError("--select only applies to JSON output")

    logger.debug("Converting %s to %s", path, target)

    try:
        if target == "json":
            value = read_config_file(path, config)
            if select is not None:
                value = get_value(value, select)
                if value is None:
                    raise click.BadParameter(f"Path '{select}' not found in {Path(path).name}", param_hint="--select")
            content = json.dumps(to_python(value), indent=2) + "\n"
            write_output(Path(output), content, "json", config, overwrite=force)
        else:
            with open(path) as f:
                data = json.load(f)
            header = None
            if config.add_generation_comment:
                header = f"Generated by: {reconstruct_command_line(nginx_conf_parser)}"
            write_config_file(output, data, overwrite=force, config=config, header=header)
    except (NginxConfError, FileExistsError, ValueError, TypeError) as e:
        raise click.ClickException(str(e)) from e
