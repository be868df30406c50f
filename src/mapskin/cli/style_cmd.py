"""
Style commands: classify, list entities, snapshot and re-skin style documents
offline with the in-memory engine.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional

import click
import yaml
from loguru import logger
from rich.table import Table

from mapskin.config import AppConfig, ConfigurationError
from mapskin.engine import InMemoryEngine
from mapskin.studio import StudioConfig, StudioDefaults, StyleStudio, load_studio_defaults
from mapskin.utils.console import create_console

console = create_console()

CUSTOM_STYLE_KEY = "custom"


def get_studio_defaults(ctx) -> StudioDefaults:
    """Studio defaults extended by the application configuration"""
    app_config: AppConfig = ctx.obj["app_config"]
    settings = app_config.studio
    try:
        return load_studio_defaults(
            presets_file=settings.presets_file,
            basemaps=app_config.basemaps,
            startup_basemap=settings.startup_basemap,
        )
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


def _resolve_style_key(defaults: StudioDefaults, style: str) -> str:
    """Catalogue key as-is; a path or URL is registered under a custom key."""
    if defaults.is_known_basemap(style):
        return style
    defaults.basemaps[CUSTOM_STYLE_KEY] = style
    return CUSTOM_STYLE_KEY


async def _open_studio(app_config: AppConfig, defaults: StudioDefaults, style: str) -> StyleStudio:
    loop = asyncio.get_running_loop()
    engine = InMemoryEngine(loop, request_timeout=app_config.studio.request_timeout)

    defaults.startup.basemap = _resolve_style_key(defaults, style)
    studio = StyleStudio(engine, loop, defaults, app_config.studio)
    studio.start()
    await studio.wait_until_idle()

    if not studio.style_ready:
        raise click.ClickException(f"Could not load style: {style}")
    return studio


def open_studio(ctx, style: str, defaults: Optional[StudioDefaults] = None, action=None) -> Any:
    """
    Load ``style`` into a fresh studio and run ``action(studio)``.

    Returns:
        Whatever ``action`` returns, or the studio itself
    """
    app_config: AppConfig = ctx.obj["app_config"]
    defaults = defaults or get_studio_defaults(ctx)

    async def _run():
        studio = await _open_studio(app_config, defaults, style)
        if action is None:
            return studio
        result = action(studio)
        await studio.wait_until_idle()
        return result

    return asyncio.run(_run())


def write_document(data: Dict[str, Any], output: Optional[Path], fmt: str = "json") -> None:
    """Write JSON/YAML to ``output`` or stdout."""
    if fmt == "yaml":
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    else:
        text = json.dumps(data, indent=2, ensure_ascii=False)

    if output is None:
        click.echo(text)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    logger.info(f"Written {output}")


@click.command()
@click.pass_context
def presets(ctx):
    """List built-in and configured presets."""
    defaults = get_studio_defaults(ctx)

    table = Table(title="Presets", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Basemap", style="green")
    table.add_column("Sections")
    table.add_column("Description")

    for name, preset in sorted(defaults.presets.items()):
        sections = [
            key
            for key, value in preset.model_dump(by_alias=True).items()
            if isinstance(value, dict) and value
        ]
        table.add_row(name, preset.basemap or "-", ", ".join(sections), preset.description)

    console.print(table)


@click.command()
@click.argument("style")
@click.option("--json", "as_json", is_flag=True, help="Print the groups as JSON")
@click.pass_context
def classify(ctx, style, as_json):
    """Classify the layers of STYLE (basemap key, path or URL) into groups."""
    groups = open_studio(ctx, style, action=lambda studio: studio.classification())

    if as_json:
        click.echo(json.dumps(groups, indent=2))
        return

    table = Table(title=f"Layer groups: {style}", show_header=True, header_style="bold magenta")
    table.add_column("Group", style="cyan")
    table.add_column("Layers", justify="right")
    table.add_column("Ids")
    for key, ids in groups.items():
        preview = ", ".join(ids[:4]) + (" …" if len(ids) > 4 else "")
        table.add_row(key, str(len(ids)), preview)
    console.print(table)


@click.command()
@click.argument("style")
@click.option("--json", "as_json", is_flag=True, help="Print the listing as JSON")
@click.pass_context
def entities(ctx, style, as_json):
    """List the feature entities of STYLE with their capabilities."""
    rows = open_studio(
        ctx, style, action=lambda studio: [row.to_dict() for row in studio.entity_listing()]
    )

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    table = Table(title=f"Entities: {style}", show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan")
    table.add_column("Label")
    table.add_column("Layers", justify="right")
    table.add_column("Visible")
    table.add_column("Color")
    table.add_column("Opacity", justify="right")
    table.add_column("Width", justify="right")

    def _cell(has: bool, value: Any) -> str:
        return str(value) if has else "-"

    for row in rows:
        table.add_row(
            row["key"],
            row["label"],
            str(row["layerCount"]),
            "✓" if row["visible"] else "✗",
            _cell(row["hasColor"], row["color"]),
            _cell(row["hasOpacity"], row["opacity"]),
            _cell(row["hasWidth"], row["width"]),
        )
    console.print(table)


@click.command()
@click.argument("style")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Output file (default: stdout)")
@click.option(
    "--format", "fmt", type=click.Choice(["json", "yaml"]), default="json", help="Output format"
)
@click.option(
    "--reconciled",
    is_flag=True,
    help="Write the reconciled studio configuration instead of the raw snapshot",
)
@click.pass_context
def snapshot(ctx, style, output, fmt, reconciled):
    """Capture the current look of STYLE as a snapshot or configuration."""

    def _capture(studio: StyleStudio) -> Dict[str, Any]:
        if reconciled:
            return studio.export_config()
        return studio.snapshot.to_dict()

    write_document(open_studio(ctx, style, action=_capture), output, fmt)


@click.command()
@click.argument("style")
@click.option("--preset", "-p", "preset_name", help="Preset to apply")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, path_type=Path),
    help="Saved studio configuration (JSON or YAML)",
)
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Output style file (default: stdout)")
@click.option("--save-config", type=click.Path(path_type=Path), help="Also write the applied configuration")
@click.pass_context
def apply(ctx, style, preset_name, config_file, output, save_config):
    """Re-skin STYLE with a preset and/or a saved configuration."""
    defaults = get_studio_defaults(ctx)

    if preset_name and preset_name not in defaults.presets:
        raise click.BadParameter(
            f"Unknown preset '{preset_name}'. Available: {', '.join(sorted(defaults.presets))}",
            param_hint="--preset",
        )

    saved: Optional[StudioConfig] = None
    if config_file:
        try:
            data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
            saved = StudioConfig.from_dict(data)
        except (yaml.YAMLError, ValueError) as e:
            raise click.BadParameter(f"Invalid configuration file: {e}", param_hint="--config")

    def _apply(studio: StyleStudio) -> Dict[str, Any]:
        if saved is not None:
            restored = saved.clone()
            restored.basemap = studio.current_basemap
            studio.load_config(restored)
        if preset_name:
            # Keep the given style; only the preset's sections are applied
            studio.apply_preset(preset_name, switch_basemap=False)
        return {"style": studio.export_style(), "config": studio.export_config()}

    result = open_studio(ctx, style, defaults=defaults, action=_apply)
    write_document(result["style"], output)
    if save_config:
        write_document(result["config"], save_config, "yaml" if save_config.suffix in (".yaml", ".yml") else "json")
