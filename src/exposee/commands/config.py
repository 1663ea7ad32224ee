"""``exposee config``: inspect and edit the user configuration file.

Settings are addressed as ``section.field`` where the section is one of
:class:`~exposee.models.GlobalConfig`'s ``request``, ``sync`` or ``cache``.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from exposee.exit_codes import EXIT_INVALID_USAGE, EXIT_SUCCESS
from exposee.models import GlobalConfig
from exposee.output import error, info, print_config, success

config_app = typer.Typer(no_args_is_help=True)

_NULL_VALUES = ("none", "null")


def _split_setting(key: str) -> tuple[str, str]:
    """Split ``section.field``, rejecting anything GlobalConfig does not define."""
    section, _, field = key.partition(".")
    section_field = GlobalConfig.model_fields.get(section)
    if section_field is None or not field or "." in field:
        sections = ", ".join(GlobalConfig.model_fields)
        raise ValueError(f"Unknown setting '{key}': expected <section>.<field> with section in {sections}")
    if field not in section_field.annotation.model_fields:
        raise ValueError(f"Unknown setting '{key}'")
    return section, field


def _with_setting(config: GlobalConfig, section: str, field: str, value: str) -> GlobalConfig:
    """Return *config* with one setting replaced, validated by its own type.

    The literal string is tried first, so ``cache.backend none`` selects the
    ``none`` backend. A null word then clears an optional setting.

    Raises:
        ValidationError: If neither reading of *value* is valid.
    """
    data = config.model_dump(mode="json")
    candidates: list[object] = [value]
    if value.lower() in _NULL_VALUES:
        candidates.append(None)
    for candidate in candidates:
        data[section][field] = candidate
        try:
            return GlobalConfig.model_validate(data)
        except ValidationError as exc:
            failure = exc
    raise failure


@config_app.command("show")
def config_show() -> None:
    """Show the effective configuration, environment overrides included.

    Example::

        exposee config show
        exposee --json config show
    """
    from exposee.config import get_config_dir, resolve_config
    from exposee.exceptions import ConfigError

    try:
        config = resolve_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config file: {get_config_dir() / 'config.json'}")
    print_config(config)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Setting as section.field, e.g. 'cache.backend'."),
    value: str = typer.Argument(help="New value; 'none' clears an optional setting."),
) -> None:
    """Change one setting in the user configuration file.

    The value is parsed by the setting's own type, so ``request.timeout``
    takes a number and ``request.verify_ssl`` takes true/false.

    Example::

        exposee config set cache.backend disk
        exposee config set sync.time_shift_threshold_seconds 3600
        exposee config set cache.ttl_seconds none
    """
    from exposee.config import load_global_config, save_global_config

    try:
        section, field = _split_setting(key)
    except ValueError as exc:
        error(str(exc))
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    try:
        config = _with_setting(load_global_config(), section, field, value)
    except ValidationError as exc:
        reason = exc.errors()[0]["msg"]
        error(f"Invalid value for {key}: {value!r} ({reason})")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(config)
    success(f"{key} = {getattr(getattr(config, section), field)}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Overwrite the configuration file with the defaults.

    Example::

        exposee config reset --force
    """
    from exposee.config import save_global_config

    if not force and not typer.confirm("Reset all settings to defaults?"):
        info("Cancelled.")
        raise typer.Exit(code=EXIT_SUCCESS)

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
