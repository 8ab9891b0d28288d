"""Configuration commands for the hypernav CLI."""

from cyclopts import App

from hypernav.config import get_config

config_app = App(name="config", help="Manage client configuration")

SECRET_KEYS = ("auth.password", "auth.token", "auth.client_secret", "auth.refresh_token")


def _display(key: str, value: object) -> str:
    if key in SECRET_KEYS and value:
        return "********"
    return str(value)


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Set a configuration setting.

    Args:
        key: Configuration key, e.g. bookmark or auth.type
        value: Configuration value
        global_: If True, set in global config. If False, set in local config.
    """
    config = get_config(use_global=global_)
    config.set(key, value)
    scope = "global" if global_ else "local"
    print(f"Set {key} = {_display(key, value)} ({scope})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Unset a configuration setting."""
    config = get_config(use_global=global_)
    config.unset(key)
    scope = "global" if global_ else "local"
    print(f"Unset {key} ({scope})")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Show a configuration setting; secrets are masked."""
    value = get_config(use_global=global_).get(key)
    if value is None:
        print(f"{key} is not set")
    else:
        print(f"{key} = {_display(key, value)}")


@config_app.command(name="list")
def list_config(global_: bool = False) -> None:
    """List all configuration settings."""
    settings = get_config(use_global=global_).list()
    if not settings:
        scope = "global" if global_ else "local"
        print(f"No {scope} configuration settings")
        return

    for key, value in settings.items():
        print(f"{key} = {_display(key, value)}")
