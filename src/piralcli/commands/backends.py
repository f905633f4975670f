"""The ``pb backends`` listing: installed backends and what they provide."""

from __future__ import annotations

from piralcli.output import info, print_table, suggest


def list_backends() -> None:
    """List the loaded backends and their capabilities."""
    from piralcli.backends import ENTRY_POINT_GROUP, get_backend_manager

    rows = get_backend_manager().list_backends()
    if not rows:
        info("No backends are loaded.")
        suggest(f"Install a package registering the '{ENTRY_POINT_GROUP}' entry point.")
        return

    print_table(
        ["Name", "Version", "Capabilities"],
        [[row["name"], row["version"], row["capabilities"]] for row in rows],
    )
