"""The operations behind each command, one per command family.

Every operation has the signature ``(base_dir, options) -> result``, where
``options`` is the family's Pydantic options model. The ``*_defaults``
records hold the default options; the registry reads them to populate flag
defaults.
"""

from piralcli.apps.pilet import (
    build_pilet,
    build_pilet_defaults,
    debug_pilet,
    debug_pilet_defaults,
    new_pilet,
    new_pilet_defaults,
    pack_pilet,
    pack_pilet_defaults,
    publish_pilet,
    publish_pilet_defaults,
    upgrade_pilet,
    upgrade_pilet_defaults,
    validate_pilet,
    validate_pilet_defaults,
)
from piralcli.apps.piral import (
    build_piral,
    build_piral_defaults,
    debug_piral,
    debug_piral_defaults,
    new_piral,
    new_piral_defaults,
    validate_piral,
    validate_piral_defaults,
)

__all__ = [
    "build_pilet",
    "build_pilet_defaults",
    "build_piral",
    "build_piral_defaults",
    "debug_pilet",
    "debug_pilet_defaults",
    "debug_piral",
    "debug_piral_defaults",
    "new_pilet",
    "new_pilet_defaults",
    "new_piral",
    "new_piral_defaults",
    "pack_pilet",
    "pack_pilet_defaults",
    "publish_pilet",
    "publish_pilet_defaults",
    "upgrade_pilet",
    "upgrade_pilet_defaults",
    "validate_pilet",
    "validate_pilet_defaults",
]
