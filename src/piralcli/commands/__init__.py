"""Built-in sub-commands that exist next to the registry commands.

* :mod:`~piralcli.commands.config` -- view and modify global settings
  (``pb config``).
* :mod:`~piralcli.commands.listing` -- the ``commands`` overview shared by
  all three console scripts.
"""
