"""piralcli -- Build, debug, scaffold, and publish Piral instances and pilets.

This package provides the command-line tooling for the Piral micro-frontend
ecosystem. A single registry of fully-qualified commands (``debug-piral``,
``build-pilet``, ...) is exposed through three console scripts:

* ``pb`` -- every command under its full name.
* ``piral`` -- only the Piral instance commands, with the ``-piral`` suffix
  stripped (``piral debug``, ``piral build``).
* ``pilet`` -- only the pilet commands, with the ``-pilet`` suffix stripped
  (``pilet pack``, ``pilet publish``).

Typical workflow::

    pilet new my-app --target my-pilet   # scaffold a pilet
    pilet debug                          # run it against the app shell
    pilet pack && pilet publish --url https://feed.example.com/api/v1/pilet

Modules:
    app: Typer application factories and console-script entry points.
    registry: Command descriptors, the command registry, and scoped views.
    generator: Turns command descriptors into Typer commands.
    apps: The operations behind each command.
    backends: Pluggable bundler, scaffolder, and publisher backends.
    config: XDG-aware configuration resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.11.0"
