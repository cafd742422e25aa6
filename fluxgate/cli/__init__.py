from fluxgate.cli.cli import app, main

__all__ = ["app", "main"]
