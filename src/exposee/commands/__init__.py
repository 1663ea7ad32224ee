"""Built-in ``exposee`` sub-commands."""
