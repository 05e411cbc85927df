"""Core progression logic: catalog, levels, session engine, timer."""
