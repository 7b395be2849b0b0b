"""Serve files stored in nested sublevels of a database over HTTP."""
