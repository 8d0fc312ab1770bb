"""monopack: split a JavaScript monorepo into independently published packages."""

__version__ = "0.1.0"
