"""Sphinx configuration for the Contact Book API reference."""

import os
import sys

sys.path.insert(0, os.path.abspath(".."))

project = "Contact Book API"
copyright = "2024, Contact Book API maintainers"
author = "Contact Book API maintainers"
release = "0.1.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
]

# Autodoc imports app.database, which connects to DATABASE_URL.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

autodoc_member_order = "bysource"
napoleon_google_docstring = True

exclude_patterns = ["_build"]

html_theme = "alabaster"
html_title = "Contact Book API"
html_theme_options = {
    "description": "Multi-tenant contact book with token auth and paginated search",
}
