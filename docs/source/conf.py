import pathlib
import sys

sys.path.insert(0, str(pathlib.Path("..", "..").resolve()))

import vcdomlem  # noqa: E402

# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

# -- Project information -----------------------------------------------------

project = "vcdomlem"
release = "0.1.0"

# -- General configuration ---------------------------------------------------

extensions = ["sphinx_rtd_theme", "autoapi.extension"]
autoclass_content = "both"
templates_path = ["_templates"]
exclude_patterns = []

# -- Options for HTML output -------------------------------------------------

html_theme = "sphinx_rtd_theme"
html_static_path = ["_static"]

autodoc_default_options = {
    "members": True,
    "undoc-members": True,
    "show-inheritance": True,
}

autoapi_dirs = ["../../vcdomlem"]
