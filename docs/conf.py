"""
Sphinx configuration for Topicus documentation.
"""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SOURCE_ROOT = PROJECT_ROOT / "src"

sys.path.insert(0, str(SOURCE_ROOT))

project = "Topicus"
author = "Topicus Contributors"
extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.viewcode",
    "myst_parser",
]
root_doc = "index"
exclude_patterns = ["_build"]
autodoc_typehints = "description"
html_theme = "alabaster"

source_suffix = {
    ".rst": "restructuredtext",
    ".md": "markdown",
}
