"""NiceGUI pages for DocMargin.

Import this module to register all page routes with NiceGUI.
"""

from docmargin.pages import document, index

__all__ = ["document", "index"]

# Touch modules to prevent linter from removing "unused" imports.
# These imports register @ui.page decorators as a side effect.
_PAGES = (document, index)
