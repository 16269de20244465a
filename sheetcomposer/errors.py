# Error taxonomy
#
# Every exception here is a user-facing notice: the Qt layer catches
# SheetError, shows its message in a dialog and returns to the editor.
# Degenerate geometry and stale references never raise; they are
# handled where they occur.


class SheetError(Exception):
    """Base class for notices shown to the user."""

    title = "SheetComposer"


class SelectionRequired(SheetError):
    """An operation was requested without a suitable selected node."""

    title = "Nothing selected"


class ResourceError(SheetError):
    """A bitmap or an external capability could not be loaded."""

    title = "Resource error"


class RenderError(SheetError):
    """The rendering engine failed to rasterize a region."""

    title = "Render error"


class ExportError(SheetError):
    """The export was aborted, or every persistence tier failed."""

    title = "Export failed"
