# SheetComposer - sheet composition editor
#
# Core modules at package level are toolkit-independent; everything
# that needs Qt widgets lives under sheetcomposer.qt.

__version__ = "0.4.0"
