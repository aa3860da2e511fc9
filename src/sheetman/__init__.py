"""sheetman: view, create, edit and delete rows in .xlsx workbooks."""

__version__ = "0.1.0"
