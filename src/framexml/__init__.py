"""framexml - export text boxes to translator-friendly XML and import translations back."""

from .batch import export_folder, import_folder
from .exporter import export_document
from .importer import import_document

__all__ = ["export_document", "export_folder", "import_document", "import_folder"]
