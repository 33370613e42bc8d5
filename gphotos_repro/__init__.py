"""gphotos_repro - reproduction harness for Google Drive polling alongside a Google Photos upload."""

__version__ = "0.1.0"
