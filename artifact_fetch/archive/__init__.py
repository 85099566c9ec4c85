from artifact_fetch.archive.extractor import extract_archive, resolve_entry_path

__all__ = ["extract_archive", "resolve_entry_path"]
