"""File name conventions shared by the package folder layout."""

HASH_FILE_EXTENSION = ".nupkg.sha512"
NUPKG_EXTENSION = ".nupkg"
NUSPEC_EXTENSION = ".nuspec"
PACKAGE_DOWNLOAD_MARKER_FILE_EXTENSION = ".packagedownload.marker"

# _._ denotes an empty folder since OPC does not allow an actual empty folder.
EMPTY_FOLDER = "_._"

# Checks empty folders from package readers where the separator is normalized to /.
FORWARD_SLASH_EMPTY_FOLDER = "/" + EMPTY_FOLDER


def is_empty_folder_entry(entry_name: str) -> bool:
    """Return True if an archive entry is the empty-folder placeholder."""
    normalized = entry_name.replace("\\", "/")
    return normalized == EMPTY_FOLDER or normalized.endswith(FORWARD_SLASH_EMPTY_FOLDER)
