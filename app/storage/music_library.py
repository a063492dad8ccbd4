"""Music library folders on the host filesystem."""

import os
from typing import List

from app.downloads.validation import is_inside_root
from app.jobs.errors import InternalError, ValidationError


class MusicLibrary:
    """Lists and creates artist/playlist folders under the library root."""

    def __init__(self, root: str):
        self._root = root

    @property
    def root(self) -> str:
        return self._root

    def exists(self) -> bool:
        return os.path.isdir(self._root)

    def list_folders(self) -> List[str]:
        """Names of the direct sub-directories, sorted case-insensitively."""
        if not self.exists():
            raise InternalError("MUSIC_ROOT missing")
        try:
            names = [e.name for e in os.scandir(self._root) if e.is_dir()]
        except OSError:
            raise InternalError("Failed to list folders")
        return sorted(names, key=lambda n: (n.casefold(), n))

    def ensure_folder(self, name: str) -> str:
        """Create ``name`` under the root if needed and return its path.

        ``name`` must already be sanitized.
        """
        if not self.exists():
            raise InternalError("MUSIC_ROOT missing")

        folder_dir = os.path.join(self._root, name)
        if not is_inside_root(self._root, folder_dir):
            raise ValidationError("Folder outside root")

        try:
            os.makedirs(folder_dir, exist_ok=True)
        except OSError:
            raise InternalError("Failed to create folder")
        return folder_dir
