"""Filename and file path decomposition.

``Filename`` splits a name at its last ``.`` into base name and extension.
``FilePath`` splits a path at its last separator into folder and filename.
Both keep the composite string reconstructible from its parts, so setting
one part and reading the whole back never loses information.
"""

BACKSLASH = "\\"
SEPARATOR = "/"


class Filename:
    """A filename broken down into base name and extension.

    The extension includes the leading dot. A name without a dot has an
    empty extension and a base name equal to the whole name; a name whose
    only dot is the first character (``.env``) is all extension.
    """

    def __init__(self, filename: str):
        self.filename = filename

    @property
    def _dot(self) -> int:
        index = self.filename.rfind(".")
        return len(self.filename) if index == -1 else index

    @property
    def base_name(self) -> str:
        return self.filename[:self._dot]

    @base_name.setter
    def base_name(self, value: str) -> None:
        self.filename = value + self.extension

    @property
    def extension(self) -> str:
        return self.filename[self._dot:]

    @extension.setter
    def extension(self, value: str) -> None:
        self.filename = self.base_name + value

    def __str__(self) -> str:
        return self.filename

    def __repr__(self) -> str:
        return f"Filename({self.filename!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Filename):
            return self.filename == other.filename
        return NotImplemented


class FilePath:
    """A file path broken down into folder and filename.

    The path is held with forward slashes. If the raw path used
    backslashes, ``uses_backslashes`` is set and ``str()`` reproduces them.
    The folder is empty when the path has no separator and ``/`` when the
    file sits directly under the root.
    """

    def __init__(self, file_path: str):
        self.uses_backslashes = False
        self.file_path = file_path

    @property
    def file_path(self) -> str:
        if self.uses_backslashes:
            return self._path.replace(SEPARATOR, BACKSLASH)
        return self._path

    @file_path.setter
    def file_path(self, value: str) -> None:
        if BACKSLASH in value:
            self.uses_backslashes = True
            value = value.replace(BACKSLASH, SEPARATOR)
        self._path = value

    @property
    def _slash(self) -> int:
        return self._path.rfind(SEPARATOR)

    @property
    def folder(self) -> str:
        """Folder part, always with forward slashes."""
        index = self._slash
        if index == -1:
            return ""
        if index == 0:
            return SEPARATOR
        return self._path[:index]

    @folder.setter
    def folder(self, value: str) -> None:
        self._path = join_path(value.replace(BACKSLASH, SEPARATOR), self.filename)

    @property
    def filename(self) -> str:
        return self._path[self._slash + 1:]

    @filename.setter
    def filename(self, value: str) -> None:
        self._path = join_path(self.folder, value)

    def __str__(self) -> str:
        return self.file_path

    def __repr__(self) -> str:
        return f"FilePath({self.file_path!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FilePath):
            return self.file_path == other.file_path
        return NotImplemented


def join_path(folder: str, filename: str) -> str:
    """Join a forward-slash folder and a filename."""
    if not folder:
        return filename
    if folder.endswith(SEPARATOR):
        return folder + filename
    return folder + SEPARATOR + filename


def parse_filename(raw: str) -> Filename:
    return Filename(raw)


def parse_file_path(raw: str) -> FilePath:
    return FilePath(raw)
