from .models import File, FileJSON

PATH_SEPARATOR = "/"


def project_file_list(files: list[File]) -> list[FileJSON]:
    """Flatten stored file paths and sort them case-insensitively.

    Every segment is kept; empty segments are skipped.
    """
    file_list = []
    for f in files:
        path = PATH_SEPARATOR.join(segment for segment in f.path() if segment)
        file_list.append(FileJSON(path=path, filesize=f.filesize))

    return sorted(file_list, key=lambda f: f.path.lower())
