"""Drive path helpers."""

SEPARATOR = "/"
ROOT_PATH = SEPARATOR


def normalize_path(path: str) -> str:
    """
    Normalize a drive path.

    The result always starts with "/" and only ends with "/" when it is the
    root itself. Applying it twice gives the same result as applying it once.

    Args:
        path: Slash-delimited path, absolute or relative to the root.

    Returns:
        Normalized path.
    """
    if not path.startswith(SEPARATOR):
        path = SEPARATOR + path
    if len(path) > 1 and path.endswith(SEPARATOR):
        path = path.rstrip(SEPARATOR) or ROOT_PATH
    return path


def split_path(path: str) -> tuple[str, str]:
    """
    Split a normalized path into its parent path and final component.

    Args:
        path: Normalized, non-root path.

    Returns:
        Tuple of (parent path, name). The parent of a top-level entry is "/".
    """
    index = path.rfind(SEPARATOR)
    parent, name = path[:index], path[index + 1 :]
    return parent or ROOT_PATH, name


def join_path(parent: str, name: str) -> str:
    parent = normalize_path(parent)
    if parent == ROOT_PATH:
        return ROOT_PATH + name
    return f"{parent}{SEPARATOR}{name}"


def path_components(path: str) -> list[str]:
    """Return the components of a normalized path in order, root excluded."""
    path = normalize_path(path)
    if path == ROOT_PATH:
        return []
    return path[1:].split(SEPARATOR)
