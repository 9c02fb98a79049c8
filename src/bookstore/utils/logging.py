from importlib import metadata as importlib_metadata

# Distribution name declared in pyproject.toml
PROJECT_NAME = "bookstore"


def get_project_name() -> str:
    return PROJECT_NAME


def get_project_version(default: str = "unknown") -> str:
    """
    Version of the installed `bookstore` distribution.

    Returns `default` when the package runs from a source checkout that was
    never installed (no distribution metadata available).
    """
    try:
        return importlib_metadata.version(PROJECT_NAME)
    except importlib_metadata.PackageNotFoundError:
        return default


__all__ = ["PROJECT_NAME", "get_project_name", "get_project_version"]
