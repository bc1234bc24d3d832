from __future__ import annotations

from pathlib import Path

ROOT_MARKERS = ("config.yaml", ".git")


def resolve_path(repo_root: Path, p: Path | str) -> Path:
    """Resolve `p` against `repo_root` unless it is already absolute."""
    p_path = Path(p)
    if not p_path.is_absolute():
        p_path = repo_root / p_path
    return p_path.resolve()


def _find_root(start: Path) -> Path | None:
    if start.is_file():
        start = start.parent
    for candidate in (start, *start.parents):
        if any((candidate / marker).exists() for marker in ROOT_MARKERS):
            return candidate
    return None


def get_repo_root(start: Path | None = None) -> Path:
    """Nearest directory at or above `start` (default: cwd) holding `config.yaml` or `.git`.

    Falls back to searching from the installed package, so the CLI and the
    service still find the bundled config when launched from elsewhere.
    """
    for origin in (Path(start) if start is not None else Path.cwd(), Path(__file__).parent):
        root = _find_root(origin.resolve())
        if root is not None:
            return root
    raise FileNotFoundError(f"No {' or '.join(ROOT_MARKERS)} found above {start or Path.cwd()}")
