"""File system access for content sources and assets."""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

from pageomatic.models.document import SourceUnit

logger = logging.getLogger(__name__)


def _is_hidden(path: Path, root: Path) -> bool:
    return any(part.startswith(".") for part in path.relative_to(root).parts)


class SourceLoader:
    """Reads Markdown source units from a content directory."""

    def __init__(
        self,
        content_dir: str | os.PathLike,
        extensions: Iterable[str] = (".md", ".markdown"),
        encoding: str = "utf-8",
    ):
        """
        Initialize loader for a content root.

        Args:
            content_dir: Root directory of Markdown sources
            extensions: File extensions treated as content
            encoding: Encoding used to read source files
        """
        self.root = Path(content_dir)
        self.extensions = {ext.lower() for ext in extensions}
        self.encoding = encoding

    def iter_paths(self) -> list[Path]:
        """Return content file paths sorted by their relative POSIX path."""
        if not self.root.is_dir():
            raise FileNotFoundError(f"Content directory not found: {self.root}")
        paths = [
            path
            for path in self.root.rglob("*")
            if path.is_file()
            and path.suffix.lower() in self.extensions
            and not _is_hidden(path, self.root)
        ]
        return sorted(paths, key=lambda p: p.relative_to(self.root).as_posix())

    def iter_sources(self) -> Iterator[SourceUnit]:
        """
        Yield a source unit for every content file under the root.

        Yields:
            SourceUnit with a path relative to the content root
            (files that cannot be decoded carry ``read_error`` instead of text)
        """
        for path in self.iter_paths():
            relative = path.relative_to(self.root).as_posix()
            try:
                text = path.read_text(encoding=self.encoding)
            except UnicodeDecodeError as e:
                logger.warning("Cannot decode %s as %s: %s", relative, self.encoding, e.reason)
                yield SourceUnit(
                    path=relative,
                    text="",
                    read_error=f"not valid {self.encoding} text (byte {e.start}: {e.reason})",
                )
                continue
            logger.debug("Loaded source %s (%d bytes)", relative, len(text))
            yield SourceUnit(path=relative, text=text)


class AssetCatalog:
    """Set of known asset paths relative to the content root."""

    def __init__(self, paths: Iterable[str] = ()):
        self.paths = frozenset(paths)

    @classmethod
    def from_directory(
        cls,
        assets_dir: str | os.PathLike,
        content_dir: str | os.PathLike | None = None,
        exclude_extensions: Iterable[str] = (".md", ".markdown"),
    ) -> "AssetCatalog":
        """
        List every non-content file under an asset directory.

        Args:
            assets_dir: Directory to scan for assets
            content_dir: Content root paths are made relative to
                         (defaults to ``assets_dir``)
            exclude_extensions: Extensions that are documents, not assets

        Returns:
            AssetCatalog of POSIX paths relative to the content root
        """
        assets_root = Path(assets_dir)
        content_root = Path(content_dir) if content_dir is not None else assets_root
        excluded = {ext.lower() for ext in exclude_extensions}
        if not assets_root.is_dir():
            logger.warning("Asset directory not found: %s", assets_root)
            return cls()

        paths = set()
        for path in assets_root.rglob("*"):
            if not path.is_file() or path.suffix.lower() in excluded:
                continue
            if _is_hidden(path, assets_root):
                continue
            relative = os.path.relpath(path, content_root)
            paths.add(Path(relative).as_posix())
        logger.debug("Found %d asset(s) under %s", len(paths), assets_root)
        return cls(paths)

    def __contains__(self, path: object) -> bool:
        return path in self.paths

    def __iter__(self):
        return iter(sorted(self.paths))

    def __len__(self) -> int:
        return len(self.paths)
