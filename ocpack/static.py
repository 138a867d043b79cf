"""
Static Asset Processor - copies (and minifies) declared static directories.

Directories are processed strictly in declared order. The first directory
that is missing (or is not a directory) aborts processing: directories
already copied stay in place and later ones are never attempted. Files
inside one directory are independent and are handled on a thread pool.
"""

from __future__ import annotations

import logging
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Union

from .faults import MissingFileFault, PackageIOFault
from .minify import asset_minifier

logger = logging.getLogger("ocpack.static")


class StaticAssetProcessor:
    """
    Copies static directories into the package output.

    Args:
        minify: Minify ``.js``/``.css`` files; everything else is copied as-is
        workers: Thread pool size for per-file work (1 = sequential)
    """

    def __init__(self, *, minify: bool = True, workers: int = 4):
        self.minify = minify
        self.workers = max(1, workers)

    def process(
        self,
        static_dirs: Iterable[str],
        component_root: Union[str, Path],
        output_root: Union[str, Path],
    ) -> List[Path]:
        """
        Process every directory in *static_dirs*, in order.

        Returns:
            Written file paths.

        Raises:
            MissingFileFault: Naming the first directory that is missing or
                not a directory (``metadata["static_dir"]``).
            PackageIOFault: If a file cannot be read or written.
        """
        component_root = Path(component_root)
        output_root = Path(output_root)
        written: List[Path] = []

        for static_dir in static_dirs:
            written.extend(self.process_dir(static_dir, component_root, output_root))

        return written

    def process_dir(self, static_dir: str, component_root: Path, output_root: Path) -> List[Path]:
        source_dir = component_root / static_dir
        if not source_dir.exists():
            raise MissingFileFault(
                str(source_dir),
                message=f'"{source_dir}" not found',
                metadata={"static_dir": static_dir},
            )
        if not source_dir.is_dir():
            raise MissingFileFault(
                str(source_dir),
                reason="is not a directory",
                message=f'"{source_dir}" must be a directory',
                metadata={"static_dir": static_dir},
            )

        target_dir = output_root / static_dir
        target_dir.mkdir(parents=True, exist_ok=True)

        files = sorted(p for p in source_dir.rglob("*") if p.is_file())
        jobs = [(src, target_dir / src.relative_to(source_dir)) for src in files]

        if self.workers == 1 or len(jobs) < 2:
            written = [self._process_file(src, dest) for src, dest in jobs]
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                written = list(pool.map(lambda job: self._process_file(*job), jobs))

        logger.info("Static directory %s: %d file(s)", static_dir, len(written))
        return written

    def _process_file(self, src: Path, dest: Path) -> Path:
        minifier = asset_minifier(src.suffix.lower()) if self.minify else None
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            if minifier is None:
                shutil.copy2(src, dest)
            else:
                dest.write_text(minifier(src.read_text(encoding="utf-8")), encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PackageIOFault("copy", str(src), str(exc)) from exc
        return dest
