"""
Archive helpers for finished packages.

A package directory is shipped as a TAR.GZ whose single top-level entry is
the package directory itself (``_package/template.py``, ...).
"""

from __future__ import annotations

import logging
import os
import tarfile
from pathlib import Path
from typing import Union

from .faults import MissingFileFault, PackageIOFault
from .hashing import hash_file

logger = logging.getLogger("ocpack.archive")

ARCHIVE_NAME = "package.tar.gz"


def compress(input_dir: Union[str, Path], output_file: Union[str, Path]) -> Path:
    """
    Write *input_dir* into a gzip-compressed tarball at *output_file*.

    Raises:
        MissingFileFault: If *input_dir* is not a directory.
        PackageIOFault: If the archive cannot be written.
    """
    input_dir = Path(input_dir)
    output_file = Path(output_file)
    if not input_dir.is_dir():
        raise MissingFileFault(str(input_dir), reason="is not a directory")

    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with tarfile.open(output_file, "w:gz") as tar:
            tar.add(str(input_dir), arcname=input_dir.name)
    except (OSError, tarfile.TarError) as exc:
        raise PackageIOFault("compress", str(output_file), str(exc)) from exc

    logger.info(
        "Compressed %s -> %s (%d bytes, sha1 %s)",
        input_dir, output_file, output_file.stat().st_size, hash_file(output_file),
    )
    return output_file


def cleanup(path: Union[str, Path]) -> None:
    """
    Remove a compressed package.

    Raises:
        PackageIOFault: If the file cannot be removed.
    """
    try:
        os.unlink(path)
    except OSError as exc:
        raise PackageIOFault("remove", str(path), str(exc)) from exc
    logger.debug("Removed %s", path)
