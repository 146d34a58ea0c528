"""
ZIP container access for .odt files.

A source is either a filesystem path or a seekable binary stream; both are
accepted wherever an archive is read.
"""
import os
import shutil
import tempfile
import zipfile
import zlib
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, Union

import structlog

from odtx.constants import (
    CONTENT_ENTRY,
    DEFAULT_PARAGRAPH_STYLE,
    DEFAULT_RUN_STYLE,
    MANIFEST_ENTRY,
    MEDIA_PLACEHOLDER_ENTRY,
    MIMETYPE_ENTRY,
    ODT_MIMETYPE,
    PARAGRAPH_PARENT_STYLE,
    RUN_PARENT_STYLE,
)
from odtx.errors import ArchiveOpenError, EntryReadError, EntryWriteError, RenameError

logger = structlog.get_logger(__name__)

Source = Union[str, os.PathLike, BinaryIO]

_READ_ERRORS = (KeyError, OSError, zipfile.BadZipFile, zlib.error, EOFError)


def _open_archive(source: Source) -> zipfile.ZipFile:
    if hasattr(source, "seek"):
        source.seek(0)
    try:
        return zipfile.ZipFile(source, "r")
    except (OSError, zipfile.BadZipFile) as e:
        logger.error(f"Could not open archive {source!r}", exc_info=True)
        raise ArchiveOpenError(f"Could not open archive {source!r}: {e}") from e


def read_entry(source: Source, name: str = CONTENT_ENTRY) -> bytes:
    with _open_archive(source) as archive:
        try:
            return archive.read(name)
        except _READ_ERRORS as e:
            logger.error(f"Could not read entry '{name}'", exc_info=True)
            raise EntryReadError(f"Could not read entry '{name}': {e}") from e


def _clone_info(info: zipfile.ZipInfo) -> zipfile.ZipInfo:
    clone = zipfile.ZipInfo(info.filename, date_time=info.date_time)
    clone.compress_type = info.compress_type
    clone.external_attr = info.external_attr
    clone.create_system = info.create_system
    clone.comment = info.comment
    return clone


def rewrite_archive(
    source: Source,
    target: BinaryIO,
    replacements: Dict[str, bytes],
    skip: Iterable[str] = (MEDIA_PLACEHOLDER_ENTRY,),
):
    """
    Writes a copy of source into target with the entries in replacements
    swapped for new bytes. Everything else is copied byte for byte in the
    original order and with the original compression, so a stored
    'mimetype' entry stays first and uncompressed.
    """
    skip = set(skip)
    pending = dict(replacements)

    with _open_archive(source) as original:
        try:
            output = zipfile.ZipFile(target, "w", zipfile.ZIP_DEFLATED)
        except OSError as e:
            raise ArchiveOpenError(f"Could not create output archive: {e}") from e

        with output:
            for info in original.infolist():
                if info.filename in skip:
                    continue
                if info.filename in pending:
                    data = pending.pop(info.filename)
                else:
                    try:
                        data = original.read(info)
                    except _READ_ERRORS as e:
                        logger.error(f"Could not read entry '{info.filename}'", exc_info=True)
                        raise EntryReadError(f"Could not read entry '{info.filename}': {e}") from e
                _write_entry(output, _clone_info(info), data)

            # Replacements with no counterpart in the original go last
            for name, data in pending.items():
                _write_entry(output, zipfile.ZipInfo(name), data, zipfile.ZIP_DEFLATED)


def _write_entry(archive: zipfile.ZipFile, info: zipfile.ZipInfo, data: bytes, compress_type=None):
    if compress_type is not None:
        info.compress_type = compress_type
    try:
        archive.writestr(info, data)
    except (OSError, ValueError, zlib.error) as e:
        logger.error(f"Could not write entry '{info.filename}'", exc_info=True)
        raise EntryWriteError(f"Could not write entry '{info.filename}': {e}") from e


def _match_mode(tmp_name: str, destination: Path):
    """mkstemp creates 0600 files; give the result the mode a plain open() would."""
    if destination.exists():
        shutil.copymode(destination, tmp_name)
    else:
        umask = os.umask(0)
        os.umask(umask)
        os.chmod(tmp_name, 0o666 & ~umask)


def write_replacing(source: Source, destination: Union[str, os.PathLike], replacements: Dict[str, bytes]):
    """
    Rewrites source into destination through a temporary file next to the
    destination. destination is only touched by the final os.replace; on any
    earlier failure the temporary file is removed and the error re-raised.
    """
    destination = Path(destination)
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
        )
    except OSError as e:
        raise ArchiveOpenError(f"Could not create temporary file next to {destination}: {e}") from e

    try:
        with os.fdopen(fd, "w+b") as tmp:
            rewrite_archive(source, tmp, replacements)
        _match_mode(tmp_name, destination)
        try:
            os.replace(tmp_name, destination)
        except OSError as e:
            logger.error(f"Could not move {tmp_name} to {destination}", exc_info=True)
            raise RenameError(f"Could not move {tmp_name} to {destination}: {e}") from e
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise

    logger.info(f"Wrote {destination}")


_ROOT_NAMESPACES = (
    'xmlns:office="urn:oasis:names:tc:opendocument:xmlns:office:1.0" '
    'xmlns:style="urn:oasis:names:tc:opendocument:xmlns:style:1.0" '
    'xmlns:text="urn:oasis:names:tc:opendocument:xmlns:text:1.0" '
    'xmlns:table="urn:oasis:names:tc:opendocument:xmlns:table:1.0" '
    'xmlns:draw="urn:oasis:names:tc:opendocument:xmlns:drawing:1.0" '
    'xmlns:fo="urn:oasis:names:tc:opendocument:xmlns:xsl-fo-compatible:1.0" '
    'xmlns:xlink="http://www.w3.org/1999/xlink" '
    'xmlns:svg="urn:oasis:names:tc:opendocument:xmlns:svg-compatible:1.0"'
)

_BLANK_CONTENT = f"""<?xml version="1.0" encoding="UTF-8"?>
<office:document-content {_ROOT_NAMESPACES} office:version="1.2">
<office:automatic-styles>
<style:style style:name="{DEFAULT_PARAGRAPH_STYLE}" style:family="paragraph" style:parent-style-name="{PARAGRAPH_PARENT_STYLE}"/>
</office:automatic-styles>
<office:body>
<office:text/>
</office:body>
</office:document-content>
"""

_BLANK_STYLES = f"""<?xml version="1.0" encoding="UTF-8"?>
<office:document-styles {_ROOT_NAMESPACES} office:version="1.2">
<office:styles>
<style:style style:name="{PARAGRAPH_PARENT_STYLE}" style:family="paragraph"/>
<style:style style:name="{RUN_PARENT_STYLE}" style:family="text"/>
<style:style style:name="{DEFAULT_RUN_STYLE}" style:family="text" style:parent-style-name="{RUN_PARENT_STYLE}"/>
</office:styles>
</office:document-styles>
"""

_BLANK_MANIFEST = f"""<?xml version="1.0" encoding="UTF-8"?>
<manifest:manifest xmlns:manifest="urn:oasis:names:tc:opendocument:xmlns:manifest:1.0" manifest:version="1.2">
<manifest:file-entry manifest:full-path="/" manifest:media-type="{ODT_MIMETYPE}"/>
<manifest:file-entry manifest:full-path="{CONTENT_ENTRY}" manifest:media-type="text/xml"/>
<manifest:file-entry manifest:full-path="styles.xml" manifest:media-type="text/xml"/>
</manifest:manifest>
"""


def create_blank() -> bytes:
    """Bytes of an empty but valid .odt package."""
    stream = BytesIO()
    with zipfile.ZipFile(stream, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(zipfile.ZipInfo(MIMETYPE_ENTRY), ODT_MIMETYPE, compress_type=zipfile.ZIP_STORED)
        archive.writestr(MANIFEST_ENTRY, _BLANK_MANIFEST)
        archive.writestr(CONTENT_ENTRY, _BLANK_CONTENT)
        archive.writestr("styles.xml", _BLANK_STYLES)
    return stream.getvalue()
