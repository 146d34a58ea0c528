class OdtError(Exception):
    """Base class for every error raised by odtx."""


class InvalidArgumentError(OdtError, ValueError):
    """A mutation was asked to produce structure the format does not allow."""


class DocumentNotOpenError(OdtError):
    """A structural mutation was attempted before Document.open()."""


class ArchiveOpenError(OdtError):
    pass


class EntryReadError(OdtError):
    pass


class EntryWriteError(OdtError):
    pass


class RenameError(OdtError):
    pass


class ContentParseError(OdtError):
    """content.xml could not be parsed as XML."""
