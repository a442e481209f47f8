"""Error types raised by the tagging pipeline."""


class CtrInvoiceError(Exception):
    """Base class for pipeline errors."""


class SourceNotFoundError(CtrInvoiceError):
    """The source document is missing or yielded no tokens.

    Raised before classification starts, so nothing has been written.
    """


class TagStoreError(CtrInvoiceError):
    """Reading from or writing to the tag store failed."""


class LayoutError(CtrInvoiceError):
    """A classification layout could not be read or validated."""


class FormatError(CtrInvoiceError, ValueError):
    """A classified value does not match the format its destination expects."""

    def __init__(self, label: str, text: str, expected: str):
        self.label = label
        self.text = text
        self.expected = expected
        super().__init__(
            f"Value '{text}' for '{label}' does not match format '{expected}'"
        )
