"""Exception classes for the WebAssembly binding generator."""


class WasmError(Exception):
    """Base class for all wasm_types errors."""

    pass


class DecodeError(WasmError):
    """Error during binary format decoding.

    Every decode failure is terminal: the decoder never returns a partial
    module description. ``kind`` names the failure, ``offset`` is the absolute
    byte offset where it was detected (``None`` when there is no single
    offset to blame).
    """

    kind = "DecodeError"

    def __init__(self, message: str, offset: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset

    def __str__(self) -> str:
        if self.offset is None:
            return self.message
        return f"{self.message} (at offset {self.offset})"


class InvalidHeaderError(DecodeError):
    """The buffer does not start with the WASM magic number."""

    kind = "InvalidHeader"


class UnsupportedVersionError(DecodeError):
    """The binary format version is not 1."""

    kind = "UnsupportedVersion"


class UnexpectedEndOfInputError(DecodeError):
    """A read ran past the end of the buffer or section."""

    kind = "UnexpectedEndOfInput"


class IntegerOverflowError(DecodeError):
    """A LEB128 value does not fit in 32 bits."""

    kind = "IntegerOverflow"


class TruncatedSectionError(DecodeError):
    """A section declares more bytes than the buffer holds."""

    kind = "TruncatedSection"


class DuplicateSectionError(DecodeError):
    kind = "DuplicateSection"


class InvalidTypeFormError(DecodeError):
    """A type entry is not a function type (0x60)."""

    kind = "InvalidTypeForm"


class UnknownValueTypeError(DecodeError):
    kind = "UnknownValueType"


class InvalidNameError(DecodeError):
    """A name is not valid UTF-8."""

    kind = "InvalidName"


class InvalidFunctionIndexError(DecodeError):
    """An export refers to a function that was never declared."""

    kind = "InvalidFunctionIndex"


class InvalidTypeIndexError(DecodeError):
    """A function refers to a type that is not in the type section."""

    kind = "InvalidTypeIndex"


class GenerateError(WasmError):
    """Error while writing bindings."""

    pass


class OptimizerError(WasmError):
    """The external optimizer is missing or failed."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr
