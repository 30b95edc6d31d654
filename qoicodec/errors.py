class QOIError(ValueError):
    """Base class for every error raised while encoding or decoding a QOI image."""


class InvalidHeader(QOIError):
    def __init__(self, message: str = "The signature of the QOI file is invalid"):
        super().__init__(message)


class InvalidColorspace(QOIError):
    def __init__(self, byte: int):
        super().__init__(
            f"Invalid image colorspace {byte}, expected 0 for sRGB or 1 for linear"
        )
        self.byte = byte


class InvalidDimensions(QOIError):
    def __init__(self, message: str = "Invalid image width or height"):
        super().__init__(message)


class InvalidIndex(QOIError):
    def __init__(self, index: int):
        super().__init__(f"Invalid index {index}, expected 0..63")
        self.index = index


class UnexpectedEof(QOIError):
    def __init__(self, message: str = "Unexpected end of file before the image was complete"):
        super().__init__(message)


class UnknownTag(QOIError):
    def __init__(self, byte: int):
        super().__init__(f"Unknown chunk tag {byte:#010b}")
        self.byte = byte


class QOIIOError(QOIError):
    """Wraps an OSError raised by the underlying reader or writer."""

    def __init__(self, error: OSError):
        super().__init__(str(error))
        self.error = error
