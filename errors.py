class HuffmanError(ValueError):
    """Base class for every failure raised by the codec"""


class EmptyInputError(HuffmanError):
    pass


class InvalidCodeTableError(HuffmanError):
    pass


class CorruptStreamError(HuffmanError):
    pass


class TruncatedStreamError(CorruptStreamError):
    """
    Bits ran out in the middle of a code
    symbols_recovered is how many symbols were fully decoded before the cut
    """
    def __init__(self, symbols_recovered: int, message: str = None):
        self.symbols_recovered = symbols_recovered
        if message is None:
            message = f"stream ends mid-code after {symbols_recovered} symbols"
        super().__init__(message)


class StreamTooLargeError(HuffmanError):
    pass
