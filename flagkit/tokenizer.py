from typing import Iterator, Optional


class Tokenizer:
    """
    Splits an argument string into whitespace-separated tokens, one at a time.

    Tokens are produced lazily and in order. The tokenizer knows nothing
    about flags: a leading hyphen is just another character. Once drained it
    stays drained.
    """

    _src: str
    _off: int

    def __init__(self, src: str):
        """
        Initializes a new `Tokenizer` object.

        Args:
            src: The argument string to split.
        """
        self._src = src
        self._off = 0

    def curr(self) -> str:
        """
        Returns the current character being scanned.

        Returns:
            The current character, or '\0' if at the end of the string.
        """
        if self.eof():
            return "\0"
        return self._src[self._off]

    def eof(self) -> bool:
        """Checks if the tokenizer is at the end of the string."""
        return self._off >= len(self._src)

    def skipWhitespace(self) -> bool:
        """
        Skips over any whitespace characters.

        Returns:
            True if any whitespace was skipped, False otherwise.
        """
        result = False
        while not self.eof() and self.curr().isspace():
            self._off += 1
            result = True
        return result

    def next(self) -> Optional[str]:
        """
        Pulls the next token from the string.

        Returns:
            The next token, or None when no tokens remain.
        """
        self.skipWhitespace()
        if self.eof():
            return None

        start = self._off
        while not self.eof() and not self.curr().isspace():
            self._off += 1
        return self._src[start : self._off]

    def __iter__(self) -> Iterator[str]:
        while (tok := self.next()) is not None:
            yield tok


def tokenize(src: str) -> list[str]:
    """Splits an argument string into a list of tokens."""
    return list(Tokenizer(src))
