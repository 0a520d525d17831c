import string
from enum import Enum
from typing import Any, Iterator, Optional

from .exceptions import LexerError, ErrorCode

# largest value an A-instruction can load
MAX_INTEGER = 32767

identifier_punctuation = '_.$-'


class Location:
    def __init__(self, lineno: int, column: int, offset: int):
        self.lineno = lineno
        self.column = column
        self.offset = offset

    def __repr__(self):
        return f'{self.lineno}:{self.column}'


class TokenType(Enum):
    # reserved word
    # commands
    PUSH = 'push'
    POP = 'pop'
    ADD = 'add'
    SUB = 'sub'
    NEG = 'neg'
    EQ = 'eq'
    GT = 'gt'
    LT = 'lt'
    AND = 'and'
    OR = 'or'
    NOT = 'not'
    LABEL = 'label'
    GOTO = 'goto'
    IF_GOTO = 'if-goto'
    FUNCTION = 'function'
    CALL = 'call'
    RETURN = 'return'

    # segments
    CONSTANT = 'constant'
    LOCAL = 'local'
    ARGUMENT = 'argument'
    THIS = 'this'
    THAT = 'that'
    TEMP = 'temp'
    POINTER = 'pointer'
    STATIC = 'static'

    # symbols
    NEWLINE = '\n'

    # other
    INTEGER = 'INTEGER'
    ID = 'ID'
    EOF = 'EOF'

    @classmethod
    def _build_reserved_dict(cls, start, end):
        token_list = list(cls)
        start_index = token_list.index(start)
        end_index = token_list.index(end)
        return {
            token_type.value: token_type
            for token_type in token_list[start_index:end_index + 1]
        }

    @classmethod
    def reserved_word(cls):
        return cls._build_reserved_dict(TokenType.PUSH, TokenType.STATIC)

    @classmethod
    def command_words(cls):
        return cls._build_reserved_dict(TokenType.PUSH, TokenType.RETURN)

    @classmethod
    def segment_words(cls):
        return cls._build_reserved_dict(TokenType.CONSTANT, TokenType.STATIC)


class Token:
    def __init__(self, token_type: TokenType, value: Any, start: Location, end: Location):
        self.type = token_type
        self.value = value
        self.start = start
        self.end = end

    def __repr__(self):
        return f'Token({self.type}, {repr(self.value)}, ' \
               f'position={self.start.lineno}:{self.start.column} to {self.end.lineno}:{self.end.column})'


def is_identifier_start(char: str) -> bool:
    return (char.isascii() and char.isalpha()) or char in identifier_punctuation.replace('-', '')


def is_identifier_char(char: str) -> bool:
    return (char.isascii() and char.isalnum()) or char in identifier_punctuation


class Lexer:
    """
    Turns VM source text into tokens, one call to ``get_next_token`` at a time.

    Each source line that holds at least one token is closed by a ``NEWLINE``
    token; blank and comment-only lines produce nothing. The stream ends with
    a single ``EOF`` token. Iterating over a lexer rescans its text from the
    beginning, so the token sequence can be walked more than once.
    """

    def __init__(self, text: str):
        self.text = text
        self.reset()

    def reset(self):
        self.position = 0
        self.current_char: Optional[str] = None
        self.next_char: Optional[str] = None
        self.lineno = 1
        self.column = 1
        # no NEWLINE before the first token of a line
        self.line_has_tokens = False
        if len(self.text) > 0:
            self.current_char = self.text[0]
        if len(self.text) > 1:
            self.next_char = self.text[1]

    def __iter__(self) -> Iterator[Token]:
        self.reset()
        while True:
            token = self.get_next_token()
            yield token
            if token.type == TokenType.EOF:
                break

    def location(self):
        return Location(self.lineno, self.column, self.position)

    def advance_position(self):
        if self.current_char == '\n':
            self.lineno += 1
            self.column = 0
        self.position += 1
        if self.position >= len(self.text):
            self.current_char = None
            self.next_char = None
        else:
            self.current_char = self.text[self.position]
            self.column += 1
            if self.position + 1 >= len(self.text):
                self.next_char = None
            else:
                self.next_char = self.text[self.position + 1]

    def error(self, text: str, start: Location, error_code: ErrorCode = ErrorCode.LEXER_ERROR):
        error = LexerError(
            error_code=error_code,
            message=f"Lexer error on '{text}' line: {start.lineno} column: {start.column}"
        )
        error.location = start
        error.text = text
        raise error

    def get_next_token(self):
        while self.current_char is not None:
            start = self.location()
            if self.current_char == '\n':
                self.advance_position()
                if self.line_has_tokens:
                    self.line_has_tokens = False
                    return Token(TokenType.NEWLINE, '\n', start, self.location())
                continue
            elif self.current_char.isspace():
                while self.current_char is not None and self.current_char != '\n' and self.current_char.isspace():
                    self.advance_position()
                continue
            elif self.current_char == '/' and self.next_char == '/':
                # comment runs up to, not including, the line break
                while self.current_char is not None and self.current_char != '\n':
                    self.advance_position()
                continue

            self.line_has_tokens = True
            if self.current_char in string.digits:
                value = ''
                while self.current_char is not None and self.current_char in string.digits:
                    value += self.current_char
                    self.advance_position()
                if self.current_char is not None and is_identifier_char(self.current_char):
                    while self.current_char is not None and is_identifier_char(self.current_char):
                        value += self.current_char
                        self.advance_position()
                    self.error(value, start)
                if int(value) > MAX_INTEGER:
                    self.error(value, start, ErrorCode.INTEGER_OUT_OF_RANGE)
                return Token(TokenType.INTEGER, int(value), start, self.location())
            elif is_identifier_start(self.current_char):
                # keyword or identifier
                value = ''
                while self.current_char is not None and is_identifier_char(self.current_char):
                    value += self.current_char
                    self.advance_position()
                token_type = TokenType.reserved_word().get(value)
                if token_type is not None:
                    return Token(token_type, value, start, self.location())
                return Token(TokenType.ID, value, start, self.location())
            else:
                value = ''
                while self.current_char is not None and not self.current_char.isspace():
                    value += self.current_char
                    self.advance_position()
                self.error(value, start)

        start = self.location()
        if self.line_has_tokens:
            # source without a trailing line break
            self.line_has_tokens = False
            return Token(TokenType.NEWLINE, '\n', start, start)
        return Token(TokenType.EOF, None, start, start)
