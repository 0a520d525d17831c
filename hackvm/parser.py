from enum import Enum
from typing import Iterator, List, Optional

from .exceptions import ParserError, ErrorCode
from .lexer import Location, Token, TokenType, Lexer


class Operator(Enum):
    ADD = 'add'
    SUB = 'sub'
    NEG = 'neg'
    EQ = 'eq'
    GT = 'gt'
    LT = 'lt'
    AND = 'and'
    OR = 'or'
    NOT = 'not'

    @property
    def is_unary(self) -> bool:
        return self in (Operator.NEG, Operator.NOT)

    @property
    def is_comparison(self) -> bool:
        return self in (Operator.EQ, Operator.GT, Operator.LT)


class Direction(Enum):
    PUSH = 'push'
    POP = 'pop'


class Segment(Enum):
    CONSTANT = 'constant'
    LOCAL = 'local'
    ARGUMENT = 'argument'
    THIS = 'this'
    THAT = 'that'
    TEMP = 'temp'
    POINTER = 'pointer'
    STATIC = 'static'


class Command:
    def __init__(self, start: Location = None, end: Location = None):
        self.start: Location = start
        self.end: Location = end

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return repr(self) == repr(other)

    def __hash__(self):
        return hash(repr(self))


class Arithmetic(Command):
    def __init__(self, operator: Operator = None,
                 start: Location = None, end: Location = None):
        super().__init__(start=start, end=end)
        self.operator: Operator = operator

    def __repr__(self):
        return self.operator.value


class MemoryAccess(Command):
    def __init__(self, direction: Direction = None, segment: Segment = None, index: int = None,
                 start: Location = None, end: Location = None):
        super().__init__(start=start, end=end)
        self.direction: Direction = direction
        self.segment: Segment = segment
        self.index: int = index

    def __repr__(self):
        return f'{self.direction.value} {self.segment.value} {self.index}'


class Label(Command):
    def __init__(self, name: str = None,
                 start: Location = None, end: Location = None):
        super().__init__(start=start, end=end)
        self.name: str = name

    def __repr__(self):
        return f'label {self.name}'


class Goto(Label):
    def __repr__(self):
        return f'goto {self.name}'


class IfGoto(Label):
    def __repr__(self):
        return f'if-goto {self.name}'


class Function(Command):
    def __init__(self, name: str = None, local_count: int = None,
                 start: Location = None, end: Location = None):
        super().__init__(start=start, end=end)
        self.name: str = name
        self.local_count: int = local_count

    def __repr__(self):
        return f'function {self.name} {self.local_count}'


class Call(Command):
    def __init__(self, name: str = None, arg_count: int = None,
                 start: Location = None, end: Location = None):
        super().__init__(start=start, end=end)
        self.name: str = name
        self.arg_count: int = arg_count

    def __repr__(self):
        return f'call {self.name} {self.arg_count}'


class Return(Command):
    def __repr__(self):
        return 'return'


operator_token_types = {
    TokenType.ADD: Operator.ADD,
    TokenType.SUB: Operator.SUB,
    TokenType.NEG: Operator.NEG,
    TokenType.EQ: Operator.EQ,
    TokenType.GT: Operator.GT,
    TokenType.LT: Operator.LT,
    TokenType.AND: Operator.AND,
    TokenType.OR: Operator.OR,
    TokenType.NOT: Operator.NOT,
}

jump_token_types = {
    TokenType.LABEL: Label,
    TokenType.GOTO: Goto,
    TokenType.IF_GOTO: IfGoto,
}

segment_token_types = {
    token_type: Segment(token_type.value)
    for token_type in TokenType.segment_words().values()
}

# names may reuse keywords, e.g. a label called "loop" or "end"
name_token_types = [TokenType.ID] + list(TokenType.reserved_word().values())


class Parser:
    def __init__(self, lexer: Lexer):
        self.lexer: Lexer = lexer
        self.previous_token: Optional[Token] = None
        self.current_token: Optional[Token] = None

    def error(self,
              error_code: ErrorCode = ErrorCode.UNEXPECTED_TOKEN,
              token: Token = None,
              expect: str = None):
        if token is None:
            token = self.current_token
        if expect is None:
            message = repr(token)
        else:
            message = f'Expect {expect}, but {token!r} was given'
        error = ParserError(error_code=error_code, message=message)
        error.expect = expect
        error.token = token
        raise error

    def advance_token(self):
        if self.current_token is not None and self.current_token.type == TokenType.EOF:
            raise ParserError(error_code=ErrorCode.UNEXPECTED_TOKEN,
                              message=f'Unexpect end of file {self.current_token}')
        self.previous_token = self.current_token
        self.current_token = self.lexer.get_next_token()

    def token_match(self, token_type: TokenType, expect: str = None):
        if self.current_token.type != token_type:
            self.error(expect=expect or token_type.name)

    def __iter__(self) -> Iterator[Command]:
        self.lexer.reset()
        self.previous_token = None
        self.current_token = None
        self.advance_token()
        while self.current_token.type != TokenType.EOF:
            yield self.parse_command()

    def parse(self) -> List[Command]:
        return list(self)

    def parse_command(self) -> Command:
        command = None
        token = self.current_token
        if token.type in operator_token_types:
            # add | sub | neg | eq | gt | lt | and | or | not
            command = Arithmetic(operator_token_types[token.type], start=token.start)
            self.advance_token()
        elif token.type == TokenType.PUSH or token.type == TokenType.POP:
            # push <segment> <index> | pop <segment> <index>
            command = MemoryAccess(Direction(token.value), start=token.start)
            self.advance_token()
            if self.current_token.type not in segment_token_types:
                self.error(expect='segment')
            command.segment = segment_token_types[self.current_token.type]
            self.advance_token()
            command.index = self.parse_integer(expect='segment index')
            if command.direction == Direction.POP and command.segment == Segment.CONSTANT:
                self.error(error_code=ErrorCode.POP_CONSTANT, token=token, expect='push constant')
            if command.segment == Segment.POINTER and command.index not in (0, 1):
                self.error(token=self.previous_token, expect='pointer index 0 or 1')
        elif token.type in jump_token_types:
            # label <name> | goto <name> | if-goto <name>
            command = jump_token_types[token.type](start=token.start)
            self.advance_token()
            command.name = self.parse_name(expect='label name')
        elif token.type == TokenType.FUNCTION:
            # function <name> <local count>
            command = Function(start=token.start)
            self.advance_token()
            command.name = self.parse_name(expect='function name')
            command.local_count = self.parse_integer(expect='local count')
        elif token.type == TokenType.CALL:
            # call <name> <argument count>
            command = Call(start=token.start)
            self.advance_token()
            command.name = self.parse_name(expect='function name')
            command.arg_count = self.parse_integer(expect='argument count')
        elif token.type == TokenType.RETURN:
            command = Return(start=token.start)
            self.advance_token()
        else:
            self.error(expect='command')
        command.end = self.previous_token.end
        # one command per line
        self.token_match(TokenType.NEWLINE, expect=f'end of line after {command!r}')
        self.advance_token()
        return command

    def parse_integer(self, expect: str) -> int:
        self.token_match(TokenType.INTEGER, expect=expect)
        value = self.current_token.value
        self.advance_token()
        return value

    def parse_name(self, expect: str) -> str:
        if self.current_token.type not in name_token_types:
            self.error(expect=expect)
        value = self.current_token.value
        self.advance_token()
        return value
