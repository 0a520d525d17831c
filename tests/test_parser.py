import pytest

from hackvm.exceptions import ParserError, ErrorCode
from hackvm.lexer import Lexer, TokenType
from hackvm.parser import (
    Parser, Arithmetic, MemoryAccess, Label, Goto, IfGoto, Function, Call, Return,
    Operator, Direction, Segment,
)

from conftest import parse


def test_one_command_per_line():
    commands = parse('''
    // Main.vm
    function Main.main 2
    push constant 7
    push local 1
    add
    pop static 3
    label LOOP
    if-goto LOOP
    goto END
    call Math.max 2
    return
    ''')
    assert commands == [
        Function('Main.main', 2),
        MemoryAccess(Direction.PUSH, Segment.CONSTANT, 7),
        MemoryAccess(Direction.PUSH, Segment.LOCAL, 1),
        Arithmetic(Operator.ADD),
        MemoryAccess(Direction.POP, Segment.STATIC, 3),
        Label('LOOP'),
        IfGoto('LOOP'),
        Goto('END'),
        Call('Math.max', 2),
        Return(),
    ]


@pytest.mark.parametrize('operator', list(Operator))
def test_arithmetic_commands(operator):
    assert parse(operator.value) == [Arithmetic(operator)]


@pytest.mark.parametrize('segment', [segment for segment in Segment if segment != Segment.POINTER])
def test_every_segment(segment):
    command, = parse(f'push {segment.value} 5')
    assert command.segment == segment
    assert command.index == 5


def test_commands_keep_source_location():
    commands = parse('\n\n  push constant 1\nadd\n')
    assert commands[0].start.lineno == 3
    assert commands[0].start.column == 3
    assert commands[1].start.lineno == 4


def test_label_and_goto_are_different_commands():
    assert Label('X') != Goto('X')
    assert Goto('X') != IfGoto('X')
    assert Goto('X') == Goto('X')


def test_parser_is_lazy():
    parser = Parser(Lexer('push constant 1\npop constant 2\n'))
    commands = iter(parser)
    assert next(commands) == MemoryAccess(Direction.PUSH, Segment.CONSTANT, 1)
    with pytest.raises(ParserError):
        next(commands)


def test_pop_constant_is_rejected():
    with pytest.raises(ParserError) as info:
        parse('pop constant 0')
    assert info.value.error_code == ErrorCode.POP_CONSTANT
    assert info.value.token.type == TokenType.POP


@pytest.mark.parametrize('index', [0, 1])
def test_pointer_index(index):
    command, = parse(f'pop pointer {index}')
    assert command.index == index


def test_pointer_index_out_of_range():
    with pytest.raises(ParserError) as info:
        parse('push pointer 2')
    assert info.value.expect == 'pointer index 0 or 1'


@pytest.mark.parametrize('text, expect', [
    ('add 1', 'end of line after add'),
    ('neg local', 'end of line after neg'),
    ('push', 'segment'),
    ('push local', 'segment index'),
    ('push heap 1', 'segment'),
    ('pop local x', 'segment index'),
    ('push constant 1 2', 'end of line after push constant 1'),
    ('function Main.main', 'local count'),
    ('function 3', 'function name'),
    ('call Math.max', 'argument count'),
    ('call', 'function name'),
    ('label', 'label name'),
    ('goto 12', 'label name'),
    ('return 0', 'end of line after return'),
    ('Main.main', 'command'),
    ('7', 'command'),
])
def test_malformed_commands(text, expect):
    with pytest.raises(ParserError) as info:
        parse(text)
    assert info.value.error_code == ErrorCode.UNEXPECTED_TOKEN
    assert info.value.expect == expect


def test_commands_do_not_span_lines():
    with pytest.raises(ParserError):
        parse('push constant\n7')
    with pytest.raises(ParserError):
        parse('function Main.main\n0')


def test_names_may_be_keywords():
    assert parse('label return') == [Label('return')]
