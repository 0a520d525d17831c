from typing import Dict, Iterable, List, Union

from .lexer import Token
from .parser import (
    Command, Arithmetic, MemoryAccess, Label, Goto, IfGoto, Function, Call, Return,
    Operator, Direction, Segment,
)

command_name_to_class = {
    'arithmetic': Arithmetic,
    'memory_access': MemoryAccess,
    'label': Label,
    'goto': Goto,
    'if_goto': IfGoto,
    'function': Function,
    'call': Call,
    'return': Return,
}

command_class_to_name = {
    value: key
    for key, value in command_name_to_class.items()
}


def dump_location(location):
    return [location.lineno, location.column]


def dump_tokens(tokens: Iterable[Token]):
    return [
        {
            'type': token.type.name,
            'value': token.value,
            'start': dump_location(token.start),
            'end': dump_location(token.end),
        }
        for token in tokens
    ]


def dump_command(command: Command) -> Dict[str, Union[str, int, list, None]]:
    data = {'command': command_class_to_name[type(command)]}
    if isinstance(command, Arithmetic):
        data['operator'] = command.operator.value
    elif isinstance(command, MemoryAccess):
        data['direction'] = command.direction.value
        data['segment'] = command.segment.value
        data['index'] = command.index
    elif isinstance(command, Label):
        data['name'] = command.name
    elif isinstance(command, Function):
        data['name'] = command.name
        data['local_count'] = command.local_count
    elif isinstance(command, Call):
        data['name'] = command.name
        data['arg_count'] = command.arg_count
    if command.start is not None:
        data['line'] = command.start.lineno
    return data


def dump_commands(commands: Iterable[Command]) -> List[dict]:
    return list(map(dump_command, commands))


def load_command(dumped_command: dict) -> Command:
    command_class = command_name_to_class[dumped_command['command']]
    if command_class is Arithmetic:
        return Arithmetic(Operator(dumped_command['operator']))
    elif command_class is MemoryAccess:
        return MemoryAccess(Direction(dumped_command['direction']),
                            Segment(dumped_command['segment']),
                            dumped_command['index'])
    elif command_class is Function:
        return Function(dumped_command['name'], dumped_command['local_count'])
    elif command_class is Call:
        return Call(dumped_command['name'], dumped_command['arg_count'])
    elif command_class is Return:
        return Return()
    else:
        return command_class(dumped_command['name'])


def load_commands(dumped_commands: List[dict]) -> List[Command]:
    return list(map(load_command, dumped_commands))
