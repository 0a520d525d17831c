from typing import Iterable, List, Optional

from .config import STACK_BASE, TEMP_BASE, TEMP_SIZE
from .exceptions import CodeGeneratorError, ScopeError, SegmentError, ErrorCode
from .lexer import MAX_INTEGER
from .parser import (
    Command, Arithmetic, MemoryAccess, Label, Goto, IfGoto, Function, Call, Return,
    Operator, Direction, Segment,
)

# saved in this order by call, restored in reverse by return
FRAME_REGISTERS = ['LCL', 'ARG', 'THIS', 'THAT']

base_registers = {
    Segment.LOCAL: 'LCL',
    Segment.ARGUMENT: 'ARG',
    Segment.THIS: 'THIS',
    Segment.THAT: 'THAT',
}

pointer_registers = ['THIS', 'THAT']

binary_operator_computations = {
    Operator.ADD: 'M=D+M',
    Operator.SUB: 'M=M-D',
    Operator.AND: 'M=D&M',
    Operator.OR: 'M=D|M',
}

unary_operator_computations = {
    Operator.NEG: 'M=-M',
    Operator.NOT: 'M=!M',
}

comparison_jumps = {
    Operator.EQ: 'JEQ',
    Operator.GT: 'JGT',
    Operator.LT: 'JLT',
}


def push_d() -> List[str]:
    # *SP = D, SP++
    return ['@SP', 'A=M', 'M=D', '@SP', 'M=M+1']


def pop_d() -> List[str]:
    # SP--, D = *SP
    return ['@SP', 'AM=M-1', 'D=M']


class TranslationContext:
    """
    State carried from one command to the next during a translation run.

    The two counters only ever grow, so every generated label stays unique
    across all units translated with the same context. ``current_function``
    scopes flow-control labels and ``unit_name`` qualifies static symbols;
    both are cleared when a new unit starts.
    """

    def __init__(self):
        self.current_function: Optional[str] = None
        self.unit_name: Optional[str] = None
        self.call_site_counter: int = 0
        self.comparison_counter: int = 0

    def enter_unit(self, unit_name: str):
        self.unit_name = unit_name
        self.current_function = None

    def next_call_site(self) -> int:
        self.call_site_counter += 1
        return self.call_site_counter

    def next_comparison(self) -> int:
        self.comparison_counter += 1
        return self.comparison_counter

    def __repr__(self):
        return f'TranslationContext(unit={self.unit_name!r}, function={self.current_function!r}, ' \
               f'calls={self.call_site_counter}, comparisons={self.comparison_counter})'


class CodeGenerator:
    def __init__(self, context: TranslationContext = None, annotate: bool = False):
        if context is None:
            context = TranslationContext()
        self.context: TranslationContext = context
        self.annotate: bool = annotate

    def generate(self, commands: Iterable[Command]) -> List[str]:
        code_list = list()
        for command in commands:
            code_list += self.gen_code(command)
        return code_list

    def gen_bootstrap(self, entry_function: str, stack_base: int = STACK_BASE) -> List[str]:
        code_list = ['// bootstrap'] if self.annotate else []
        code_list += [f'@{stack_base}', 'D=A', '@SP', 'M=D']
        code_list += self.gen_code(Call(entry_function, 0))
        return code_list

    def scoped_label(self, command: Label) -> str:
        if self.context.current_function is None:
            raise ScopeError(f'{command!r} outside of a function at {command.start!r}')
        return f'{self.context.current_function}${command.name}'

    def check_memory_access(self, command: MemoryAccess):
        if not isinstance(command.segment, Segment):
            raise SegmentError(ErrorCode.UNKNOWN_SEGMENT, repr(command.segment))
        if not isinstance(command.index, int) or not 0 <= command.index <= MAX_INTEGER:
            raise SegmentError(ErrorCode.INDEX_OUT_OF_RANGE, f'{command!r}')
        if command.segment == Segment.CONSTANT and command.direction == Direction.POP:
            raise SegmentError(ErrorCode.POP_CONSTANT, f'{command!r}')
        if command.segment == Segment.POINTER and command.index >= len(pointer_registers):
            raise SegmentError(ErrorCode.INDEX_OUT_OF_RANGE, f'{command!r}, pointer index must be 0 or 1')
        if command.segment == Segment.TEMP and command.index >= TEMP_SIZE:
            raise SegmentError(ErrorCode.INDEX_OUT_OF_RANGE, f'{command!r}, temp index must be 0 to {TEMP_SIZE - 1}')
        if command.segment == Segment.STATIC and self.context.unit_name is None:
            raise ScopeError(f'{command!r} outside of a compilation unit')

    def direct_address(self, command: MemoryAccess) -> Optional[str]:
        # segments whose cell is known without reading a base register
        if command.segment == Segment.TEMP:
            return str(TEMP_BASE + command.index)
        elif command.segment == Segment.POINTER:
            return pointer_registers[command.index]
        elif command.segment == Segment.STATIC:
            return f'{self.context.unit_name}.{command.index}'
        return None

    def gen_push(self, command: MemoryAccess) -> List[str]:
        code_list = list()
        if command.segment == Segment.CONSTANT:
            code_list += [f'@{command.index}', 'D=A']
        elif command.segment in base_registers:
            # D = *(base + index)
            code_list += [f'@{base_registers[command.segment]}', 'D=M',
                          f'@{command.index}', 'A=D+A', 'D=M']
        else:
            code_list += [f'@{self.direct_address(command)}', 'D=M']
        code_list += push_d()
        return code_list

    def gen_pop(self, command: MemoryAccess) -> List[str]:
        code_list = list()
        if command.segment in base_registers:
            # R13 = base + index, *R13 = pop()
            code_list += [f'@{base_registers[command.segment]}', 'D=M',
                          f'@{command.index}', 'D=D+A', '@R13', 'M=D']
            code_list += pop_d()
            code_list += ['@R13', 'A=M', 'M=D']
        else:
            code_list += pop_d()
            code_list += [f'@{self.direct_address(command)}', 'M=D']
        return code_list

    def gen_arithmetic(self, command: Arithmetic) -> List[str]:
        code_list = list()
        operator = command.operator
        if operator in unary_operator_computations:
            # top of stack rewritten in place
            code_list += ['@SP', 'A=M-1', unary_operator_computations[operator]]
        elif operator in binary_operator_computations:
            # D = right, then left (now top) = left op right
            code_list += pop_d()
            code_list += ['A=A-1', binary_operator_computations[operator]]
        elif operator in comparison_jumps:
            #   D = left - right              @SP, AM=M-1, D=M, A=A-1, D=M-D
            #   if D (cmp) 0 goto true        @CMP_TRUE:n, D;J..
            #   top = 0                       @SP, A=M-1, M=0
            #   goto end                      @CMP_END:n, 0;JMP
            # true:                         (CMP_TRUE:n)
            #   top = -1                      @SP, A=M-1, M=-1
            # end:                          (CMP_END:n)
            number = self.context.next_comparison()
            true_label = f'CMP_TRUE:{number}'
            end_label = f'CMP_END:{number}'
            code_list += pop_d()
            code_list += ['A=A-1', 'D=M-D',
                          f'@{true_label}', f'D;{comparison_jumps[operator]}',
                          '@SP', 'A=M-1', 'M=0',
                          f'@{end_label}', '0;JMP',
                          f'({true_label})',
                          '@SP', 'A=M-1', 'M=-1',
                          f'({end_label})']
        else:
            raise CodeGeneratorError(ErrorCode.UNEXPECTED_COMMAND, repr(operator))
        return code_list

    def gen_call(self, command: Call) -> List[str]:
        return_label = f'{command.name}$ret:{self.context.next_call_site()}'
        code_list = [f'@{return_label}', 'D=A']
        code_list += push_d()
        for register in FRAME_REGISTERS:
            code_list += [f'@{register}', 'D=M']
            code_list += push_d()
        # ARG = SP - 5 - arg_count
        code_list += ['@SP', 'D=M', f'@{len(FRAME_REGISTERS) + 1 + command.arg_count}', 'D=D-A', '@ARG', 'M=D']
        # LCL = SP
        code_list += ['@SP', 'D=M', '@LCL', 'M=D']
        code_list += [f'@{command.name}', '0;JMP', f'({return_label})']
        return code_list

    def gen_return(self, command: Return) -> List[str]:
        if self.context.current_function is None:
            raise ScopeError(f'{command!r} outside of a function at {command.start!r}')
        # R13 = frame = LCL, R14 = return address = *(frame - 5)
        code_list = ['@LCL', 'D=M', '@R13', 'M=D',
                     f'@{len(FRAME_REGISTERS) + 1}', 'A=D-A', 'D=M', '@R14', 'M=D']
        # *ARG = pop(), SP = ARG + 1
        code_list += pop_d()
        code_list += ['@ARG', 'A=M', 'M=D',
                      '@ARG', 'D=M+1', '@SP', 'M=D']
        # THAT, THIS, ARG, LCL = *(frame - 1), ..., *(frame - 4)
        for offset, register in enumerate(reversed(FRAME_REGISTERS), 1):
            code_list += ['@R13', 'D=M', f'@{offset}', 'A=D-A', 'D=M', f'@{register}', 'M=D']
        code_list += ['@R14', 'A=M', '0;JMP']
        return code_list

    def gen_code(self, command: Command) -> List[str]:
        code_list = [f'// {command!r}'] if self.annotate else []
        if isinstance(command, Arithmetic):
            # add | sub | neg | eq | gt | lt | and | or | not
            code_list += self.gen_arithmetic(command)
        elif isinstance(command, MemoryAccess):
            # push | pop
            self.check_memory_access(command)
            if command.direction == Direction.PUSH:
                code_list += self.gen_push(command)
            elif command.direction == Direction.POP:
                code_list += self.gen_pop(command)
            else:
                raise CodeGeneratorError(ErrorCode.UNEXPECTED_COMMAND, repr(command.direction))
        elif isinstance(command, Goto):
            # goto
            code_list += [f'@{self.scoped_label(command)}', '0;JMP']
        elif isinstance(command, IfGoto):
            # if-goto, jump when the popped value is not zero
            label = self.scoped_label(command)
            code_list += pop_d()
            code_list += [f'@{label}', 'D;JNE']
        elif isinstance(command, Label):
            # label
            code_list.append(f'({self.scoped_label(command)})')
        elif isinstance(command, Function):
            # function
            self.context.current_function = command.name
            code_list.append(f'({command.name})')
            if command.local_count > 0:
                code_list.append('D=0')
                for _ in range(command.local_count):
                    code_list += push_d()
        elif isinstance(command, Call):
            # call
            code_list += self.gen_call(command)
        elif isinstance(command, Return):
            # return
            code_list += self.gen_return(command)
        else:
            raise CodeGeneratorError(ErrorCode.UNEXPECTED_COMMAND, repr(command))
        return code_list
