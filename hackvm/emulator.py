from typing import Callable, Dict, List, Optional, Tuple, Union

from .exceptions import EmulatorError, ErrorCode

RAM_SIZE = 32768
VARIABLE_BASE = 16
WORD_MASK = 0xFFFF

PREDEFINED_SYMBOLS: Dict[str, int] = {
    'SP': 0,
    'LCL': 1,
    'ARG': 2,
    'THIS': 3,
    'THAT': 4,
    'SCREEN': 16384,
    'KBD': 24576,
}
PREDEFINED_SYMBOLS.update({f'R{i}': i for i in range(16)})

# comp field of a C-instruction, written with A; the M forms read RAM[A] instead
COMPUTATIONS: Dict[str, Callable[[int, int], int]] = {
    '0': lambda d, a: 0,
    '1': lambda d, a: 1,
    '-1': lambda d, a: -1,
    'D': lambda d, a: d,
    'A': lambda d, a: a,
    '!D': lambda d, a: ~d,
    '!A': lambda d, a: ~a,
    '-D': lambda d, a: -d,
    '-A': lambda d, a: -a,
    'D+1': lambda d, a: d + 1,
    'A+1': lambda d, a: a + 1,
    'D-1': lambda d, a: d - 1,
    'A-1': lambda d, a: a - 1,
    'D+A': lambda d, a: d + a,
    'D-A': lambda d, a: d - a,
    'A-D': lambda d, a: a - d,
    'D&A': lambda d, a: d & a,
    'D|A': lambda d, a: d | a,
}

JUMPS: Dict[str, Callable[[int], bool]] = {
    '': lambda value: False,
    'JGT': lambda value: value > 0,
    'JEQ': lambda value: value == 0,
    'JGE': lambda value: value >= 0,
    'JLT': lambda value: value < 0,
    'JNE': lambda value: value != 0,
    'JLE': lambda value: value <= 0,
    'JMP': lambda value: True,
}


def to_signed(value: int) -> int:
    value &= WORD_MASK
    return value - 0x10000 if value & 0x8000 else value


class Instruction:
    def __init__(self, text: str, lineno: int):
        self.text: str = text
        self.lineno: int = lineno
        self.address: Optional[int] = None
        self.dest: str = ''
        self.comp: str = ''
        self.jump: str = ''
        self.is_address = text.startswith('@')
        if self.is_address:
            return
        rest = text
        if '=' in rest:
            self.dest, rest = rest.split('=', 1)
        if ';' in rest:
            rest, self.jump = rest.split(';', 1)
        self.comp = rest
        if self.comp.replace('M', 'A') not in COMPUTATIONS or self.jump not in JUMPS \
                or any(register not in 'ADM' for register in self.dest):
            raise EmulatorError(ErrorCode.UNKNOWN_INSTRUCTION, f'{text!r} at line {lineno}')

    def __repr__(self):
        return self.text


class HackMachine:
    """
    Executes Hack assembly text directly, without producing machine words.

    Labels and variables are resolved the way the Hack assembler does it:
    ``(X)`` marks the address of the next instruction, and any other unknown
    symbol is given the next free RAM cell starting at 16.
    """

    def __init__(self, program: Union[str, List[str]]):
        if isinstance(program, str):
            program = program.splitlines()
        self.instructions: List[Instruction] = list()
        self.labels: Dict[str, int] = dict()
        self.variables: Dict[str, int] = dict()
        self.ram: List[int] = [0] * RAM_SIZE
        self.pc: int = 0
        self.a: int = 0
        self.d: int = 0
        self.steps: int = 0
        self.load(program)

    def load(self, lines: List[str]):
        pending: List[Tuple[Instruction, str]] = list()
        for lineno, line in enumerate(lines, 1):
            text = line.split('//', 1)[0].replace(' ', '').strip()
            if not text:
                continue
            if text.startswith('(') and text.endswith(')'):
                self.labels[text[1:-1]] = len(self.instructions)
                continue
            instruction = Instruction(text, lineno)
            if instruction.is_address:
                pending.append((instruction, text[1:]))
            self.instructions.append(instruction)
        # second pass: symbols are known only once every label has been seen
        for instruction, symbol in pending:
            instruction.address = self.resolve(symbol)

    def resolve(self, symbol: str) -> int:
        if symbol.isdigit():
            return int(symbol)
        elif symbol in self.labels:
            return self.labels[symbol]
        elif symbol in PREDEFINED_SYMBOLS:
            return PREDEFINED_SYMBOLS[symbol]
        elif symbol not in self.variables:
            self.variables[symbol] = VARIABLE_BASE + len(self.variables)
        return self.variables[symbol]

    def address_of(self, symbol: str) -> int:
        if symbol in self.labels:
            return self.labels[symbol]
        elif symbol in PREDEFINED_SYMBOLS:
            return PREDEFINED_SYMBOLS[symbol]
        elif symbol in self.variables:
            return self.variables[symbol]
        raise EmulatorError(ErrorCode.UNDEFINED_LABEL, symbol)

    def peek(self, address: Union[int, str]) -> int:
        if isinstance(address, str):
            address = self.address_of(address)
        return to_signed(self.ram[address])

    def poke(self, address: Union[int, str], value: int):
        if isinstance(address, str):
            address = self.address_of(address)
        self.ram[address] = value & WORD_MASK

    @property
    def halted(self) -> bool:
        return self.pc >= len(self.instructions)

    def stack(self, base: int = 256) -> List[int]:
        return [self.peek(address) for address in range(base, self.peek('SP'))]

    def step(self):
        instruction = self.instructions[self.pc]
        self.steps += 1
        if instruction.is_address:
            self.a = instruction.address
            self.pc += 1
            return
        if 'M' in instruction.comp:
            operand = self.ram[self.a]
        else:
            operand = self.a
        value = COMPUTATIONS[instruction.comp.replace('M', 'A')](to_signed(self.d), to_signed(operand))
        value = to_signed(value)
        # M is written through the A value from before this instruction
        address = self.a
        if 'M' in instruction.dest:
            self.ram[address] = value & WORD_MASK
        if 'A' in instruction.dest:
            self.a = value & WORD_MASK
        if 'D' in instruction.dest:
            self.d = value & WORD_MASK
        if JUMPS[instruction.jump](value):
            self.pc = address
        else:
            self.pc += 1

    def run(self, max_steps: int = 1000000, until: Optional[str] = None) -> int:
        """Run until the program falls off its end or reaches label ``until``."""
        stop = self.address_of(until) if until is not None else None
        start_steps = self.steps
        while not self.halted and self.pc != stop:
            if self.steps - start_steps >= max_steps:
                raise EmulatorError(ErrorCode.STEP_LIMIT, f'{max_steps} steps, pc={self.pc}')
            self.step()
        return self.steps - start_steps
