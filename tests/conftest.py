from typing import Dict, List, Optional

import pytest

from hackvm import CodeGenerator, HackMachine, Lexer, Parser, TranslationContext

DEFAULT_RAM = {
    'SP': 256,
    'LCL': 300,
    'ARG': 400,
    'THIS': 3000,
    'THAT': 3010,
}


def parse(source: str):
    return Parser(Lexer(source)).parse()


def translate(source: str, unit_name: str = 'Test', context: Optional[TranslationContext] = None) -> List[str]:
    if context is None:
        context = TranslationContext()
    context.enter_unit(unit_name)
    return CodeGenerator(context).generate(parse(source))


def labels_of(code_list: List[str]) -> List[str]:
    return [line[1:-1] for line in code_list if line.startswith('(')]


def execute(code_list: List[str], ram: Optional[Dict] = None, until: Optional[str] = None) -> HackMachine:
    machine = HackMachine(code_list)
    settings = dict(DEFAULT_RAM)
    if ram is not None:
        settings.update(ram)
    for address, value in settings.items():
        machine.poke(address, value)
    machine.run(until=until)
    return machine


def run_vm(source: str, ram: Optional[Dict] = None, unit_name: str = 'Test') -> HackMachine:
    """Translate straight-line VM code and run it to the end."""
    return execute(translate(source, unit_name), ram)


@pytest.fixture
def context():
    context = TranslationContext()
    context.enter_unit('Test')
    return context


@pytest.fixture
def code_generator(context):
    return CodeGenerator(context)
