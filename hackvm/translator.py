import logging
from typing import Iterable, List, Optional, Tuple

from .codegen import CodeGenerator, TranslationContext
from .config import BootstrapMode, TranslatorConfig
from .exceptions import TranslatorError, UnitError
from .lexer import Lexer
from .parser import Command, Function, Parser

logger = logging.getLogger(__name__)


class Unit:
    """One compilation unit: a named VM source, usually a single ``.vm`` file."""

    def __init__(self, name: str, source: str):
        self.name: str = name
        self.source: str = source
        self.commands: Optional[List[Command]] = None

    def parse(self) -> List[Command]:
        if self.commands is None:
            self.commands = Parser(Lexer(self.source)).parse()
        return self.commands

    def defines(self, function_name: str) -> bool:
        return any(isinstance(command, Function) and command.name == function_name
                   for command in self.parse())

    def __repr__(self):
        return f'Unit({self.name!r})'


class Translator:
    def __init__(self, config: TranslatorConfig = None):
        if config is None:
            config = TranslatorConfig()
        self.config: TranslatorConfig = config
        self.context: TranslationContext = TranslationContext()
        self.code_generator: CodeGenerator = CodeGenerator(self.context, annotate=config.annotate)
        self.failures: List[UnitError] = list()

    def should_bootstrap(self, units: List[Unit]) -> bool:
        if self.config.bootstrap == BootstrapMode.ALWAYS:
            return True
        elif self.config.bootstrap == BootstrapMode.NEVER:
            return False
        return any(unit.defines(self.config.entry_function) for unit in units)

    def unit_failed(self, unit: Unit, error: TranslatorError):
        unit_error = UnitError(unit.name, error)
        if not self.config.keep_going:
            raise unit_error from error
        logger.error('skipping %s: %s', unit.name, error)
        self.failures.append(unit_error)

    def translate_unit(self, unit: Unit) -> List[str]:
        logger.debug('translating %s', unit.name)
        self.context.enter_unit(unit.name)
        code_list = self.code_generator.generate(unit.parse())
        logger.debug('translated %s into %d lines', unit.name, len(code_list))
        return code_list

    def translate(self, units: Iterable[Tuple[str, str]]) -> List[str]:
        """
        Translate ``(name, source)`` pairs into one Hack assembly program.

        Every unit is parsed before any code is generated so that a bad unit
        never leaves partial output behind and the bootstrap decision can
        look at all of them.
        """
        parsed_units = list()
        for name, source in units:
            unit = Unit(name, source)
            try:
                unit.parse()
            except TranslatorError as e:
                self.unit_failed(unit, e)
                continue
            parsed_units.append(unit)

        code_list = list()
        if self.should_bootstrap(parsed_units):
            logger.debug('emitting bootstrap for %s', self.config.entry_function)
            code_list += self.code_generator.gen_bootstrap(self.config.entry_function, self.config.stack_base)
        for unit in parsed_units:
            try:
                code_list += self.translate_unit(unit)
            except TranslatorError as e:
                self.unit_failed(unit, e)
        return code_list


def translate_source(source: str, unit_name: str = 'Main', config: TranslatorConfig = None) -> List[str]:
    if config is None:
        config = TranslatorConfig(bootstrap=BootstrapMode.NEVER)
    return Translator(config).translate([(unit_name, source)])
