from enum import Enum


class ErrorCode(Enum):
    # LexerError
    LEXER_ERROR = 'Lexer Error'
    INTEGER_OUT_OF_RANGE = 'Integer out of range'

    # ParserError
    UNEXPECTED_TOKEN = 'Unexpected token'
    POP_CONSTANT = 'Pop into constant'

    # CodeGeneratorError
    UNEXPECTED_COMMAND = 'Unexpected command'
    SCOPE_ERROR = 'Scope Error'
    UNKNOWN_SEGMENT = 'Unknown segment'
    INDEX_OUT_OF_RANGE = 'Index out of range'

    # Translator
    UNIT_ERROR = 'Unit Error'

    # EmulatorError
    UNKNOWN_INSTRUCTION = 'Unknown instruction'
    UNDEFINED_LABEL = 'Undefined label'
    STEP_LIMIT = 'Step limit exceeded'


class TranslatorError(Exception):
    def __init__(self, error_code: ErrorCode, message: str = ''):
        self.error_code = error_code
        self.message = message
        super().__init__(f'{self.__class__.__name__}: {error_code.value}: {message}')


class LexerError(TranslatorError):
    pass


class ParserError(TranslatorError):
    pass


class CodeGeneratorError(TranslatorError):
    pass


class ScopeError(CodeGeneratorError):
    def __init__(self, message: str = ''):
        super().__init__(ErrorCode.SCOPE_ERROR, message)


class SegmentError(CodeGeneratorError):
    pass


class UnitError(TranslatorError):
    def __init__(self, unit_name: str, error: TranslatorError):
        self.unit_name = unit_name
        self.error = error
        super().__init__(ErrorCode.UNIT_ERROR, f'in {unit_name}: {error}')


class EmulatorError(TranslatorError):
    pass
