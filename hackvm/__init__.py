from .lexer import Lexer
from .parser import Parser
from .codegen import CodeGenerator, TranslationContext
from .config import BootstrapMode, TranslatorConfig
from .translator import Translator, translate_source
from .emulator import HackMachine
from .dump import dump_tokens, dump_commands, load_commands
