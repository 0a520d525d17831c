import os
from enum import Enum
from typing import Mapping, Optional

DEBUG_ALL = 'DEBUG_ALL'
DEBUG_TOKENS = 'DEBUG_TOKENS'
DEBUG_COMMANDS = 'DEBUG_COMMANDS'
# older name of DEBUG_COMMANDS
DEBUG_AST = 'DEBUG_AST'

STACK_BASE = 256
TEMP_BASE = 5
TEMP_SIZE = 8
ENTRY_FUNCTION = 'Sys.init'


class BootstrapMode(Enum):
    AUTO = 'auto'  # only when some unit defines the entry function
    ALWAYS = 'always'
    NEVER = 'never'


class TranslatorConfig:
    def __init__(self,
                 bootstrap: BootstrapMode = BootstrapMode.AUTO,
                 entry_function: str = ENTRY_FUNCTION,
                 stack_base: int = STACK_BASE,
                 annotate: bool = False,
                 keep_going: bool = False,
                 debug_tokens: bool = False,
                 debug_commands: bool = False):
        self.bootstrap: BootstrapMode = bootstrap
        self.entry_function: str = entry_function
        self.stack_base: int = stack_base
        self.annotate: bool = annotate
        self.keep_going: bool = keep_going
        self.debug_tokens: bool = debug_tokens
        self.debug_commands: bool = debug_commands

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **kwargs):
        if environ is None:
            environ = os.environ
        debug_all = DEBUG_ALL in environ
        kwargs.setdefault('debug_tokens', debug_all or DEBUG_TOKENS in environ)
        kwargs.setdefault('debug_commands', debug_all or DEBUG_COMMANDS in environ or DEBUG_AST in environ)
        return cls(**kwargs)

    def __repr__(self):
        return f'TranslatorConfig(bootstrap={self.bootstrap.value}, entry_function={self.entry_function!r})'
