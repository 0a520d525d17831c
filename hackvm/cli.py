import json
import logging
from pathlib import Path
from typing import List, Tuple

import click

from .config import BootstrapMode, TranslatorConfig
from .dump import dump_tokens, dump_commands
from .exceptions import TranslatorError
from .lexer import Lexer
from .parser import Parser
from .translator import Translator

logger = logging.getLogger(__name__)

VM_EXT = '.vm'
ASM_EXT = '.asm'


def default_output(input_path: Path) -> Path:
    if input_path.is_dir():
        return input_path / (input_path.resolve().name + ASM_EXT)
    return input_path.with_suffix(ASM_EXT)


def discover_units(input_path: Path) -> List[Path]:
    if input_path.is_dir():
        return sorted(path for path in input_path.iterdir()
                      if path.is_file() and path.suffix.lower() == VM_EXT)
    return [input_path]


def write_debug_files(path: Path, source: str, config: TranslatorConfig):
    debug_dir = path.parent / f'{path.name}_debug'
    debug_dir.mkdir(parents=True, exist_ok=True)
    try:
        if config.debug_tokens:
            data = dump_tokens(Lexer(source))
            (debug_dir / f'{path.name}.tokens').write_text(json.dumps(data, indent=2), encoding='utf-8')
        if config.debug_commands:
            data = dump_commands(Parser(Lexer(source)))
            (debug_dir / f'{path.name}.commands').write_text(json.dumps(data, indent=2), encoding='utf-8')
    except TranslatorError as e:
        logger.warning('incomplete debug dump for %s: %s', path, e)


def read_units(paths: List[Path], config: TranslatorConfig) -> List[Tuple[str, str]]:
    units = list()
    for path in paths:
        logger.info('[->] Input file path: %s', path)
        try:
            source = path.read_text(encoding='utf-8')
        except UnicodeDecodeError as e:
            raise click.ClickException(f'{path} is not UTF-8 text: {e}')
        if config.debug_tokens or config.debug_commands:
            write_debug_files(path, source, config)
        units.append((path.stem, source))
    return units


@click.command(help='Translate Nand2Tetris VM code into Hack assembly.')
@click.argument('input_path', type=click.Path(exists=True, path_type=Path))
@click.option('-o', '--output', 'output_path', type=click.Path(dir_okay=False, path_type=Path),
              help='Output .asm file, defaults to the input name with .asm')
@click.option('--bootstrap', type=click.Choice([mode.value for mode in BootstrapMode]),
              default=BootstrapMode.AUTO.value, show_default=True,
              help='When to emit the stack setup and the call to the entry function')
@click.option('--entry', 'entry_function', default='Sys.init', show_default=True,
              help='Function called by the bootstrap code')
@click.option('-A', '--annotate', is_flag=True,
              help='Precede the code of every VM command with a comment')
@click.option('--keep-going', is_flag=True,
              help='Skip units that fail to translate instead of stopping')
@click.option('-v', '--verbose', is_flag=True, help='Log every translation step')
def main(input_path, output_path, bootstrap, entry_function, annotate, keep_going, verbose):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format='%(message)s')
    if output_path is None:
        output_path = default_output(input_path)
    logger.info('[->] Input: %s', input_path)
    logger.info('[<-] Output: %s', output_path)

    config = TranslatorConfig.from_env(bootstrap=BootstrapMode(bootstrap),
                                       entry_function=entry_function,
                                       annotate=annotate,
                                       keep_going=keep_going)
    paths = discover_units(input_path)
    if not paths:
        raise click.ClickException(f'no {VM_EXT} files in {input_path}')

    translator = Translator(config)
    try:
        code_list = translator.translate(read_units(paths, config))
    except TranslatorError as e:
        raise click.ClickException(str(e))

    output_path.write_text(''.join(line + '\n' for line in code_list), encoding='utf-8')
    if translator.failures:
        raise click.ClickException(f'{len(translator.failures)} unit(s) failed: ' +
                                   ', '.join(failure.unit_name for failure in translator.failures))
