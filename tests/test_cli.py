import json

from click.testing import CliRunner

from hackvm.cli import default_output, discover_units, main
from hackvm.config import BootstrapMode, TranslatorConfig


def write(path, text):
    path.write_text(text, encoding='utf-8')
    return path


def test_single_file(tmp_path):
    source = write(tmp_path / 'Simple.vm', 'push constant 7\npush constant 8\nadd\n')
    result = CliRunner().invoke(main, [str(source)])
    assert result.exit_code == 0, result.output
    lines = (tmp_path / 'Simple.asm').read_text(encoding='utf-8').splitlines()
    assert lines[:2] == ['@7', 'D=A']
    assert '@256' not in lines


def test_directory_with_bootstrap(tmp_path):
    program = tmp_path / 'Program'
    program.mkdir()
    write(program / 'Sys.vm', 'function Sys.init 0\ncall Main.main 0\nlabel END\ngoto END\n')
    write(program / 'Main.vm', 'function Main.main 0\npush static 1\nreturn\n')
    write(program / 'notes.txt', 'not vm code')
    result = CliRunner().invoke(main, [str(program), '--annotate'])
    assert result.exit_code == 0, result.output
    lines = (program / 'Program.asm').read_text(encoding='utf-8').splitlines()
    assert lines[:5] == ['// bootstrap', '@256', 'D=A', '@SP', 'M=D']
    # units in file name order
    assert lines.index('(Main.main)') < lines.index('(Sys.init)')
    assert '@Main.1' in lines
    assert '// push static 1' in lines


def test_bootstrap_option(tmp_path):
    source = write(tmp_path / 'Sys.vm', 'function Sys.init 0\nlabel END\ngoto END\n')
    output = tmp_path / 'out.asm'
    result = CliRunner().invoke(main, [str(source), '-o', str(output), '--bootstrap', 'never'])
    assert result.exit_code == 0, result.output
    assert output.read_text(encoding='utf-8').splitlines()[0] == '(Sys.init)'


def test_error_exit_code_and_no_output(tmp_path):
    source = write(tmp_path / 'Bad.vm', 'push constant 1\npop constant 0\n')
    result = CliRunner().invoke(main, [str(source)])
    assert result.exit_code == 1
    assert 'Bad' in result.output
    assert not (tmp_path / 'Bad.asm').exists()


def test_undecodable_input_names_the_file(tmp_path):
    source = tmp_path / 'Bad.vm'
    source.write_bytes(b'push constant 1\n\xff\xfe\n')
    result = CliRunner().invoke(main, [str(source)])
    assert result.exit_code == 1
    assert 'Bad.vm is not UTF-8 text' in result.output
    assert not isinstance(result.exception, UnicodeDecodeError)
    assert not (tmp_path / 'Bad.asm').exists()


def test_keep_going(tmp_path):
    write(tmp_path / 'A.vm', 'push constant 1\npop static 0\n')
    write(tmp_path / 'B.vm', 'goto X\n')
    result = CliRunner().invoke(main, [str(tmp_path), '--keep-going'])
    assert result.exit_code == 1
    assert '1 unit(s) failed: B' in result.output
    lines = (tmp_path / (tmp_path.name + '.asm')).read_text(encoding='utf-8').splitlines()
    assert '@A.0' in lines


def test_empty_directory(tmp_path):
    result = CliRunner().invoke(main, [str(tmp_path)])
    assert result.exit_code == 1
    assert 'no .vm files' in result.output


def test_debug_dumps(tmp_path, monkeypatch):
    monkeypatch.setenv('DEBUG_ALL', '1')
    source = write(tmp_path / 'Dump.vm', 'push constant 2\nneg\n')
    result = CliRunner().invoke(main, [str(source)])
    assert result.exit_code == 0, result.output
    debug_dir = tmp_path / 'Dump.vm_debug'
    tokens = json.loads((debug_dir / 'Dump.vm.tokens').read_text(encoding='utf-8'))
    commands = json.loads((debug_dir / 'Dump.vm.commands').read_text(encoding='utf-8'))
    assert tokens[0]['type'] == 'PUSH'
    assert commands[1] == {'command': 'arithmetic', 'operator': 'neg', 'line': 2}


def test_default_output(tmp_path):
    assert default_output(tmp_path / 'X.vm') == tmp_path / 'X.asm'
    assert default_output(tmp_path) == tmp_path / (tmp_path.name + '.asm')
    assert discover_units(tmp_path) == []


def test_config_from_env():
    config = TranslatorConfig.from_env({'DEBUG_TOKENS': ''}, bootstrap=BootstrapMode.NEVER)
    assert config.debug_tokens
    assert not config.debug_commands
    assert config.bootstrap == BootstrapMode.NEVER
    assert TranslatorConfig.from_env({'DEBUG_ALL': '1'}).debug_commands


def test_debug_ast_enables_command_dumps():
    config = TranslatorConfig.from_env({'DEBUG_AST': '1'})
    assert config.debug_commands
    assert not config.debug_tokens
