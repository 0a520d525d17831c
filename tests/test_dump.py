import json

from hackvm.dump import dump_commands, dump_tokens, load_commands
from hackvm.lexer import Lexer

from conftest import parse, translate

SOURCE = '''
function Main.main 1
push constant 7
pop local 0
label LOOP
push local 0
if-goto LOOP
call Main.main 0
not
return
'''


def test_dump_tokens_is_json_ready():
    data = dump_tokens(Lexer('push constant 7'))
    assert data[0] == {'type': 'PUSH', 'value': 'push', 'start': [1, 1], 'end': [1, 5]}
    assert data[2]['value'] == 7
    assert data[-1]['type'] == 'EOF'
    json.dumps(data)


def test_dump_commands():
    data = dump_commands(parse(SOURCE))
    assert data[0] == {'command': 'function', 'name': 'Main.main', 'local_count': 1, 'line': 2}
    assert data[1] == {'command': 'memory_access', 'direction': 'push', 'segment': 'constant', 'index': 7, 'line': 3}
    assert data[5] == {'command': 'if_goto', 'name': 'LOOP', 'line': 7}
    assert data[-1] == {'command': 'return', 'line': 10}


def test_loaded_commands_translate_the_same():
    commands = parse(SOURCE)
    loaded = load_commands(json.loads(json.dumps(dump_commands(commands))))
    assert loaded == commands
    assert translate(SOURCE) == translate('\n'.join(map(repr, loaded)))
