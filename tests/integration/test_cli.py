import pytest
import yaml
from click.testing import CliRunner
from derrick import __version__
from derrick.CLI.main import cli


@pytest.fixture
def config_file(tmp_path):
    config_content = {
        'containers': {
            'db': {'image': 'postgres:13'},
            'api': {'image': 'me/api', 'run': {'link': ['db:db']}},
            'web': {'image': 'nginx', 'run': {'link': ['api:api']}},
        },
        'groups': {'backend': ['api', 'db']},
    }
    path = tmp_path / "derrick.yml"
    with open(path, 'w') as f:
        yaml.dump(config_content, f)
    return str(path)


@pytest.fixture
def docker(recording_runner, monkeypatch):
    runner = recording_runner()
    monkeypatch.setattr("derrick.MANAGERS.service_orchestrator.CommandRunner",
                        lambda **kwargs: runner)
    return runner


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert 'Lift containers with ease' in result.output
    for command in ['lift', 'provision', 'run', 'rm', 'kill', 'start', 'stop',
                    'pause', 'unpause', 'push', 'status', 'version']:
        assert command in result.output


def test_cli_version():
    result = CliRunner().invoke(cli, ['version'])
    assert result.exit_code == 0
    assert result.output.strip() == f"v{__version__}"


def test_cli_no_config_file(tmp_path):
    result = CliRunner().invoke(cli, ['-c', str(tmp_path / 'non_existent.yml'), 'status'])
    assert result.exit_code == 1
    assert 'Error: No configuration found' in result.output


def test_cli_invalid_cascade_kind(config_file):
    result = CliRunner().invoke(cli, ['-c', config_file, '-d', 'sideways', 'run'])
    assert result.exit_code == 2


def test_cli_unknown_target(config_file, docker):
    result = CliRunner().invoke(cli, ['-c', config_file, '-t', 'ghost', 'run'])
    assert result.exit_code == 1
    assert "No group or container matching 'ghost'" in result.output
    assert docker.commands == []


def test_cli_cycle(tmp_path, docker):
    path = tmp_path / "derrick.json"
    path.write_text('{"containers": {"a": {"run": {"link": ["b:b"]}}, '
                    '"b": {"run": {"link": ["a:a"]}}}}')
    result = CliRunner().invoke(cli, ['-c', str(path), 'run'])
    assert result.exit_code == 1
    assert 'cyclic' in result.output
    assert docker.commands == []


def test_cli_lift(config_file, docker):
    result = CliRunner().invoke(cli, ['-c', config_file, 'lift'])
    assert result.exit_code == 0
    assert [args[0] for args in docker.docker_commands] == ['pull'] * 3 + ['run'] * 3
    assert docker.docker_commands[:3] == [['pull', 'postgres:13'], ['pull', 'me/api'], ['pull', 'nginx']]


def test_cli_stop_group_with_affected(config_file, docker):
    docker.running.update(['db', 'api', 'web'])
    docker.existing.update(['db', 'api', 'web'])
    result = CliRunner().invoke(cli, ['-c', config_file, '-t', 'backend', '-a', 'all', 'stop'])
    assert result.exit_code == 0
    assert docker.docker_commands == [['stop', 'web'], ['stop', 'api'], ['stop', 'db']]


def test_cli_rm_kill(config_file, docker):
    docker.running.add('db')
    docker.existing.add('db')
    result = CliRunner().invoke(cli, ['-c', config_file, '--target', 'db', 'rm', '--kill'])
    assert result.exit_code == 0
    assert docker.docker_commands == [['kill', 'db'], ['rm', 'db']]


def test_cli_failure_exit_status(config_file, docker):
    docker.failing.add('db')
    result = CliRunner().invoke(cli, ['-c', config_file, '-t', 'db', 'run'])
    assert result.exit_code == 1
    assert 'Error: db:' in result.output


def test_cli_status(config_file, docker):
    docker.running.add('db')
    docker.existing.add('db')
    result = CliRunner().invoke(cli, ['-c', config_file, 'status'])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0].split() == ['NAME', 'IMAGE', 'ID', 'RUNNING', 'IP']
    assert lines[2].split() == ['db', 'postgres:13', 'db-012345678', 'true', '172.17.0.2']
    assert lines[3].split()[:3] == ['api', 'me/api', '-']
