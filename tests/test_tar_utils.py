import pytest

from docker_api.tar_utils import (create_tar, is_ignored, list_tar_contents, make_build_context,
                                  read_dockerignore)


def test_create_tar_from_directory(tmp_path):
    source = tmp_path / 'conf'
    source.mkdir()
    (source / 'a.ini').write_text('x')

    names = list_tar_contents(create_tar(str(source)))

    assert sorted(names) == ['conf', 'conf/a.ini']


def test_create_tar_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        create_tar(str(tmp_path / 'missing'))


def test_read_dockerignore(tmp_path):
    (tmp_path / '.dockerignore').write_text('# comment\n\nnode_modules/\n*.log\n')

    assert read_dockerignore(str(tmp_path)) == ['node_modules', '*.log']


def test_is_ignored():
    patterns = ['*.log', 'build', '!build/keep.txt']

    assert is_ignored('debug.log', patterns)
    assert is_ignored('build/out.bin', patterns)
    assert not is_ignored('build/keep.txt', patterns)
    assert not is_ignored('src/main.py', patterns)


def test_build_context_keeps_dockerfile(tmp_path):
    (tmp_path / 'docker').mkdir()
    (tmp_path / 'docker' / 'Dockerfile').write_text('FROM alpine\n')
    (tmp_path / 'docker' / 'notes.md').write_text('x')
    (tmp_path / '.dockerignore').write_text('docker\n')

    names = list_tar_contents(make_build_context(str(tmp_path), 'docker/Dockerfile'))

    assert names == ['.dockerignore', 'docker/Dockerfile']
