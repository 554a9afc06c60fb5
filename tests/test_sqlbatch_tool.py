import io
import sys

import pytest

from sqlbatch import sqlbatch_tool
from sqlbatch.sqlbatch import ExecutionError


SCRIPT = """-- keep ; in comment
select ';' as a;
/* block ; comment */
update users set name = 'x;y' where id = 1;
"""


class FakeBatch:
    instances = []
    error = None

    def __init__(self):
        self.config = None
        self.statements = None
        self.closed = False
        FakeBatch.instances.append(self)

    def connect(self, config):
        self.config = config

    def execute_statements(self, statements, output):
        self.statements = statements
        if FakeBatch.error is not None:
            raise FakeBatch.error
        output.write("done\n")

    def close(self):
        self.closed = True


@pytest.fixture
def fake_batch(monkeypatch):
    FakeBatch.instances = []
    FakeBatch.error = None
    monkeypatch.setattr(sqlbatch_tool, "sqlbatch", FakeBatch)
    return FakeBatch


@pytest.fixture
def script_file(tmp_path):
    path = tmp_path / "script.sql"
    path.write_text(SCRIPT, encoding="utf-8")
    return str(path)


def run_args(path, *extra):
    return ["run", "-e", "postgres", "-h", "localhost", "-d", "app", "-f", path] + list(extra)


def test_no_arguments_prints_usage(capsys):
    assert sqlbatch_tool.main([]) == 2
    assert "usage: sqlbatch COMMAND" in capsys.readouterr().out


def test_help(capsys):
    assert sqlbatch_tool.main(["help"]) == 0
    assert "usage: sqlbatch COMMAND" in capsys.readouterr().out
    assert sqlbatch_tool.main(["--help", "run"]) == 0
    assert "usage: sqlbatch run" in capsys.readouterr().out
    assert sqlbatch_tool.main(["help", "split"]) == 0
    assert "usage: sqlbatch split" in capsys.readouterr().out
    assert sqlbatch_tool.main(["run", "--help"]) == 0
    assert "usage: sqlbatch run" in capsys.readouterr().out


def test_unknown_command(capsys):
    assert sqlbatch_tool.main(["bogus"]) == 2
    assert capsys.readouterr().err == "ERROR: unknown command 'bogus'\n"


def test_bad_option(capsys):
    assert sqlbatch_tool.main(["run", "--bogus"]) == 2
    assert "option --bogus not recognized" in capsys.readouterr().err


def test_stray_argument(capsys):
    assert sqlbatch_tool.main(["run", "extra"]) == 2
    assert capsys.readouterr().err == "unknown argument: extra\n"


def test_config_errors_before_any_io(capsys, fake_batch):
    assert sqlbatch_tool.main(["run", "-e", "mysql", "-f", "/does/not/exist.sql"]) == 1
    assert capsys.readouterr().err == (
        "host is required\n"
        "dbname is required\n"
        "unsupported engine: mysql\n"
    )
    assert fake_batch.instances == []


def test_missing_sql_file(capsys, fake_batch, tmp_path):
    assert sqlbatch_tool.main(run_args(str(tmp_path / "nope.sql"))) == 1
    assert capsys.readouterr().err.startswith("failed to read SQL file: ")
    assert fake_batch.instances == []


def test_invalid_utf8_file(capsys, fake_batch, tmp_path):
    path = tmp_path / "bad.sql"
    path.write_bytes(b"select '\xff';")
    assert sqlbatch_tool.main(run_args(str(path))) == 1
    assert capsys.readouterr().err.startswith("failed to read SQL file: ")


def test_no_statements(capsys, fake_batch, tmp_path):
    path = tmp_path / "empty.sql"
    path.write_text(" ;\n ; \n", encoding="utf-8")
    assert sqlbatch_tool.main(run_args(str(path))) == 1
    assert capsys.readouterr().err == "no SQL statements found in file\n"
    assert fake_batch.instances == []


def test_run_success(capsys, fake_batch, script_file):
    assert sqlbatch_tool.main(run_args(script_file)) == 0
    assert capsys.readouterr().out == "done\n"

    (batch,) = fake_batch.instances
    assert batch.statements == [
        "-- keep ; in comment\nselect ';' as a",
        "/* block ; comment */\nupdate users set name = 'x;y' where id = 1",
    ]
    assert batch.config.engine == "postgres"
    assert batch.config.port == 5432
    assert batch.config.username == "db_admin"
    assert batch.closed


def test_run_long_options(fake_batch, script_file):
    argv = [
        "run",
        "--engine=SQLServer",
        "--host=db.local",
        "--port=1435",
        "--username=sa",
        "--password=pw",
        "--dbname=app",
        "--timeout=10",
        "--file=" + script_file,
    ]
    assert sqlbatch_tool.main(argv) == 0
    config = fake_batch.instances[0].config
    assert (config.engine, config.host, config.port) == ("sqlserver", "db.local", 1435)
    assert (config.username, config.password, config.timeout) == ("sa", "pw", 10)


def test_run_with_config_file(fake_batch, script_file, tmp_path):
    ini = tmp_path / "sqlbatch.conf"
    ini.write_text(
        "[staging]\nengine = oracle\nhost = ora.local\ndbname = ORCL\nsql = %s\n" % script_file,
        encoding="utf-8",
    )
    assert sqlbatch_tool.main(["run", "-C", str(ini), "--section", "staging", "-U", "scott"]) == 0
    config = fake_batch.instances[0].config
    assert (config.engine, config.port, config.username) == ("oracle", 1521, "scott")


def test_statement_failure(capsys, fake_batch, script_file):
    fake_batch.error = ExecutionError(2, "relation \"users\" does not exist")
    assert sqlbatch_tool.main(run_args(script_file)) == 1
    captured = capsys.readouterr()
    assert captured.err == "statement 2 failed: relation \"users\" does not exist\n"
    assert fake_batch.instances[0].closed


def test_connection_failure(capsys, fake_batch, script_file):
    fake_batch.error = ExecutionError(0, "failed to connect: connection refused")
    assert sqlbatch_tool.main(run_args(script_file)) == 1
    assert capsys.readouterr().err == "failed to connect: connection refused\n"


def test_unexpected_error_prints_traceback(capsys, fake_batch, script_file):
    fake_batch.error = RuntimeError("kaput")
    assert sqlbatch_tool.main(run_args(script_file)) == 1
    err = capsys.readouterr().err
    assert err.startswith("kaput\n")
    assert "Traceback" in err
    assert fake_batch.instances[0].closed


def test_split_command(capsys, script_file):
    assert sqlbatch_tool.main(["split", script_file]) == 0
    assert capsys.readouterr().out == (
        "-- Statement 1 (%s)\n"
        "-- keep ; in comment\n"
        "select ';' as a;\n"
        "\n"
        "-- Statement 2 (%s)\n"
        "/* block ; comment */\n"
        "update users set name = 'x;y' where id = 1;\n"
        "\n"
    ) % (script_file, script_file)


def stdin_bytes(monkeypatch, data):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data), encoding="latin-1"))


def test_split_from_stdin(capsys, monkeypatch):
    stdin_bytes(monkeypatch, "select 'é'; select 2".encode("utf-8"))
    assert sqlbatch_tool.main(["split", "-"]) == 0
    out = capsys.readouterr().out
    assert "-- Statement 1 (-)\nselect '\u00e9';\n" in out
    assert "-- Statement 2 (-)\nselect 2;\n" in out


def test_split_stdin_invalid_utf8(capsys, monkeypatch):
    stdin_bytes(monkeypatch, b"select '\xff';")
    assert sqlbatch_tool.main(["split", "-"]) == 1
    assert capsys.readouterr().err.startswith("failed to read SQL file: ")


def test_split_usage_errors(capsys, tmp_path):
    assert sqlbatch_tool.main(["split"]) == 2
    assert capsys.readouterr().err == "at least one FILE must be given\n"
    assert sqlbatch_tool.main(["split", str(tmp_path / "missing.sql")]) == 1
    assert capsys.readouterr().err.startswith("failed to read SQL file: ")
