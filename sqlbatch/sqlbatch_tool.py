#!/usr/bin/env python

import getopt
import io
import sys
import traceback

from .sql_split import sql_split, SQLSourceError
from .sqlbatch import sqlbatch, ExecutionError
from .sqlbatch_config import sqlbatch_config, ConfigError, DEFAULT_SECTION

__all__ = ['main']

def main(argv = None):
    if argv is None:
        argv = sys.argv[1:]

    if len(argv) == 0:
        usage()
        return 2

    if argv[0] in ['-?', '--help', 'help']:
        if len(argv) == 1:
            usage()
        else:
            if argv[1] == 'run':
                help_run()
            elif argv[1] == 'split':
                help_split()
            else:
                usage()
        return 0

    if argv[0] == 'run':
        return run_command(argv[1:])

    if argv[0] == 'split':
        return split_command(argv[1:])

    sys.stderr.write("ERROR: unknown command '%s'\n" %(argv[0]))
    return 2

def run_command(argv):
    params = {}
    opt_config = None
    opt_section = DEFAULT_SECTION

    # ----
    # Parse command line
    # ----
    try:
        opts, args = getopt.getopt(argv,
                # Standard connection related options
                "C:d:e:f:h:p:U:W:", [
                'engine=', 'dbname=', 'host=', 'port=', 'user=',
                'username=', 'password=', 'help',
                # run command specific options
                'sql=', 'file=', 'config=', 'section=', 'timeout=', ])
    except getopt.GetoptError as err:
        sys.stderr.write(str(err) + '\n')
        return 2

    for opt, val in opts:
        if opt in ['-e', '--engine']:
            params['engine'] = val
        elif opt in ['-d', '--dbname']:
            params['dbname'] = val
        elif opt in ['-h', '--host']:
            params['host'] = val
        elif opt in ['-p', '--port']:
            params['port'] = val
        elif opt in ['-U', '--user', '--username']:
            params['username'] = val
        elif opt in ['-W', '--password']:
            params['password'] = val
        elif opt in ['--help']:
            help_run()
            return 0

        elif opt in ['-f', '--sql', '--file']:
            params['sql'] = val
        elif opt in ['-C', '--config']:
            opt_config = val
        elif opt in ['--section']:
            opt_section = val
        elif opt in ['--timeout']:
            params['timeout'] = val

    if len(args) > 0:
        sys.stderr.write("unknown argument: %s\n" %(args[0], ))
        return 2

    # ----
    # Everything about the configuration is checked before we touch
    # the script file or the database.
    # ----
    try:
        config = sqlbatch_config(params, opt_config, opt_section).check()
    except ConfigError as err:
        for error in err.errors:
            sys.stderr.write(error + '\n')
        return 1

    try:
        statements = read_statements(config.sql_path)
    except (OSError, SQLSourceError) as err:
        sys.stderr.write("failed to read SQL file: %s\n" %(err, ))
        return 1

    if len(statements) == 0:
        sys.stderr.write("no SQL statements found in file\n")
        return 1

    sb = sqlbatch()
    try:
        sb.connect(config)
        sb.execute_statements(statements, sys.stdout)
    except ExecutionError as err:
        if err.index > 0:
            sys.stderr.write("statement %d failed: %s\n" %(err.index, err))
        else:
            sys.stderr.write(str(err) + '\n')
        return 1
    except Exception as err:
        sys.stderr.write(str(err) + '\n')
        traceback.print_exc()
        return 1
    finally:
        sb.close()

    return 0

def split_command(argv):
    try:
        opts, args = getopt.getopt(argv, "", ['help', ])
    except getopt.GetoptError as err:
        sys.stderr.write(str(err) + '\n')
        return 2

    for opt, val in opts:
        if opt in ['--help']:
            help_split()
            return 0

    if len(args) == 0:
        sys.stderr.write("at least one FILE must be given\n")
        return 2

    index = 0
    for fname in args:
        try:
            if fname == '-':
                statements = read_stdin_statements()
            else:
                statements = read_statements(fname)
        except (OSError, SQLSourceError) as err:
            sys.stderr.write("failed to read SQL file: %s\n" %(err, ))
            return 1

        for stmt in statements:
            index += 1
            print("-- Statement %d (%s)" %(index, fname))
            print(stmt + ";")
            print("")

    return 0

def read_statements(fname):
    with open(fname, 'r', encoding = 'utf-8') as fd:
        return sql_split(fd).get_statements()

def read_stdin_statements():
    # ----
    # Standard input is UTF-8 just like script files, whatever the
    # locale says. Detach afterwards so stdin itself stays open.
    # ----
    fd = io.TextIOWrapper(sys.stdin.buffer, encoding = 'utf-8')
    try:
        return sql_split(fd).get_statements()
    finally:
        fd.detach()

def usage():
    print("""
usage: sqlbatch COMMAND [OPTIONS]

    sqlbatch runs a file of SQL statements against a PostgreSQL, Oracle
    or SQL Server database inside one transaction and prints the results.

    Use

        sqlbatch COMMAND --help

    for detailed information about one of the commands below.

COMMANDS:

    run             Splits a SQL file into statements and executes them
                    all in a single transaction. Query results are shown
                    as tables. If any statement fails, the whole
                    transaction is rolled back.

    split           Splits one or more SQL files into statements and
                    prints them, without connecting to any database.
""")

def help_run():
    print("""
usage: sqlbatch run [OPTIONS]

    Executes every statement of a SQL file, in order, in one transaction.

    Statements are separated by semicolons. Semicolons inside quoted
    strings, quoted identifiers, -- and /* */ comments and dollar
    quoted bodies ($$ ... $$ or $tag$ ... $tag$) do not end a statement.

    Statements starting with SELECT or WITH print their result rows as
    a table. All other statements print the number of affected rows, or
    OK if the driver does not report one.

OPTIONS:

    -e, --engine=ENGINE One of oracle, sqlserver or postgres.

    -h, --host=HOST     The host name of the database server.

    -p, --port=PORT     The port number. Defaults to 1521 for oracle,
                        1433 for sqlserver and 5432 for postgres.

    -U, --user=USER     The user name to connect as (default db_admin).

    -W, --password=PW   The password.

    -d, --dbname=DB     The database name, or the service name for oracle.

    -f, --sql=FILE      The SQL file to run. --file is an alias.

    -C, --config=FILE   Read defaults for all of the above from the INI
                        file FILE. Keys are engine, host, port, username,
                        password, dbname, sql and timeout. Command line
                        options override the file.

    --section=NAME      The section of the config file to use
                        (default sqlbatch).

    --timeout=SECONDS   Statement timeout (default 300).

EXIT STATUS:

    0 on success, 1 on configuration, file or database errors and 2 on
    invalid command line usage.
""")

def help_split():
    print("""
usage: sqlbatch split FILE [...]

    Splits the given SQL files into statements and prints them, each
    terminated by a semicolon. A FILE of - reads standard input. Nothing
    is executed.
""")
