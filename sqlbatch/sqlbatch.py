# ----------------------------------------------------------------------
# sqlbatch
#
#   Class running a list of SQL statements in a single transaction
#   and printing their results.
# ----------------------------------------------------------------------

import importlib

import psycopg2

from .sqlbatch_report import sqlbatch_report

__all__ = ['sqlbatch', 'ExecutionError', 'is_query', ]

class ExecutionError(Exception):
    """
    A statement failed, or the connection or commit did. index is the
    1-based statement number, 0 when no single statement is to blame.
    """
    def __init__(self, index, message):
        self.index = index
        Exception.__init__(self, message)

def is_query(sql):
    normalized = sql.strip().lower()
    return normalized.startswith('select') or normalized.startswith('with')

def load_driver(driver_name):
    # ----
    # psycopg2 is always there. The Oracle and SQL Server drivers are
    # optional and only imported when such an engine is used.
    # ----
    if driver_name == 'psycopg2':
        return psycopg2
    try:
        return importlib.import_module(driver_name)
    except ImportError as err:
        raise ExecutionError(0, "failed to connect: database driver "
                             "module '%s' is not installed"
                             %(driver_name, )) from err

class sqlbatch:
    def __init__(self):
        self.dbconn = None
        self.driver = None

    def connect(self, config):
        driver_name, connoptions = config.connect_options()
        self.driver = load_driver(driver_name)
        try:
            self.dbconn = self.driver.connect(**connoptions)
        except self.driver.Error as err:
            raise ExecutionError(0, "failed to connect to %s: %s"
                                 %(config.describe(), str(err).strip())) from err

        if config.engine == 'oracle':
            self.dbconn.call_timeout = config.timeout * 1000

    def close(self):
        if self.dbconn is not None:
            self.dbconn.close()
            self.dbconn = None

    def execute_statements(self, statements, output):
        # ----
        # All statements run in the one transaction the driver opened
        # for us. The first failure rolls everything back. Output that
        # was already written for earlier statements stays.
        # ----
        report = sqlbatch_report(output)
        cur = self.dbconn.cursor()
        try:
            for index, sql in enumerate(statements, 1):
                try:
                    self.execute_statement(cur, index, sql, report)
                except Exception as err:
                    raise ExecutionError(index, str(err).strip()) from err

            try:
                self.dbconn.commit()
            except Exception as err:
                raise ExecutionError(0, "failed to commit transaction: %s"
                                     %(str(err).strip(), )) from err
        except Exception:
            # ----
            # A dead connection fails the rollback as well. The error
            # that got us here is the one to report.
            # ----
            try:
                self.dbconn.rollback()
            except Exception:
                pass
            raise
        finally:
            try:
                cur.close()
            except Exception:
                pass

    def execute_statement(self, cur, index, sql, report):
        if sql.strip() == '':
            return

        cur.execute(sql)

        if is_query(sql):
            if cur.description is not None:
                columns = [desc[0] for desc in cur.description]
                rows = cur.fetchall()
            else:
                columns = []
                rows = []
            report.statement_header(index, 'query')
            report.table(columns, rows)
        else:
            report.statement_header(index, 'execution')
            report.rows_affected(cur.rowcount)
