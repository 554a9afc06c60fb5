# ----------------------------------------------------------------------
# sqlbatch_config
#
#   Connection and script settings for one batch run, merged from
#   defaults, an optional INI file and the command line.
# ----------------------------------------------------------------------

import configparser
import os

__all__ = ['sqlbatch_config', 'ConfigError', 'default_port',
           'conninfo_quote', 'SUPPORTED_ENGINES', ]

SUPPORTED_ENGINES = ('oracle', 'sqlserver', 'postgres', )

DEFAULT_PORTS = {
    'oracle':       1521,
    'sqlserver':    1433,
    'postgres':     5432,
}

DEFAULT_USERNAME = 'db_admin'
DEFAULT_TIMEOUT = 300
DEFAULT_SECTION = 'sqlbatch'

CONFIG_KEYS = ['engine', 'host', 'port', 'username', 'password',
               'dbname', 'sql', 'timeout', ]

class ConfigError(Exception):
    def __init__(self, errors):
        self.errors = list(errors)
        Exception.__init__(self, '; '.join(self.errors))

def default_port(engine):
    return DEFAULT_PORTS.get(engine.lower(), 0)

def conninfo_quote(value):
    # ----
    # Quote a value for a libpq conninfo string.
    # ----
    value = str(value)
    if value != '' and not any(c in value for c in " '\\\t\n"):
        return value
    return "'" + value.replace('\\', '\\\\').replace("'", "\\'") + "'"

class sqlbatch_config:
    def __init__(self, params = None, config_file = None,
                 section = DEFAULT_SECTION):
        self.errors = []

        values = {}
        if config_file is not None:
            values.update(self.read_config_file(config_file, section))
        if params is not None:
            for key, val in params.items():
                if val is not None:
                    values[key] = val

        self.engine = str(values.get('engine', '')).strip().lower()
        self.host = values.get('host', '')
        self.username = values.get('username', DEFAULT_USERNAME)
        self.password = values.get('password', '')
        self.dbname = values.get('dbname', '')
        self.sql_path = values.get('sql', '')
        self.port = self.parse_int(values.get('port', 0),
                                   'port must be a number')
        self.timeout = self.parse_int(values.get('timeout', DEFAULT_TIMEOUT),
                                      'timeout must be a number')

        self.validate()

    def read_config_file(self, config_file, section):
        if not os.path.isfile(config_file):
            self.errors.append("config file not found: %s" %(config_file, ))
            return {}

        parser = configparser.RawConfigParser()
        try:
            parser.read(config_file, encoding = 'utf-8')
        except configparser.Error as err:
            self.errors.append("invalid config file %s: %s"
                               %(config_file, str(err).strip()))
            return {}

        if not parser.has_section(section):
            self.errors.append("config section not found: %s" %(section, ))
            return {}

        result = {}
        for key in CONFIG_KEYS:
            if parser.has_option(section, key):
                result[key] = parser.get(section, key)
        return result

    def parse_int(self, value, message):
        try:
            return int(value)
        except (TypeError, ValueError):
            self.errors.append(message)
            return 0

    def validate(self):
        if self.engine == '':
            self.errors.append("engine is required")
        if self.host == '':
            self.errors.append("host is required")
        if self.dbname == '':
            self.errors.append("dbname is required")
        if self.sql_path == '':
            self.errors.append("sql path is required")

        if self.engine != '' and self.engine not in SUPPORTED_ENGINES:
            self.errors.append("unsupported engine: %s" %(self.engine, ))

        if self.port == 0 and self.engine != '':
            self.port = default_port(self.engine)

        return len(self.errors) == 0

    def check(self):
        if len(self.errors) > 0:
            raise ConfigError(self.errors)
        return self

    def connect_options(self):
        """
        Returns the driver module name and the keyword arguments for
        its connect() function.
        """
        if self.engine == 'postgres':
            conninfo = ' '.join(['%s=%s' %(key, conninfo_quote(val))
                for key, val in [
                    ('host',        self.host),
                    ('port',        self.port),
                    ('user',        self.username),
                    ('password',    self.password),
                    ('dbname',      self.dbname),
                    ('sslmode',     'disable'),
                    ('options',     '-c statement_timeout=%d'
                                    %(self.timeout * 1000, )),
                ]])
            return 'psycopg2', {'dsn': conninfo}

        if self.engine == 'oracle':
            return 'oracledb', {
                'user':         self.username,
                'password':     self.password,
                'dsn':          '%s:%d/%s' %(self.host, self.port,
                                             self.dbname),
            }

        if self.engine == 'sqlserver':
            return 'pymssql', {
                'server':       self.host,
                'port':         str(self.port),
                'user':         self.username,
                'password':     self.password,
                'database':     self.dbname,
                'timeout':      self.timeout,
            }

        raise ConfigError(["unsupported engine: %s" %(self.engine, )])

    def describe(self):
        return "%s://%s@%s:%d/%s" %(self.engine, self.username,
                                    self.host, self.port, self.dbname)
