from .sqlbatch_tool import main
from .sql_split import sql_split, split, SQLSourceError
from .sqlbatch_config import ConfigError
from .sqlbatch import ExecutionError

__all__ = ['main', 'sql_split', 'split', 'SQLSourceError', 'ConfigError',
           'ExecutionError', ]
