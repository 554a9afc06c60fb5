from setuptools import setup

setup(
    name = 'sqlbatch',
    description = 'Run a file of SQL statements in one transaction',
    version = '1.0',
    license = 'Artistic License',
    packages = ['sqlbatch', ],
    long_description = """sqlbatch
========

Command line tool that splits a SQL script into statements and runs
them, in order, inside a single transaction against PostgreSQL, Oracle
or SQL Server, printing query results as tables.""",
    long_description_content_type = 'text/markdown',
    python_requires = '>=3.8',
    install_requires = [
        'psycopg2-binary',
    ],
    extras_require = {
        'oracle': ['oracledb', ],
        'sqlserver': ['pymssql', ],
        'test': ['pytest', ],
    },
    entry_points = {
        'console_scripts': [
            'sqlbatch = sqlbatch:main',
        ]
    },
)
