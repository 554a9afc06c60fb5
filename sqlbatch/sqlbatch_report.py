# ----------------------------------------------------------------------
# sqlbatch_report
#
#   Console output of statement results as fixed width tables.
# ----------------------------------------------------------------------

__all__ = ['sqlbatch_report', 'format_value', ]

def format_value(value):
    if value is None:
        return 'NULL'
    if isinstance(value, memoryview):
        value = value.tobytes()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode('utf-8', 'replace')
    return str(value)

class sqlbatch_report:
    def __init__(self, outfd):
        self.outfd = outfd

    def out(self, line = ''):
        self.outfd.write(line + '\n')

    def statement_header(self, index, kind):
        self.out()
        self.out("-- Statement %d (%s)" %(index, kind))

    def rows_affected(self, count):
        if count is not None and count >= 0:
            self.out("Rows affected: %d" %(count, ))
        else:
            self.out("OK")

    def table(self, columns, rows):
        columns = [str(col) for col in columns]
        data = [[format_value(val) for val in row] for row in rows]

        widths = [len(col) for col in columns]
        for row in data:
            for i, cell in enumerate(row):
                if len(cell) > widths[i]:
                    widths[i] = len(cell)

        self.separator(widths)
        self.row(columns, widths)
        self.separator(widths)
        for row in data:
            self.row(row, widths)
        self.separator(widths)

    def separator(self, widths):
        self.out('+' + ''.join(['-'*(width + 2) + '+' for width in widths]))

    def row(self, cells, widths):
        line = '|'
        for i, cell in enumerate(cells):
            line += ' ' + cell + ' '*(widths[i] - len(cell) + 1) + '|'
        self.out(line)
