# ----------------------------------------------------------------------
# sql_split
#
#   Split a script into individual SQL statements on semicolons that
#   are not inside quotes, comments or dollar quoted bodies.
# ----------------------------------------------------------------------

import io
from collections import namedtuple

__all__ = ['sql_split', 'sql_source', 'split', 'SQLSourceError',
           'lex_state', 'dollar_quoted', 'NORMAL', 'LINE_COMMENT',
           'BLOCK_COMMENT', 'SINGLE_QUOTED', 'DOUBLE_QUOTED', ]

# Max number of characters scanned after a '$' looking for the end
# of a dollar quote tag.
DOLLAR_TAG_WINDOW = 64

DOLLAR_TAG_BREAK = (' ', '\t', '\n', )

class SQLSourceError(Exception):
    """
    Reading the underlying character source failed.
    """
    pass

# ----
# The lexer is in exactly one of these states at any time. Only the
# dollar quoted state carries data, the exact opening tag.
# ----
lex_state = namedtuple('lex_state', ['kind', 'tag'])

NORMAL = lex_state('normal', None)
LINE_COMMENT = lex_state('line_comment', None)
BLOCK_COMMENT = lex_state('block_comment', None)
SINGLE_QUOTED = lex_state('single_quoted', None)
DOUBLE_QUOTED = lex_state('double_quoted', None)

def dollar_quoted(tag):
    return lex_state('dollar_quoted', tag)

class sql_source:
    """
    Character source with a small peek buffer.

    Wraps either a string or a text stream. Characters are pulled from
    the stream in chunks and only as far as reading and lookahead need
    them, so a file is never loaded in one piece.
    """
    def __init__(self, script, chunk_size = 8192):
        if isinstance(script, str):
            script = io.StringIO(script)
        self.stream = script
        self.chunk_size = max(chunk_size, DOLLAR_TAG_WINDOW)
        self.buf = ''
        self.pos = 0
        self.eof = False

    def fill(self, length):
        while len(self.buf) - self.pos < length and not self.eof:
            try:
                chunk = self.stream.read(self.chunk_size)
            except (OSError, UnicodeDecodeError) as err:
                raise SQLSourceError(str(err)) from err
            if not chunk:
                self.eof = True
                break
            self.buf = self.buf[self.pos:] + chunk
            self.pos = 0

    def read(self):
        # ----
        # Return the next character or None at the end of input.
        # ----
        self.fill(1)
        if self.pos >= len(self.buf):
            return None
        ch = self.buf[self.pos]
        self.pos += 1
        return ch

    def peek(self, length):
        if length <= 0:
            return ''
        self.fill(length)
        return self.buf[self.pos:self.pos + length]

    def consume(self, length):
        result = self.peek(length)
        self.pos += len(result)
        return result

class sql_split:
    def __init__(self, script):
        self.source = sql_source(script)

        self.statements = []
        self.cur_stmt = []
        self.state = NORMAL

        self.handlers = {
            NORMAL.kind:            self.state_normal,
            LINE_COMMENT.kind:      self.state_line_comment,
            BLOCK_COMMENT.kind:     self.state_block_comment,
            SINGLE_QUOTED.kind:     self.state_quote,
            DOUBLE_QUOTED.kind:     self.state_quote,
            'dollar_quoted':        self.state_dollar_quote,
        }

        while True:
            ch = self.source.read()
            if ch is None:
                break
            self.state = self.handlers[self.state.kind](ch)

        # ----
        # Whatever is left is the last statement, even if it ends in
        # the middle of a comment, quote or dollar quoted body.
        # ----
        self.have_stmt()

    def get_statements(self):
        return self.statements

    def append(self, text):
        self.cur_stmt.append(text)

    def have_stmt(self):
        stmt = ''.join(self.cur_stmt).strip()
        if stmt != '':
            self.statements.append(stmt)
        self.cur_stmt = []

    def state_normal(self, ch):
        if ch == '-' and self.source.peek(1) == '-':
            self.append(ch + self.source.consume(1))
            return LINE_COMMENT

        if ch == '/' and self.source.peek(1) == '*':
            self.append(ch + self.source.consume(1))
            return BLOCK_COMMENT

        if ch == '$':
            tag = self.dollar_tag()
            if tag is not None:
                self.append(ch + self.source.consume(len(tag) - 1))
                return dollar_quoted(tag)
            self.append(ch)
            return NORMAL

        if ch == "'":
            self.append(ch)
            return SINGLE_QUOTED

        if ch == '"':
            self.append(ch)
            return DOUBLE_QUOTED

        if ch == ';':
            self.have_stmt()
            return NORMAL

        self.append(ch)
        return NORMAL

    def dollar_tag(self):
        # ----
        # Called with the opening '$' already read. Returns the full
        # tag ('$$' or '$name$') or None if this '$' does not start
        # a dollar quote.
        # ----
        tag = '$'
        for ch in self.source.peek(DOLLAR_TAG_WINDOW):
            tag += ch
            if ch == '$':
                return tag
            if ch in DOLLAR_TAG_BREAK:
                return None
        return None

    def state_line_comment(self, ch):
        self.append(ch)
        if ch == '\n':
            return NORMAL
        return LINE_COMMENT

    def state_block_comment(self, ch):
        self.append(ch)
        if ch == '*' and self.source.peek(1) == '/':
            self.append(self.source.consume(1))
            return NORMAL
        return BLOCK_COMMENT

    def state_quote(self, ch):
        # ----
        # Backslash escapes are not recognized. A doubled quote works
        # because it closes and immediately reopens the literal.
        # ----
        self.append(ch)
        if self.state == SINGLE_QUOTED and ch == "'":
            return NORMAL
        if self.state == DOUBLE_QUOTED and ch == '"':
            return NORMAL
        return self.state

    def state_dollar_quote(self, ch):
        self.append(ch)
        if ch == '$':
            rest = self.state.tag[1:]
            if self.source.peek(len(rest)) == rest:
                self.append(self.source.consume(len(rest)))
                return NORMAL
        return self.state

def split(script):
    return sql_split(script).get_statements()
