"""Interactive prompt for loxpy. Uses cmd as backend."""

import cmd

from .session import Session


class Shell(cmd.Cmd):
    """Lox interpreter shell."""
    intro = "loxpy :: Lox interpreter\nType 'exit' or press Ctrl-D to leave."
    prompt = "> "
    secondary_prompt = "... "   # used while a '{' is still open
    _tmp_prompt = "> "

    def __init__(self, sess: Session, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._buffer = ""
        self._open_braces = 0

    def onecmd(self, line):
        # Only a bare 'exit' or EOF is a shell command; inside an open block
        # even 'exit' is source text. Everything else, 'help' and '?' lines
        # included, goes to Lox.
        if line == "EOF" or (not self._buffer and line.strip() == "exit"):
            return super().onecmd(line.strip())
        if not self._buffer and not line.strip():
            return self.emptyline()
        return self.default(line)

    def default(self, line):
        """Buffers input until braces balance, then runs it as one chunk."""
        self._buffer += line + "\n"
        self._open_braces += line.count("{") - line.count("}")

        if self._open_braces > 0:
            self.prompt = self.secondary_prompt
            return

        source = self._buffer
        self._buffer = ""
        self._open_braces = 0
        self.prompt = self._tmp_prompt

        self.sess.run_chunk(source)
        self.sess.reset()

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
