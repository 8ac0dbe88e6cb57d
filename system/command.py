# system/command.py
from __future__ import annotations
import shlex
import subprocess
from typing import List, Optional, Sequence, Union

from errors import CommandError
from logger import log

SHELL = "/bin/bash"


def quote_argv(argv: Sequence[str]) -> str:
    return shlex.join(list(argv))


class CommandRunner:
    """
    The single channel for every system-mutating command.
    Exit status is the only thing interpreted: zero passes, anything else
    raises CommandError. Nothing here knows what a command means.
    """

    def __init__(self, target_root: str = "/mnt", cwd: Optional[str] = None):
        self.target_root = target_root
        self.cwd = cwd

    def _exec(
        self,
        argv: List[str],
        stdin: Optional[str],
        interactive: bool,
    ) -> subprocess.CompletedProcess:
        log.info("Running: %s", quote_argv(argv))
        try:
            if interactive:
                # Inherits the terminal so tools like cfdisk can draw
                proc = subprocess.run(argv, cwd=self.cwd, check=False)
            else:
                proc = subprocess.run(
                    argv,
                    input=stdin,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    text=True,
                    cwd=self.cwd,
                    check=False,
                )
        except OSError as e:
            log.error("Could not launch %s: %s", argv[0], e)
            raise CommandError(argv, None, str(e)) from e

        if proc.stdout:
            log.debug("stdout: %s", proc.stdout.strip())
        if proc.stderr:
            log.debug("stderr: %s", proc.stderr.strip())
        if proc.returncode != 0:
            log.error("%s exited with status %s", argv[0], proc.returncode)
            raise CommandError(argv, proc.returncode, proc.stderr or proc.stdout or "")
        return proc

    def run(
        self,
        program: str,
        args: Sequence[str] = (),
        stdin: Optional[str] = None,
        *,
        interactive: bool = False,
    ) -> int:
        """Run `program args...`; returns the (zero) exit status or raises CommandError."""
        return self._exec([program, *args], stdin, interactive).returncode

    def capture(self, program: str, args: Sequence[str] = ()) -> str:
        """Like run() but returns stripped stdout."""
        return (self._exec([program, *args], None, False).stdout or "").strip()

    def run_in_target_root(
        self,
        command: Union[str, Sequence[str]],
        stdin: Optional[str] = None,
    ) -> int:
        """
        Run a shell command inside the mounted target root:
            chroot <target_root> /bin/bash -c <command>
        An argv list is shell-quoted first; pass a plain string only for
        fixed text that needs shell syntax. Secrets belong on stdin.
        """
        if not isinstance(command, str):
            command = quote_argv(command)
        return self.run("chroot", [self.target_root, SHELL, "-c", command], stdin=stdin)
