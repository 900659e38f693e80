"""Command execution using invoke."""

from pathlib import Path

from invoke import Context, Result
from invoke.exceptions import CommandTimedOut

from squashcat.core.errors import GitCommandError
from squashcat.core.log import logger


class Runner(Context):
    """invoke.Context with an explicit-working-directory execute().

    Every call names its working directory; the process working
    directory is never changed, so a failing repository cannot leave
    the next one running somewhere unexpected.
    """

    def __init__(self, secrets: list[str] | None = None, **kwargs):
        super().__init__(**kwargs)
        # invoke.Context turns plain attribute sets into config keys
        self._set(_secrets=[s for s in (secrets or []) if s])

    def redact(self, text: str) -> str:
        """Replace every configured secret in text with ***."""
        for secret in self._secrets:
            text = text.replace(secret, "***")
        return text

    def execute(
        self,
        command: str,
        cwd: Path | None = None,
        timeout: int | None = None,
        stdin: str | None = None,
        check: bool = True,
        env: dict[str, str] | None = None,
    ) -> Result:
        """Run a shell command and capture its output.

        Args:
            command: Command string to execute
            cwd: Working directory for the command
            timeout: Maximum execution time in seconds
            stdin: String to send to the command's stdin
            check: Raise GitCommandError on a non-zero exit code
            env: Extra environment variables (added to os.environ)

        Returns:
            invoke.Result with stdout, stderr and exited

        Raises:
            GitCommandError: If check=True and the command fails or
                times out. The message never contains a secret.
        """
        kwargs = {
            "hide": True,
            "warn": True,
            "in_stream": False,
        }
        if timeout:
            kwargs["timeout"] = timeout
        if stdin:
            kwargs["in_stream"] = stdin
        if env:
            kwargs["env"] = env

        shown = self.redact(command)
        logger.debug("Running command", command=shown, cwd=str(cwd or "."))

        try:
            if cwd:
                with self.cd(str(cwd)):
                    result = self.run(command, **kwargs)
            else:
                result = self.run(command, **kwargs)
        except CommandTimedOut as e:
            result = e.result
            result.exited = -1

        for line in (result.stdout + result.stderr).splitlines():
            logger.spew(self.redact(line.rstrip()))

        if check and result.exited != 0:
            raise GitCommandError(
                command=shown,
                exit_code=result.exited,
                stdout=self.redact(result.stdout),
                stderr=self.redact(result.stderr),
            )

        return result
