import os
import re
import shutil
import subprocess
from dataclasses import dataclass
from typing import Any, Final

from logly import logger

from scoopsearch.core.errors import ExternalCommandFailed
from scoopsearch.core.scoop_export_parser import extract_first_json_value

_CREATE_NO_WINDOW: Final[int] = 0x08000000
_TIMEOUT_EXIT_CODE: Final[int] = 124

# Scoop prints via PowerShell formatting, which can include ANSI sequences.
_ANSI_OSC_RE = re.compile(r"\x1b\][^\x07]*(?:\x07|\x1b\\)")
_ANSI_CSI_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")
_ANSI_2CHAR_RE = re.compile(r"\x1b[@-Z\\-_]")


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured output of a finished `scoop` invocation."""

    stdout: str
    stderr: str
    returncode: int
    json: Any | None = None


def decode_output(data: bytes) -> str:
    """Decodes process output bytes with a small encoding fallback list.

    Args:
        data: Raw bytes to decode.

    Returns:
        Decoded text.
    """
    for enc in ("utf-8", "cp932"):
        try:
            return data.decode(enc)
        except UnicodeDecodeError:
            continue
    return data.decode("utf-8", errors="replace")


def sanitize_output(text: str) -> str:
    """Normalizes newlines and removes ANSI escape sequences."""
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _ANSI_OSC_RE.sub("", text)
    text = _ANSI_CSI_RE.sub("", text)
    text = _ANSI_2CHAR_RE.sub("", text)
    return text


def find_powershell_executable() -> str:
    """Returns PowerShell 7 (`pwsh`) when available, else Windows PowerShell."""
    return shutil.which("pwsh") or shutil.which("powershell") or "powershell"


def build_scoop_argv(args: str, shell: str | None = None) -> list[str]:
    """Builds the argv that runs `scoop {args}` in a non-interactive PowerShell.

    The information stream (`6>`, Write-Host banners) is dropped and scoop's exit
    code becomes the process exit code.
    """
    command = f"$ErrorActionPreference='Stop'; scoop {args} 6> $null; exit $LASTEXITCODE"
    return [
        shell or find_powershell_executable(),
        "-NoLogo",
        "-NoProfile",
        "-NonInteractive",
        "-ExecutionPolicy",
        "Bypass",
        "-Command",
        command,
    ]


class ScoopCli:
    """Runs `scoop` commands through PowerShell and captures their output.

    Calls block until the process exits; run them off the GUI thread.
    """

    def __init__(self, shell: str | None = None) -> None:
        self._shell = shell

    def run(
        self, args: str, timeout_sec: int = 60, parse_json: bool = False
    ) -> CommandResult:
        """Runs `scoop {args}`.

        Args:
            args: Verb and arguments, e.g. `"bucket add extras"`.
            timeout_sec: Seconds before the process is abandoned (exit code 124).
            parse_json: Decode the first JSON value found in stdout.

        Returns:
            The captured output.

        Raises:
            ExternalCommandFailed: If the process exits with a non-zero code.
        """
        argv = build_scoop_argv(args, shell=self._shell)

        kwargs: dict = {
            "capture_output": True,
            "timeout": timeout_sec,
        }
        if os.name == "nt":
            kwargs["creationflags"] = _CREATE_NO_WINDOW

        logger.info(f"Starting scoop {args} timeout={timeout_sec}s")
        try:
            completed = subprocess.run(argv, **kwargs)
        except subprocess.TimeoutExpired:
            logger.warning(f"scoop {args} timed out")
            raise ExternalCommandFailed(
                _TIMEOUT_EXIT_CODE, "timeout: command exceeded limit"
            ) from None
        except OSError as e:
            logger.exception(f"scoop {args} could not be started")
            raise ExternalCommandFailed(1, str(e)) from e

        stdout = sanitize_output(decode_output(completed.stdout))
        stderr = sanitize_output(decode_output(completed.stderr))
        logger.debug(f"scoop {args} stdout lines={len(stdout.splitlines())}")
        for line in stderr.splitlines():
            if line.strip():
                logger.warning(f"[scoop {args}] {line}")

        logger.info(f"scoop {args} finished returncode={completed.returncode}")
        if completed.returncode != 0:
            raise ExternalCommandFailed(completed.returncode, stderr)

        data = extract_first_json_value(stdout) if parse_json else None
        return CommandResult(
            stdout=stdout, stderr=stderr, returncode=completed.returncode, json=data
        )

    def export(self, timeout_sec: int = 60) -> CommandResult:
        return self.run("export", timeout_sec=timeout_sec, parse_json=True)

    def update(self, timeout_sec: int = 300) -> CommandResult:
        return self.run("update", timeout_sec=timeout_sec)

    def bucket_list(self, timeout_sec: int = 60) -> CommandResult:
        return self.run("bucket list", timeout_sec=timeout_sec)

    def bucket_add(
        self, name: str, repository: str | None = None, timeout_sec: int = 900
    ) -> CommandResult:
        args = f"bucket add {ps_quote(name)}"
        if repository:
            args = f"{args} {ps_quote(repository)}"
        return self.run(args, timeout_sec=timeout_sec)

    def install(self, target: str, timeout_sec: int = 900) -> CommandResult:
        return self.run(f"install {ps_quote(target)}", timeout_sec=timeout_sec)


def ps_quote(value: str) -> str:
    """Quotes a value for PowerShell single-quoted literals when needed."""
    if re.fullmatch(r"[A-Za-z0-9_.:/@+-]+", value):
        return value
    return "'" + value.replace("'", "''") + "'"
