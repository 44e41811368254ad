"""Typst compilation service.

Each call is one compilation job: the source is written to a uniquely named
``<job>.typ`` file, ``typst compile <job>.typ <job>.pdf`` runs as a
subprocess, and the PDF bytes are read back. Both files are removed on every
exit path. Jobs share nothing but the working directory, so concurrent
compilations need no locking.
"""

from __future__ import annotations

import logging
import tempfile
import uuid
from collections.abc import Sequence
from pathlib import Path

from app.config import settings
from app.exceptions import CompileFailed, CompileTimeout
from app.utils.process import CommandTimeout, run

logger = logging.getLogger(__name__)


class TypstCompiler:
    """Compiles finished Typst sources to PDF bytes.

    ``command`` is the argv prefix used to launch the compiler, normally
    ``["typst"]``. It is a list so wrappers (e.g. a container runtime) can
    be configured without a shell.
    """

    def __init__(
        self,
        command: Sequence[str] = ("typst",),
        *,
        timeout: float = 30.0,
        workdir: Path | None = None,
        font_paths: Sequence[Path] = (),
    ):
        self.command = list(command)
        self.timeout = timeout
        self.workdir = Path(workdir) if workdir else Path(tempfile.gettempdir())
        self.font_paths = [Path(p) for p in font_paths]

    def job_paths(self, job_id: str) -> tuple[Path, Path]:
        """Return the (input, output) file pair for a job."""
        return self.workdir / f"{job_id}.typ", self.workdir / f"{job_id}.pdf"

    def build_command(self, input_path: Path, output_path: Path) -> list[str]:
        cmd = [*self.command, "compile"]
        for font_path in self.font_paths:
            cmd += ["--font-path", str(font_path)]
        cmd += [str(input_path), str(output_path)]
        return cmd

    async def compile(self, source: str) -> bytes:
        """Compile *source* and return the PDF bytes.

        Raises:
            CompileTimeout: the compiler ran past ``timeout`` and was killed.
            CompileFailed: the compiler could not be launched, exited
                non-zero, or produced no output.
        """
        job_id = uuid.uuid4().hex
        input_path, output_path = self.job_paths(job_id)
        logger.debug("Typst job %s: compiling %d chars", job_id, len(source))

        try:
            try:
                self.workdir.mkdir(parents=True, exist_ok=True)
                input_path.write_text(source, encoding="utf-8")
                code, stdout, stderr = await run(
                    self.build_command(input_path, output_path),
                    timeout=self.timeout,
                    cwd=self.workdir,
                )
            except CommandTimeout as exc:
                logger.warning("Typst job %s timed out after %ss", job_id, self.timeout)
                raise CompileTimeout(
                    f"Typst compilation timed out after {self.timeout:g}s"
                ) from exc
            except OSError as exc:
                logger.warning("Typst job %s could not start: %s", job_id, exc)
                raise CompileFailed(f"Failed to invoke Typst: {exc}") from exc

            if code != 0:
                diagnostic = stderr or stdout or f"typst exited with code {code}"
                logger.warning("Typst job %s failed (exit %d): %s", job_id, code, diagnostic)
                raise CompileFailed(diagnostic)

            try:
                pdf = output_path.read_bytes()
            except OSError as exc:
                raise CompileFailed(
                    "Typst reported success, but no PDF output was produced."
                ) from exc

            logger.debug("Typst job %s: produced %d bytes", job_id, len(pdf))
            return pdf
        finally:
            for path in (input_path, output_path):
                try:
                    path.unlink(missing_ok=True)
                except OSError as exc:
                    logger.debug("Could not remove %s: %s", path, exc)


def get_compiler() -> TypstCompiler:
    """FastAPI dependency: a compiler configured from settings."""
    return TypstCompiler(
        [settings.typst_binary],
        timeout=settings.compile_timeout,
        workdir=settings.compile_workdir,
        font_paths=settings.typst_font_paths,
    )
