"""Run user-configured shell hooks."""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from worktree_pilot.utils.platform import Platform, current_platform

logger = logging.getLogger(__name__)

DEFAULT_HOOK_TIMEOUT = 30


class HookRunner:
    """Executes a shell snippet in a working directory."""

    def __init__(self, timeout: float = DEFAULT_HOOK_TIMEOUT):
        self.timeout = timeout

    def _shell_command(self, script: str) -> list[str]:
        if current_platform() == Platform.WINDOWS:
            return ["cmd.exe", "/c", script]
        return ["/bin/bash", "-c", script]

    def run(
        self,
        script: Optional[str],
        working_dir: Path,
        run_async: bool = False,
        timeout: Optional[float] = None,
    ) -> bool:
        """
        Run script in working_dir.

        Args:
            script: Shell snippet. Blank scripts are skipped.
            working_dir: Directory to run the script in.
            run_async: Start the script and return without waiting for it.
            timeout: Seconds to wait before the script is killed.

        Returns:
            True if the script succeeded, was skipped, or was started in the
            background. False on a non-zero exit, a timeout or a spawn failure.
        """
        if not script or not script.strip():
            return True

        command = self._shell_command(script)
        logger.info(f"Running hook in {working_dir}: {script}")

        if run_async:
            try:
                subprocess.Popen(
                    command,
                    cwd=working_dir,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
            except OSError as e:
                logger.error(f"Failed to start background hook: {e}")
                return False
            return True

        try:
            result = subprocess.run(
                command,
                cwd=working_dir,
                capture_output=True,
                text=True,
                timeout=timeout or self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"Hook timed out after {timeout or self.timeout}s: {script}")
            return False
        except OSError as e:
            logger.error(f"Failed to run hook: {e}")
            return False

        if result.stdout.strip():
            logger.info(result.stdout.strip())
        if result.returncode != 0:
            logger.error(
                f"Hook exited with code {result.returncode}: {result.stderr.strip()}"
            )
            return False
        return True
