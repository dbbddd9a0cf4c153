"""Build executors -- the boundary to the editor's build pipeline.

:class:`BuildExecutor` is the interface the pipeline drives. The shipped
implementation, :class:`UnityBatchExecutor`, launches the Unity editor in
batch mode and lets an editor script inside the project perform the build.
The resolved request travels on the command line::

    Unity -batchmode -quit -projectPath <root> -logFile <log>
          -executeMethod BuildManager.Editor.BuildManager.BuildPlayer
          -bmTarget StandaloneWindows64
          -bmOutput <root>/Builds/WindowsX64/MyGame.exe
          -bmApplicationId com.Acme.MyGame
          -bmScenes Assets/Main.unity;Assets/Level1.unity

The editor script reads the ``-bm*`` arguments, calls the build pipeline, and
exits non-zero when the build fails.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from buildmanager.exceptions import BuildError
from buildmanager.models import AssetBundleRequest, BuildRequest, BuildResult, PlatformTarget

logger = logging.getLogger(__name__)

EDITOR_CLASS = "BuildManager.Editor.BuildManager"
PLAYER_METHOD = f"{EDITOR_CLASS}.BuildPlayer"
ASSET_BUNDLES_METHOD = f"{EDITOR_CLASS}.BuildAssetBundles"
PLAYER_WINDOW_METHOD = f"{EDITOR_CLASS}.ShowBuildPlayerWindow"

SCENE_SEPARATOR = ";"


class BuildExecutor(ABC):
    """Performs builds described by resolved requests."""

    @abstractmethod
    def build_player(self, request: BuildRequest) -> BuildResult:
        """Build a player. A failed build is reported, not raised."""

    @abstractmethod
    def build_asset_bundles(self, request: AssetBundleRequest) -> BuildResult:
        """Build asset bundles into ``request.output_dir``, which already exists."""


class UnityBatchExecutor(BuildExecutor):
    """Runs builds through the Unity editor's batch mode.

    Args:
        unity_path: Editor executable.
        project_root: Unity project directory passed as ``-projectPath``.
        log_dir: Directory for editor log files. ``None`` lets the editor
            write to its default log.
        timeout: Seconds before a build is aborted.
        show_built_player: Ask the editor script to reveal the player once
            the build succeeds.
        runner: ``subprocess.run`` compatible callable, replaceable in tests.
        popen: ``subprocess.Popen`` compatible callable used to start the
            interactive editor.
    """

    def __init__(
        self,
        unity_path: str,
        project_root: Path,
        log_dir: Optional[Path] = None,
        timeout: int = 3600,
        show_built_player: bool = False,
        runner: Optional[Callable[..., Any]] = None,
        popen: Optional[Callable[..., Any]] = None,
    ) -> None:
        self._unity_path = unity_path
        self._project_root = Path(project_root)
        self._log_dir = log_dir
        self._timeout = timeout
        self._show_built_player = show_built_player
        self._runner = runner or subprocess.run
        self._popen = popen or subprocess.Popen

    def build_player(self, request: BuildRequest) -> BuildResult:
        args = [
            "-bmTarget", request.target.build_target,
            "-bmOutput", request.output_path,
            "-bmApplicationId", request.application_id,
            "-bmScenes", SCENE_SEPARATOR.join(request.scenes),
        ]
        if self._show_built_player:
            args.append("-bmShowBuiltPlayer")
        return self._run(PLAYER_METHOD, request.target, request.output_path, "player", args)

    def build_asset_bundles(self, request: AssetBundleRequest) -> BuildResult:
        args = [
            "-bmTarget", request.target.build_target,
            "-bmOutput", request.output_dir,
        ]
        return self._run(
            ASSET_BUNDLES_METHOD, request.target, request.output_dir, "bundles", args
        )

    def show_build_player_window(self) -> Any:
        """Open the interactive editor on the Build Player window.

        The editor keeps running after this returns.

        Raises:
            BuildError: If the editor cannot be started.
        """
        cmd = [
            self._unity_path,
            "-projectPath", str(self._project_root),
            "-executeMethod", PLAYER_WINDOW_METHOD,
        ]
        logger.debug("Launching editor: %s", cmd)
        try:
            return self._popen(cmd)
        except OSError as exc:
            raise BuildError(f"Cannot start Unity editor at {self._unity_path}: {exc}") from exc

    def command_for(self, method: str, extra_args: list[str], log_file: Optional[Path]) -> list[str]:
        """Assemble the batch-mode command line for *method*."""
        cmd = [
            self._unity_path,
            "-batchmode",
            "-quit",
            "-projectPath", str(self._project_root),
        ]
        if log_file is not None:
            cmd += ["-logFile", str(log_file)]
        cmd += ["-executeMethod", method]
        return cmd + extra_args

    def _log_file(self, kind: str, target: PlatformTarget) -> Optional[Path]:
        if self._log_dir is None:
            return None
        self._log_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        return self._log_dir / f"{kind}-{target.name}-{stamp}.log"

    def _run(
        self,
        method: str,
        target: PlatformTarget,
        output_path: str,
        kind: str,
        extra_args: list[str],
    ) -> BuildResult:
        log_file = self._log_file(kind, target)
        cmd = self.command_for(method, extra_args, log_file)
        logger.debug("Running: %s", " ".join(cmd))

        started_at = datetime.now()
        try:
            completed = self._runner(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise BuildError(
                f"Unity build for {target.name} timed out after {self._timeout}s"
            ) from exc
        except FileNotFoundError as exc:
            raise BuildError(f"Unity editor not found at {self._unity_path}") from exc
        except OSError as exc:
            raise BuildError(f"Cannot start Unity editor at {self._unity_path}: {exc}") from exc
        finished_at = datetime.now()

        success = completed.returncode == 0
        if success:
            message = ""
        else:
            message = f"Unity exited with code {completed.returncode}"
            tail = _last_lines(completed.stderr or completed.stdout or "", 5)
            if tail:
                message += f":\n{tail}"
        logger.debug("Unity returned %s for %s", completed.returncode, target.name)

        return BuildResult(
            success=success,
            target=target,
            output_path=output_path,
            started_at=started_at,
            finished_at=finished_at,
            return_code=completed.returncode,
            log_file=str(log_file) if log_file is not None else None,
            message=message,
        )


def _last_lines(text: str, count: int) -> str:
    lines = [line for line in text.splitlines() if line.strip()]
    return "\n".join(lines[-count:])
