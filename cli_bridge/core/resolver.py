import shutil

from pydantic import BaseModel, ConfigDict

from cli_bridge.models.config import CliConfig
from cli_bridge.utils.logging import get_logger


logger = get_logger("resolver")


class ResolvedCommand(BaseModel):
    """How to invoke the CLI: an executable plus arguments that precede the tool's own flags."""

    model_config = ConfigDict(frozen=True)

    executable: str
    leading_arguments: tuple[str, ...] = ()

    def argv(self, arguments: list[str]) -> list[str]:
        """Full argument vector for the given tool arguments."""
        return [self.executable, *self.leading_arguments, *arguments]


class CommandResolver:
    """
    Decides once per process how the CLI is invoked.

    A binary found on PATH is invoked directly. Otherwise the tool is run
    through the package runner (``npx @google/gemini-cli`` by default), which
    fetches it on demand. Resolution never fails; a runner that is missing as
    well only surfaces later as a spawn error.
    """

    def __init__(self, config: CliConfig):
        self.config = config
        self._cached: ResolvedCommand | None = None

    @property
    def cached(self) -> ResolvedCommand | None:
        return self._cached

    def resolve(self) -> ResolvedCommand:
        """Return the cached command, resolving it on first use."""
        if self._cached is not None:
            return self._cached

        path = shutil.which(self.config.executable)
        if path:
            logger.info(f"'{self.config.executable}' found at: {path}")
            command = ResolvedCommand(executable=self.config.executable)
        else:
            command = ResolvedCommand(
                executable=self.config.package_runner,
                leading_arguments=(*self.config.package_runner_args, self.config.package_name),
            )
            logger.warning(
                f"'{self.config.executable}' not found in PATH, falling back to "
                f"'{' '.join(command.argv([]))}'"
            )

        self._cached = command
        return command

    def clear_cache(self) -> None:
        """Force a fresh lookup on the next resolve()."""
        logger.debug("Clearing resolved command cache")
        self._cached = None
