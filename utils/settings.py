"""Project wide configuration dataclasses and default values."""

from dataclasses import dataclass
from pathlib import Path

# Root dir
BASE_DIR = Path(__file__).resolve().parent.parent

# Common file name extensions for saved captures
IMAGE_EXT = ".png"
CLOUD_EXT = ".ply"
POINTS_EXT = ".npy"


@dataclass(frozen=True)
class Paths:
    """
    Dataclass aggregating all important filesystem paths used in the project.
    These paths are used for organizing captures, calibration results, logs, etc.
    """

    CAPTURES_DIR: Path = BASE_DIR / "captures"
    RESULTS_DIR: Path = BASE_DIR / "calib_res"
    LOG_DIR: Path = BASE_DIR / ".logs"
    CONF_DIR: Path = BASE_DIR / "conf"


paths = Paths()


@dataclass(frozen=True)
class LoggingCfg:
    """
    Logging configuration for the project.

    - level: Log level ("INFO", "DEBUG", etc.)
    - json: Enable/disable structured JSON logging.
    - log_dir: Directory where log files are stored.
    - log_format: Console log output format.
    - log_file_format: File log output format.
    - progress_bar_format: TQDM progress bar format.
    """

    level: str = "INFO"
    json: bool = True
    log_dir: Path = Path(".logs")
    log_format: str = (
        "<green>{time:MM-DD HH:mm:ss}</green>"
        "[<level>{level:.3}</level>]"
        "[<cyan>{extra[module]:.16}</cyan>:<cyan>{line:<3}</cyan>]"
        "<level>{message}</level>"
    )
    log_file_format: str = "{time:YYYY-MM-DD HH:mm:ss}[{level}][{file}:{line}]{message}"
    progress_bar_format: str = (
        "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"
    )


logging = LoggingCfg()


@dataclass(frozen=True)
class EnsensoCfg:
    """
    Ensenso stereo camera defaults:
    - capture timeout for Capture/Retrieve commands
    - whether to bind a monocular overlay camera
    - number of pattern observations collected for calibration
    - optional JSON parameter file applied after connecting
    """

    timeout_ms: int = 1500
    require_overlay: bool = False
    num_patterns: int = 5
    parameters_file: str | None = None
    output_dir: str = str(paths.CAPTURES_DIR)
    calib_output: str = str(paths.RESULTS_DIR / "pattern_pose.json")


# Ensenso camera configuration
camera = EnsensoCfg()

# Vendor point maps and pattern poses are expressed in millimeters
MM_TO_M = 0.001

__all__ = [
    "Paths",
    "LoggingCfg",
    "EnsensoCfg",
    "paths",
    "logging",
    "camera",
    "IMAGE_EXT",
    "CLOUD_EXT",
    "POINTS_EXT",
    "MM_TO_M",
]
