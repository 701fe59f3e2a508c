import logging
import os
import sys
import typing as t
from contextlib import AbstractContextManager
from dataclasses import dataclass
from dataclasses import fields
from dataclasses import is_dataclass
from functools import update_wrapper

if sys.version_info < (3, 10):
    import typing_extensions as te
else:
    te = t
import yaml
from click import ClickException
from click import Context
from platformdirs import PlatformDirs

from ghref.errors import EmptyFileError
from ghref.errors import ExceptionCount
from ghref.refs import DEFAULT_REF
from ghref.sources import DEFAULT_HOST

logger = logging.getLogger(__name__)

T = t.TypeVar("T")

dirs = PlatformDirs("ghref", False)
CONFIG_DIR = dirs.user_config_dir

CONFIG_FILE = os.path.join(CONFIG_DIR, "config.yaml")


def get_env_auth_token():
    return os.environ.get("GITHUB_PAT", None) or None


def get_env_host():
    return os.environ.get("GHREF_HOST", None) or None


@dataclass
class Env:
    ignore_errors = False


@dataclass(frozen=True)
class Config:
    """The ghref configuration file uses the YAML format."""

    @dataclass(frozen=True)
    class Downloading:
        thread_count: int = 8
        """The maximum number of repo specs to resolve in parallel."""

        timeout: t.Union[int, float] = 10
        """Read timeout in seconds for each API request."""

        def __post_init__(self):
            if self.thread_count < 1:
                raise ValueError(f"Invalid thread_count: '{self.thread_count}'.")
            if self.timeout <= 0:
                raise ValueError(f"Invalid timeout: '{self.timeout}'.")

    @dataclass(frozen=True)
    class Metadata:
        legacy_fields: bool = True
        """Include the legacy ``Github*`` field names in remote metadata,
        for consumers that predate the ``Remote*`` names."""

    host: str = DEFAULT_HOST
    """The GitHub API host.

    For GitHub Enterprise, use the API root of the instance, for example
    `github.hostname.com/api/v3`. Overridden by the `GHREF_HOST` environment
    variable.
    """

    username: t.Optional[str] = None
    """Username used for repo specs that do not include one.

    Deprecated: include the username in the repo spec instead.
    """

    default_ref: str = DEFAULT_REF
    """The ref used when neither the repo spec nor `--ref` provide one."""

    auth_token: t.Optional[str] = None
    """Personal access token used to access private repos.

    Overridden by the `GITHUB_PAT` environment variable.
    """

    downloading: Downloading = Downloading()
    """Options related to API requests."""

    metadata: Metadata = Metadata()
    """Options related to the output of remote metadata."""


def read_yaml(path: str, type: t.Type[T]) -> T:
    with open(path) as file:
        data = load_yaml(file, type)
    if not data:
        raise EmptyFileError(path)
    return data


def load_yaml(document: t.Any, type: t.Type[T]) -> t.Optional[T]:
    data: t.Dict[str, t.Any] = yaml.safe_load(document)
    if not data:
        return None

    return dataclass_fromdict(data, type)


def dataclass_fromdict(data: t.Dict[str, t.Any], field_type: t.Type[T]) -> T:
    type_fields = {f.name: f.type for f in fields(field_type) if f.init}
    errors = 0
    for k, v in data.items():
        if k not in type_fields:
            logger.error(f"Unknown key: '{k}'.")
            errors += 1
            continue
        # Only checks base type, so 'List[str]' is only checked as 'list'
        checkable_type = t.get_origin(type_fields[k]) or type_fields[k]
        if checkable_type is t.Union:
            checkable_type = t.get_args(type_fields[k])
        if not isinstance(v, checkable_type):
            if isinstance(type_fields[k], type) and is_dataclass(type_fields[k]):
                # recursively deserialize objects
                try:
                    if not isinstance(v, dict):
                        logger.error(f"Expected object for key '{k}'.")
                        raise ExceptionCount(1)
                    data[k] = dataclass_fromdict(v, type_fields[k])
                except ExceptionCount as e:
                    errors += e.count
            else:
                logger.error(f"Invalid value for key '{k}': '{v}'.")
                errors += 1
        elif checkable_type is int and isinstance(v, bool):
            logger.error(f"Invalid value for key '{k}': '{v}'.")
            errors += 1
    if errors:
        raise ExceptionCount(errors)

    try:
        return field_type(**data)
    except ValueError as e:
        logger.error(str(e))
        raise ExceptionCount(1)
    except TypeError:
        import inspect

        required_args = [
            arg
            for arg in inspect.signature(field_type.__init__).parameters.values()
            if arg.default == inspect.Parameter.empty
        ]
        for arg in required_args:
            if arg.name != "self" and arg.name not in data:
                logger.error(f"Missing required key: '{arg.name}'")
                errors += 1
        if errors > 0:
            raise ExceptionCount(errors)
        raise  # In case the error comes from something else


class UserInfo(AbstractContextManager):  # pyright: ignore[reportMissingTypeArgument]
    _config: t.Optional[Config] = None

    @property
    def config(self):
        if not self._config:
            try:
                self._config = read_yaml(CONFIG_FILE, Config)
                logger.debug(f"User config loaded from '{CONFIG_FILE}'.")
            except (FileNotFoundError, EmptyFileError):
                self._config = Config()
            except ExceptionCount as e:
                raise ClickException(
                    f"{e.count} error(s) were encountered while loading config."
                )
            except yaml.error.YAMLError as e:
                raise ClickException(str(e))

        return self._config

    def __enter__(self):
        return self

    def __exit__(self, *exec_details):
        return None


P = te.ParamSpec("P")
R = t.TypeVar("R")


def wrap_config_param(
    f: t.Callable[te.Concatenate[Config, P], R]
) -> t.Callable[te.Concatenate[t.Union[Context, UserInfo, Config], P], R]:
    """Convenience wrapper to transform a passed Context or UserInfo into a Config"""

    def wrapper(config, *args: P.args, **kwargs: P.kwargs) -> R:
        if isinstance(config, Context):
            config = config.ensure_object(UserInfo)
        if isinstance(config, UserInfo):
            config = config.config
        return f(config, *args, **kwargs)

    return update_wrapper(wrapper, f)
