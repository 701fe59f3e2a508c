import logging
import os
import sys
import typing as t

import click

from ghref.config import Env
from ghref.refs import parse_ref_param
from ghref.refs import ReferenceVariant


logger = logging.getLogger(__name__)


class RefSpec(click.ParamType):
    """A fallback reference: a git ref, ``#<pull>``, or ``*release``."""

    name = "REFSPEC"

    def convert(
        self,
        value: t.Union[str, ReferenceVariant],
        param: t.Optional[click.Parameter],
        ctx: t.Optional[click.Context],
    ) -> ReferenceVariant:
        if not isinstance(value, str):
            return value
        try:
            return parse_ref_param(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


def env_flag_option(
    var: str, *param_decls: str, help="", process_value: t.Any = None, **kwargs: t.Any
):
    def callback(ctx: click.Context, param: click.Parameter, value: bool):
        env = ctx.ensure_object(Env)
        if process_value:
            value = process_value(ctx, param, value)
        setattr(env, var, value)

    kwargs.setdefault("expose_value", False)
    kwargs.setdefault("is_eager", True)
    kwargs.setdefault("help", help)
    kwargs["callback"] = callback
    return click.option(*param_decls, **kwargs)


def keep_going_option(*param_decls: str, **kwargs: t.Any):
    if not param_decls:
        param_decls = ("--keep-going", "-k")

    kwargs.setdefault("is_flag", True)
    return env_flag_option(
        "ignore_errors",
        *param_decls,
        help="Continue with the remaining repos if one cannot be resolved.",
        **kwargs,
    )


loglevel_flags = {
    "--debug": logging.DEBUG,
    "--quiet": logging.ERROR,
}


class CatchErrorsGroup(click.Group):
    def main(self, args=None, *params, **extra):
        if args is None:
            args = sys.argv[1:]

        module_logger = logging.getLogger("ghref")
        logflags = [arg for arg in args if arg in loglevel_flags]
        args = [arg for arg in args if arg not in loglevel_flags]
        debug = "--debug" in logflags or os.getenv("GHREF_DEBUG", "").lower() in (
            "true",
            "yes",
            "1",
        )
        if logflags:
            module_logger.setLevel(loglevel_flags[logflags[-1]])
        elif debug:
            module_logger.setLevel(logging.DEBUG)
        else:
            module_logger.setLevel(logging.INFO)

        try:
            return super().main(args, *params, **extra)
        except Exception as e:
            if debug:
                logger.exception("An unhandled exception has occurred:")
            else:
                logger.error(
                    "An unhandled exception has occurred:\n  "
                    + click.style(repr(e), "red")
                )
                logger.error(
                    "Use the --debug flag to disable clean exception handling."
                )
            sys.exit(1)
