"""
bootcheck CLI - bootstrap a development environment and run quality checks.

Commands:
    bootcheck setup [-f]   Install the package manager, sync dependencies,
                           create the config file and log files; with -f,
                           follow the server log afterwards
    bootcheck check        Run lint, format, import sorting and unit tests
"""

import sys

import click

from bootcheck import console
from bootcheck.config import get_config
from bootcheck.logger import configure_logging
from bootcheck.models import FAILURE, SUCCESS, RunConfig
from bootcheck.provision import Provisioner, build_provisioning_pipeline
from bootcheck.quality import (
    FAILED_BANNER,
    HEADER,
    PASSED_BANNER,
    QualityChecks,
    build_quality_pipeline,
)

INTERRUPTED = 130


def _load_config():
    config = get_config()
    configure_logging(config.log_level, config.log_format)
    return config


@click.command()
@click.option("-f", "--follow", is_flag=True, help="Follow the server log once setup completes.")
def setup(follow: bool):
    """Prepare a local development environment."""
    config = _load_config()
    run_config = RunConfig(follow_logs=follow)

    console.info(f"🚀 Development environment setup ({config.package_manager})")
    console.blank()

    pipeline = build_provisioning_pipeline(config, run_config, Provisioner(config, run_config))
    try:
        result = pipeline.run()
    except KeyboardInterrupt:
        console.blank()
        console.warning("Interrupted")
        sys.exit(INTERRUPTED)

    if result.aborted:
        console.error(f"Setup aborted at step '{result.halted_at}'")
        sys.exit(result.exit_code)


@click.command()
def check():
    """Run the code quality checks and report an aggregate result."""
    config = _load_config()

    console.header(HEADER)
    pipeline = build_quality_pipeline(config, QualityChecks(config))
    try:
        result = pipeline.run()
    except KeyboardInterrupt:
        console.blank()
        console.warning("Interrupted")
        sys.exit(INTERRUPTED)

    if result.aborted:
        sys.exit(FAILURE)

    console.blank()
    console.rule()
    if result.ok:
        console.success(PASSED_BANNER)
    else:
        console.error(FAILED_BANNER)
    console.rule()

    sys.exit(SUCCESS if result.ok else FAILURE)


@click.group()
@click.version_option(package_name="bootcheck")
def main():
    """bootcheck - development environment bootstrap and code quality checks."""
    pass


main.add_command(setup)
main.add_command(check)


if __name__ == "__main__":
    main()
