# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Command Line Interface for Derrick.
"""
import logging
import sys

import click

from .. import __version__
from ..MANAGERS.lifecycle_orchestrator import ExecutionReport
from ..MANAGERS.service_orchestrator import ServiceOrchestrator
from ..MODELS.dependencies import DependencyKind
from ..MODELS.options import Options
from ..PARSERS.config_parser import ConfigParser
from ..exceptions import DerrickError

CASCADE_KINDS = [kind.value for kind in DependencyKind]


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.option('--config', '-c', default='', help='Config file to read from')
@click.option('--target', '-t', default='', help='Group or container to execute the command for')
@click.option('--cascade-dependencies', '-d', type=click.Choice(CASCADE_KINDS), default='none',
              help='Also apply the command for the containers that (any of) the explicitly targeted one(s) depend on')
@click.option('--cascade-affected', '-a', type=click.Choice(CASCADE_KINDS), default='none',
              help='Also apply the command for the containers depending on (any of) the explicitly targeted one(s)')
@click.pass_context
def cli(ctx, verbose, config, target, cascade_dependencies, cascade_affected):
    """
    Derrick - Lift containers with ease.

    Orchestrates Docker containers described in a JSON or YAML file
    (derrick.json, derrick.yaml or derrick.yml by default).
    See the corresponding docker commands for more information.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj['options'] = Options(
        verbose=verbose,
        config=config,
        target=target,
        cascade_dependencies=cascade_dependencies,
        cascade_affected=cascade_affected,
    )


def _orchestrator(ctx) -> ServiceOrchestrator:
    """
    Loads the configuration and builds the orchestrator for the current options.
    """
    options = ctx.obj['options']
    config = ConfigParser().parse(options.config)
    return ServiceOrchestrator(config, options)


def _run(ctx, command, **options):
    """
    Runs a command against the orchestrator, turning derrick errors into an exit status.
    """
    ctx.obj['options'] = ctx.obj['options'].model_copy(update=options)
    try:
        report = command(_orchestrator(ctx))
    except DerrickError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    _exit_on_failures(report)
    return report


def _exit_on_failures(report: ExecutionReport):
    if report.ok:
        return
    for name, error in report.failed.items():
        click.echo(f"Error: {name}: {error}", err=True)
    sys.exit(1)


@cli.command()
@click.option('--recreate', '-r', is_flag=True,
              help='Recreate containers (kill and remove containers, provision images, run containers)')
@click.option('--no-cache', '-n', 'nocache', is_flag=True, help='Build the image without any cache')
@click.pass_context
def lift(ctx, recreate, nocache):
    """Build or pull images, then run or start the containers."""
    _run(ctx, lambda o: o.lift(), recreate=recreate, nocache=nocache)


@cli.command()
@click.option('--no-cache', '-n', 'nocache', is_flag=True, help='Build the image without any cache')
@click.pass_context
def provision(ctx, nocache):
    """Build or pull images."""
    _run(ctx, lambda o: o.provision(), nocache=nocache)


@cli.command()
@click.option('--recreate', '-r', is_flag=True,
              help='Recreate containers (kill and remove containers first)')
@click.pass_context
def run(ctx, recreate):
    """Run the containers."""
    _run(ctx, lambda o: o.run(), recreate=recreate)


@cli.command()
@click.option('--kill', '-k', is_flag=True, help='Kill containers if they are running first')
@click.pass_context
def rm(ctx, kill):
    """Remove the containers."""
    _run(ctx, lambda o: o.rm(), kill=kill)


@cli.command()
@click.pass_context
def kill(ctx):
    """Kill the containers."""
    _run(ctx, lambda o: o.kill())


@cli.command()
@click.pass_context
def start(ctx):
    """Start the containers."""
    _run(ctx, lambda o: o.start())


@cli.command()
@click.pass_context
def stop(ctx):
    """Stop the containers."""
    _run(ctx, lambda o: o.stop())


@cli.command()
@click.pass_context
def pause(ctx):
    """Pause the containers."""
    _run(ctx, lambda o: o.pause())


@cli.command()
@click.pass_context
def unpause(ctx):
    """Unpause the containers."""
    _run(ctx, lambda o: o.unpause())


@cli.command()
@click.pass_context
def push(ctx):
    """Push the containers."""
    _run(ctx, lambda o: o.push())


@cli.command()
@click.option('--no-trunc', 'notrunc', is_flag=True, help="Don't truncate output")
@click.pass_context
def status(ctx, notrunc):
    """Display status of containers"""
    report = _run(ctx, lambda o: o.status(), notrunc=notrunc)
    click.echo(f"{'NAME':20} {'IMAGE':25} {'ID':15} {'RUNNING':8} {'IP':15}")
    click.echo("-" * 87)
    for row in report.statuses:
        click.echo(f"{row.name:20} {row.image:25} {row.id:15} {row.running:8} {row.ip:15}")


@cli.command()
def version():
    """Display version"""
    click.echo(f"v{__version__}")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
