"""Command line entrypoint for elbfront."""

import json
import logging
import sys
from typing import Any, Dict, Optional

import click
from botocore.exceptions import BotoCoreError, ClientError

from .config import default_region, front_end_spec_from_definition, load_definition
from .errors import FrontEndError
from .reconciler import FrontEndReconciler


@click.group()
@click.option('--region', default=None, help='AWS region (defaults to ELBFRONT_REGION / AWS_DEFAULT_REGION)')
@click.option('--app-id', required=True, help='Application identifier')
@click.option('--dry-run', is_flag=True, help='Only log the actions that would be taken')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, region, app_id, dry_run, verbose):
    """Manage the ELBv2 front end of an application."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    ctx.ensure_object(dict)
    ctx.obj['region'] = region or default_region()
    ctx.obj['app_id'] = app_id
    ctx.obj['dry_run'] = dry_run


def _reconciler(ctx, definition_path: str) -> FrontEndReconciler:
    spec = front_end_spec_from_definition(load_definition(definition_path))
    return FrontEndReconciler(
        ctx.obj['app_id'],
        ctx.obj['region'],
        spec,
        dry_run=ctx.obj['dry_run'],
    )


def _fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@main.command()
@click.argument('definition', type=click.Path(exists=True, dir_okay=False))
@click.option('--front-port', type=int, default=80, help='Port of the front container')
@click.pass_context
def converge(ctx, definition, front_port):
    """Create the load balancer, target group and listeners if missing."""
    try:
        if not _reconciler(ctx, definition).converge(front_port):
            click.echo("No elb_v2 front end is configured")
    except (FrontEndError, ClientError, BotoCoreError) as e:
        _fail(e)


@main.command()
@click.argument('definition', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def tune(ctx, definition):
    """Apply load balancer and target group attributes."""
    try:
        _reconciler(ctx, definition).tune()
    except (FrontEndError, ClientError, BotoCoreError) as e:
        _fail(e)


@main.command()
@click.argument('definition', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def retire(ctx, definition):
    """Tear down the front end."""
    try:
        if not _reconciler(ctx, definition).retire():
            click.echo("No elb_v2 front end is configured")
    except (FrontEndError, ClientError, BotoCoreError) as e:
        _fail(e)


@main.command()
@click.argument('definition', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def status(ctx, definition):
    """Show where each listener forwards traffic."""
    try:
        reconciler = _reconciler(ctx, definition)
        if reconciler.spec is None:
            click.echo("No elb_v2 front end is configured")
            return
        lines = reconciler.status_lines(reconciler.spec.container_name, reconciler.spec.container_port)
        if not lines:
            click.echo(f"ELBv2 {reconciler.load_balancer_name} doesn't exist")
        for line in lines:
            click.echo(f"  {line}")
    except (FrontEndError, ClientError, BotoCoreError) as e:
        _fail(e)


@main.command()
@click.argument('definition', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def params(ctx, definition):
    """Print the ECS load balancer registration parameters as JSON."""
    try:
        result: Optional[Dict[str, Any]] = _reconciler(ctx, definition).load_balancer_params_for_front_end()
    except (FrontEndError, ClientError, BotoCoreError) as e:
        _fail(e)
        return
    if result is None:
        click.echo("No elb_v2 front end is configured")
        return
    click.echo(json.dumps(result))


if __name__ == '__main__':
    main()
