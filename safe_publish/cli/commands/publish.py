"""Publish command implementation"""

import sys
from pathlib import Path

import click

from ..utils.output import console, format_pipeline_result, print_error
from ...api import Publisher
from ...api.exceptions import SafePublishError
from ...constants import (
    CompareMode,
    EXIT_CODES,
    EXIT_CONFIG_ERROR,
    EXIT_OK,
    MSG_PUBLISH_START,
)


def exit_code_for(error: Exception) -> int:
    """Map an error to the process exit code of its failure class"""
    if isinstance(error, SafePublishError):
        return EXIT_CODES.get(error.error_code, EXIT_CONFIG_ERROR)
    return EXIT_CONFIG_ERROR


@click.command(context_settings={"ignore_unknown_options": True})
@click.option('--manifest-path', default=None,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Path to Cargo.toml')
@click.option('--package', '-p', default=None,
              help='Package to publish inside a workspace')
@click.option('--allow-dirty', is_flag=True,
              help='Report repository problems as warnings instead of failing')
@click.option('--dry-run', is_flag=True,
              help='Stop after the verification build, upload nothing')
@click.option('--no-verify', is_flag=True,
              help='Skip the verification build')
@click.option('--compare-mode', default=None,
              type=click.Choice([mode.value for mode in CompareMode], case_sensitive=False),
              help='How published file contents are compared')
@click.option('--config', 'config_path', default=None,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Configuration file')
@click.argument('cargo_args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def publish(ctx, manifest_path, package, allow_dirty, dry_run, no_verify,
            compare_mode, config_path, cargo_args):
    """Publish a crate and verify what reached the registry

    Checks that every file cargo would package is committed, runs the
    verification build, deletes the verified archive, uploads, then
    downloads the published crate and compares it with the local files.

    Remaining arguments are passed to cargo publish.

    Examples:
        # Publish the crate in the current directory
        safe-publish publish

        # Publish one member of a workspace
        safe-publish publish -p my-crate

        # Only verify, do not upload
        safe-publish publish --dry-run

        # Pass extra arguments to cargo
        safe-publish publish --features full
    """
    publisher = Publisher(config_path=config_path)

    try:
        loaded = publisher.load(manifest_path, package)
    except SafePublishError as e:
        print_error("Cannot load package", e)
        sys.exit(exit_code_for(e))

    manifest = loaded.manifest
    if not getattr(ctx.obj, "quiet", False):
        console.print(MSG_PUBLISH_START.format(
            name=manifest.name,
            version=manifest.version,
            root=manifest.root
        ), markup=False, highlight=False)

    result = publisher.publish(
        manifest_path=manifest_path,
        package=package,
        allow_dirty=allow_dirty,
        dry_run=dry_run,
        no_verify=no_verify,
        compare_mode=CompareMode(compare_mode.lower()) if compare_mode else None,
        extra_args=cargo_args
    )

    format_pipeline_result(result)
    sys.exit(EXIT_OK if result.success else exit_code_for(result.error))
