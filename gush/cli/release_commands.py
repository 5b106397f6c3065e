# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Release commands: create, list, remove, assets, upload.
"""

import mimetypes
from pathlib import Path

import click

from gush.cli.helpers import console, echo_json, handle_adapter_errors, print_success
from gush.cli.tables import build_asset_table, build_release_table

DEFAULT_CONTENT_TYPE = 'application/octet-stream'


def _release_id(value: str):
    """GitHub and Bitbucket use numeric ids, GitLab uses the tag name."""
    return int(value) if value.isdigit() else value


@click.group(name='release')
def release_group():
    """Release commands.

    \b
    Commands:
        create   Create a release for a tag
        list     List releases
        remove   Delete a release
        assets   List the assets of a release
        upload   Attach a file to a release
    """
    pass


@release_group.command('create')
@click.argument('tag')
@click.option('--name', default=None, help='Release title (default: the tag)')
@click.option('--body', default=None, help='Release notes')
@click.option('--target', 'target_commitish', default=None, help='Branch or commit to tag')
@click.option('--draft', is_flag=True)
@click.option('--prerelease', is_flag=True)
@click.pass_obj
@handle_adapter_errors
def release_create(obj, tag, name, body, target_commitish, draft, prerelease):
    """Create a release for TAG.

    \b
    Examples:
        gush release create v1.2.0 --body "Bug fixes"
        gush release create v2.0.0-rc1 --prerelease
    """
    parameters = {'name': name or tag, 'draft': draft, 'prerelease': prerelease}
    if body is not None:
        parameters['body'] = body
    if target_commitish:
        parameters['target_commitish'] = target_commitish

    link = obj.adapter.create_release(tag, parameters)
    print_success(f'Release {tag} created (id: {link.id})')
    if link.url:
        click.echo(link.url)


@release_group.command('list')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON for scripting')
@click.pass_obj
@handle_adapter_errors
def release_list(obj, as_json):
    """List releases."""
    releases = obj.adapter.get_releases()
    if as_json:
        echo_json([release.to_dict() for release in releases])
        return
    if not releases:
        console.print('[yellow]No releases found.[/yellow]')
        return
    console.print(build_release_table(releases))


@release_group.command('remove')
@click.argument('release_id')
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation')
@click.pass_obj
@handle_adapter_errors
def release_remove(obj, release_id, yes):
    """Delete a release (the git tag is kept)."""
    if not yes and not click.confirm(f'Remove release {release_id}?', default=False):
        console.print('[yellow]Cancelled.[/yellow]')
        return
    obj.adapter.remove_release(_release_id(release_id))
    print_success(f'Release {release_id} removed')


@release_group.command('assets')
@click.argument('release_id')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON for scripting')
@click.pass_obj
@handle_adapter_errors
def release_assets(obj, release_id, as_json):
    """List the assets attached to a release."""
    assets = obj.adapter.get_release_assets(_release_id(release_id))
    if as_json:
        echo_json([asset.to_dict() for asset in assets])
        return
    if not assets:
        console.print('[yellow]No assets.[/yellow]')
        return
    console.print(build_asset_table(assets))


@release_group.command('upload')
@click.argument('release_id')
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--name', default=None, help='Asset name (default: the file name)')
@click.option('--content-type', default=None, help='MIME type (default: guessed from the file name)')
@click.pass_obj
@handle_adapter_errors
def release_upload(obj, release_id, path, name, content_type):
    """Upload PATH as an asset of a release."""
    name = name or path.name
    content_type = content_type or mimetypes.guess_type(name)[0] or DEFAULT_CONTENT_TYPE

    asset_id = obj.adapter.create_release_assets(_release_id(release_id), name, content_type, path.read_bytes())
    print_success(f'Uploaded {name} ({content_type}) as asset {asset_id}')


def register_release_commands(cli):
    """Register release commands with the root CLI group."""
    cli.add_command(release_group)
    cli.add_alias('release', 'r')
