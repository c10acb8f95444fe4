#!/usr/bin/env python3
r"""Command-line interface to report on Meraki organizations and networks.

Usage::
    $ meraki-info --help
    $ meraki-info --org "Main Office" --format json route-tables
"""
import argparse
import logging
import platform
import signal
from os import environ
from sys import exit as sysexit
from sys import stdout

from milc import set_metadata  # this function needed to set metadata immediately below

from merakiinfo import __version__ as merakiinfo_version

from .aggregate import Aggregator
from .exceptions import MerakiAPIError, MerakiConfigError
from .output import access_records, access_report, highlight, record_type, render, write
from .transport import Transport
from .utility import DEFAULT_BASE_URL, FILENAME_PREFIXES, FORMATS, count_noun, default_filename

set_metadata(version=f"v{merakiinfo_version}", author="meraki-info", name="meraki-info")  # must precede import milc.cli
from milc import cli  # this uses metadata set above
from milc.subcommand import config  # noqa: F401 this creates the config subcommand

if platform.system() == 'Linux':
    # this allows the app the terminate gracefully when piped to a truncating consumer like `head`
    signal.signal(signal.SIGPIPE, signal.SIG_DFL)

LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}


@cli.argument('-k', '--apikey', default=environ.get('MERAKI_APIKEY'), help='Dashboard API key (default is env MERAKI_APIKEY)')
@cli.argument('-O', '--org', default=environ.get('MERAKI_ORG'), help='ID or caseless name of the organization (default is env MERAKI_ORG)')
@cli.argument('-N', '--network', default=environ.get('MERAKI_NET'), help='ID or caseless name of the network (default is env MERAKI_NET)')
@cli.argument('-a', '--all', dest='all', arg_only=True, action='store_true', default=False,
              help='every network of the organization or, without --org, of every organization')
@cli.argument('-f', '--format', dest='format', arg_only=True, default='text', choices=FORMATS, help='format the output')
@cli.argument('-o', '--output', dest='output', arg_only=True, default='-',
              help="write to this file, '-' for stdout, 'default' for a generated file name")
@cli.argument('-L', '--log-level', default='error', choices=list(LOG_LEVELS.keys()), help='log level')
@cli.argument('-S', '--style', help="highlighting style", default='material', choices=["bw", "rrt", "arduino", "monokai", "material", "emacs", "vim", "one-dark"])
@cli.argument('--base-url', default=DEFAULT_BASE_URL, help=argparse.SUPPRESS)
@cli.argument('--proxy', help=argparse.SUPPRESS)
@cli.entrypoint('report on Meraki organizations and networks')
def main(cli):
    """Print help when no command is given."""
    cli.log.error(f"a command is required, try '{cli.prog_name} --help'")
    sysexit(1)


@cli.subcommand('summarize the organizations and networks the API key can access')
def access(cli):
    """Summarize access."""
    run(cli, 'access')


@cli.subcommand('route tables of a network or every network')
def route_tables(cli):
    """Find the routes of networks."""
    run(cli, 'route-tables')


@cli.subcommand('licenses of an organization or network')
def licenses(cli):
    """Find licenses."""
    run(cli, 'licenses')


@cli.subcommand('devices that are not online')
def down(cli):
    """Find devices that are down."""
    run(cli, 'down')


@cli.subcommand('devices that are alerting')
def alerting(cli):
    """Find devices that are alerting."""
    run(cli, 'alerting')


def check_options(command: str, apikey: str, org: str, network: str, all_networks: bool):
    """Raise MerakiConfigError if the options do not make sense together."""
    if not apikey:
        raise MerakiConfigError("API key is required, use --apikey or the MERAKI_APIKEY environment variable")
    if command == 'access':
        if all_networks:
            raise MerakiConfigError("cannot use --all with access, access alone shows every organization and network")
        if network:
            raise MerakiConfigError("cannot use --network with access, access shows every network of the organization")
        return
    if not org and not all_networks:
        raise MerakiConfigError("organization is required unless using --all or access, use --org or the MERAKI_ORG environment variable")
    if network and all_networks:
        raise MerakiConfigError("cannot use --network with --all, --all includes every network of the organization")


def configure_logging(cli, fmt: str):
    """Apply the log level, --verbose wins, and structured output is never interrupted by INFO."""
    if cli.config.general.verbose:
        level = logging.DEBUG
    else:
        level = LOG_LEVELS.get(cli.config.general.log_level or 'error', logging.ERROR)
    if fmt != 'text' and level < logging.WARN:
        # don't emit INFO messages to stdout because they will break deserialization
        if not cli.args.output or cli.args.output == '-':
            level = logging.WARN
    cli.log.setLevel(level)


def run(cli, command: str):
    """Resolve the scope, collect the records of a command, and write them."""
    fmt = cli.args.format
    configure_logging(cli, fmt)
    organization = cli.config.general.org or ""
    network = cli.config.general.network or ""
    try:
        check_options(command, cli.config.general.apikey, organization, network, cli.args.all)
    except MerakiConfigError as e:
        cli.log.error(str(e))
        sysexit(1)

    spinner = get_spinner(cli, "working")
    try:
        transport = Transport(
            api_key=cli.config.general.apikey,
            base_url=cli.config.general.base_url or DEFAULT_BASE_URL,
            proxy=cli.config.general.proxy,
            logger=cli.log,
        )
        aggregator = Aggregator(transport, logger=cli.log)
        with spinner:
            spinner.text = "Resolving organization and network"
            organization_id = aggregator.orgs.resolve_organization_id(organization)
            network_id = aggregator.orgs.resolve_network_id(organization_id, network)
            if command == 'access':
                spinner.text = "Finding organizations and networks"
                pairs = aggregator.access_summary(organization_id)
                if fmt == 'text':
                    document = access_report(pairs).encode('utf-8')
                else:
                    document = render(access_records(pairs), fmt, kind=record_type(command))
                count = len(pairs)
            else:
                spinner.text = f"Collecting {command}"
                kind = record_type(command, consolidate=cli.args.all)
                records = aggregator.collect(command, organization_id, network_id, consolidate=cli.args.all)
                document = render(records, fmt, kind=kind)
                count = len(records)
            if cli.args.output == 'default':
                destination = default_output_filename(aggregator, command, organization_id, network_id, fmt)
            else:
                destination = cli.args.output
    except MerakiAPIError as e:
        spinner.fail("Failed")
        cli.log.error(str(e))
        sysexit(1)
    except KeyboardInterrupt:
        spinner.fail("Cancelled")
        sysexit(1)

    if count == 0:
        cli.log.warning(f"found nothing for {command}, writing an empty {fmt} document")
    else:
        cli.log.info(f"found {count_noun(count, 'record')} for {command}")

    to_stdout = not destination or destination == '-'
    if to_stdout and cli.config.general.color and stdout.isatty():
        document = highlight(document.decode('utf-8'), fmt, style=cli.config.general.style).encode('utf-8')
    try:
        write(document, destination)
    except OSError as e:
        cli.log.error(f"failed to write {destination}, caught {e}")
        sysexit(1)
    if not to_stdout:
        cli.log.info(f"wrote {destination}")


def default_output_filename(aggregator: Aggregator, command: str, organization_id: str, network_id: str, fmt: str):
    """Compose a file name from the command and the names of the organization and network.

    Names fall back to the IDs if they are not in the listings.
    """
    if organization_id:
        organization_name = organization_id
        for o in aggregator.orgs.find_organizations():
            if o.id == organization_id:
                organization_name = o.name
                break
    else:
        organization_name = "AllOrganizations"
    network_name = ""
    if network_id:
        network_name = network_id
        for n in aggregator.orgs.find_networks(organization_id):
            if n.id == network_id:
                network_name = n.name
                break
    return default_filename(FILENAME_PREFIXES[command], organization_name, network_name, fmt)


def get_spinner(cli, text):
    """
    Get a spinner.

    Enabled if stdout is a tty and not verbose, else disabled to not corrupt
    structured output.
    """
    inner_spinner = cli.spinner(text=text, spinner='dots12', placement='left', color='green', stream=stdout)
    if not stdout.isatty():
        inner_spinner.enabled = False
        cli.log.debug("spinner disabled because stdout is not a tty")
    elif cli.config.general.verbose:
        inner_spinner.enabled = False
        cli.log.debug("spinner disabled because DEBUG is enabled")
    else:
        inner_spinner.enabled = True
    return inner_spinner


if __name__ == '__main__':
    cli()
