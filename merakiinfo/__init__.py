"""Interface to the Meraki Dashboard API for route tables, licenses, and device status."""

from .version import __version__
