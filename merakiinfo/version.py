"""Print the version string."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("merakiinfo")
except PackageNotFoundError:
    # package is not installed
    __version__ = "0.0.0"

if __name__ == '__main__':
    print("v"+__version__)
