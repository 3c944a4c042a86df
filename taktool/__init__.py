"""taktool: plugin and data package builder.

Builds ``product.infz`` plugin bundles from a directory of APKs (metadata
extraction, revision reconciliation, canonical renaming, icon resolution and
the ``product.inf`` inventory), and data packages from arbitrary directories.
"""

__version__ = "0.1.0"
__description__ = "Plugin and data package builder"

from taktool.core.data_package import DataPackager
from taktool.core.packager import PluginsPackager
from taktool.cli.app import app as cli

__all__ = ["PluginsPackager", "DataPackager", "cli", "__version__"]
