"""Installation of the external helm binary.

Usage:
    from cra.tools import HelmInstaller, RealHttpClient

    installer = HelmInstaller(http=RealHttpClient(), console=console)
    binary = installer.ensure(settings)
"""

from cra.tools.helm_installer import HelmInstaller, HelmInstallError, sha256_file
from cra.tools.http import HttpClient, HttpError, MockHttpClient, RealHttpClient

__all__ = [
    "HelmInstallError",
    "HelmInstaller",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "sha256_file",
]
