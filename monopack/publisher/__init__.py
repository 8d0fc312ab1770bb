"""Registry access and publishing."""

from monopack.publisher.emitter import BundleEmitter
from monopack.publisher.registry_client import PackageVersionDetails, RegistryClient

__all__ = ["BundleEmitter", "PackageVersionDetails", "RegistryClient"]
