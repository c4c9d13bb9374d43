"""Identity side of rotation: the directory client, naming and provisioning."""

from keyrotator.identity.client import DirectoryClient
from keyrotator.identity.naming import allocate_name
from keyrotator.identity.provisioner import CredentialProvisioner

__all__ = ["CredentialProvisioner", "DirectoryClient", "allocate_name"]
